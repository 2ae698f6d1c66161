"""Output formatting for the histgrab CLI.

Implements JSON, JSONL, and human-readable output modes.
stdout contains only the listing and results: the discovery listing
first, then on --gather the collection result as its own JSON line.
stderr carries logs and diagnostics.
"""

import json
import sys
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

from histgrab.models.run import CollectionResult, DiscoveredFile, LocateResult

OutputFormat = Literal["json", "jsonl", "human"]


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for histgrab types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        return super().default(obj)


def output_json(data: Any, file: Any = None) -> None:
    """Output data as JSON to stdout.

    Args:
        data: Data to output (dict, list, or Pydantic model)
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    if isinstance(data, BaseModel):
        output = data.model_dump(mode="json")
    else:
        output = data

    json.dump(output, file, cls=JSONEncoder, ensure_ascii=False)
    file.write("\n")
    file.flush()


def output_jsonl(records: Iterator[Any], file: Any = None) -> None:
    """Output records as JSONL (one JSON object per line) to stdout.

    Args:
        records: Iterator of records (dicts or Pydantic models)
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    for record in records:
        if isinstance(record, BaseModel):
            output = record.model_dump(mode="json")
        else:
            output = record
        json.dump(output, file, cls=JSONEncoder, ensure_ascii=False)
        file.write("\n")
        file.flush()


def output_human(data: Any, title: str | None = None, file: Any = None) -> None:
    """Output data in human-readable format to stdout.

    Args:
        data: Data to output
        title: Optional title for the output
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    if title:
        file.write(f"\n{title}\n")
        file.write("=" * len(title) + "\n\n")

    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")

    if isinstance(data, dict):
        _format_dict(data, file)
    elif isinstance(data, list):
        _format_list(data, file)
    else:
        file.write(str(data) + "\n")

    file.flush()


def _format_dict(data: dict[str, Any], file: Any, indent: int = 0) -> None:
    """Format a dictionary for human-readable output."""
    prefix = "  " * indent
    for key, value in data.items():
        if isinstance(value, dict):
            file.write(f"{prefix}{key}:\n")
            _format_dict(value, file, indent + 1)
        elif isinstance(value, list):
            file.write(f"{prefix}{key}:\n")
            _format_list(value, file, indent + 1)
        else:
            file.write(f"{prefix}{key}: {value}\n")


def _format_list(data: list[Any], file: Any, indent: int = 0) -> None:
    """Format a list for human-readable output."""
    prefix = "  " * indent
    for i, item in enumerate(data):
        if isinstance(item, dict):
            file.write(f"{prefix}[{i}]:\n")
            _format_dict(item, file, indent + 1)
        else:
            file.write(f"{prefix}- {item}\n")


class OutputFormatter:
    """Encapsulates stdout output for the histgrab command.

    A disabled formatter writes nothing at all.
    """

    def __init__(self, format: OutputFormat = "human", enabled: bool = True):
        """Initialize formatter with specified format.

        Args:
            format: Output format (json, jsonl, human)
            enabled: False to silence stdout entirely
        """
        self.format = format
        self.enabled = enabled

    def listing(self, result: LocateResult) -> None:
        """Output discovered history databases.

        Human format prints one ``[browser] path`` line per file.
        """
        if not self.enabled:
            return

        if self.format == "human":
            self._human_listing(result.files)
        elif self.format == "jsonl":
            output_jsonl(iter(result.files))
        else:
            output_json(result.to_json_dict())

    def collection(self, result: CollectionResult) -> None:
        """Output the outcome of a gather run."""
        if not self.enabled:
            return

        if self.format == "human":
            summary = {
                "run_id": str(result.run_id),
                "archive": result.archive_path or "not written",
                "copied": len(result.copied),
                "errors": [e.message for e in result.errors],
                "staging_removed": result.cleaned_up,
            }
            output_human(summary, title="Collection")
        else:
            output_json(result.to_json_dict())

    def error(self, error: Any) -> None:
        """Output an error in the configured format.

        Errors go to stdout (not stderr) for programmatic handling.
        """
        if not self.enabled:
            return

        if self.format == "human":
            output_human(error, title="Error")
        else:
            output_json(error)

    def _human_listing(self, files: list[DiscoveredFile]) -> None:
        out = sys.stdout
        if not files:
            out.write("No browser history databases found.\n")
        for discovered in files:
            out.write(f"[{discovered.browser.value}] {discovered.path}\n")
        out.flush()
