"""Plaintext staging manifest.

One header line, one line per copied file, one completion line:

    job=<run_id> host=<hostname> user=<target_user> started=<timestamp>
    <original path> -> history_db_0 sha256=<hash>
    ...
    completed=<timestamp>
"""

from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import IO

from histgrab.models.run import CopyRecord, RunContext


class StagingManifest:
    """Append-only manifest log written inside the staging directory.

    Every line is flushed as soon as it is written so that the log is
    complete up to the last finished copy.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._file: IO[str] | None = None

    def __enter__(self) -> "StagingManifest":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        self._file = open(self.path, "a", encoding="utf-8", newline="\n")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def write_header(self, context: RunContext) -> None:
        self._write(
            f"job={context.run_id} host={context.hostname} "
            f"user={context.target_user} started={context.created_at.isoformat()}"
        )

    def write_copy(self, record: CopyRecord) -> None:
        self._write(f"{record.source_path} -> {record.dest_name} sha256={record.sha256}")

    def write_footer(self, completed_at: datetime | None = None) -> None:
        completed_at = completed_at or datetime.now(UTC)
        self._write(f"completed={completed_at.isoformat()}")

    def _write(self, line: str) -> None:
        if self._file is None:
            raise RuntimeError("Manifest is not open")
        self._file.write(line + "\n")
        self._file.flush()
