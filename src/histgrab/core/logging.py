"""Logging utilities for histgrab.

All log output goes to stderr to keep stdout clean for the discovery
listing and machine-readable results (JSON/JSONL).
"""

import json
import sys
from datetime import UTC, datetime
from enum import IntEnum
from typing import IO, Any, Literal

LogLevel = Literal["debug", "info", "warning", "error"]


class Verbosity(IntEnum):
    """How much a RunLogger emits."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2

    @classmethod
    def from_flags(cls, suppress: bool = False, verbose: bool = False) -> "Verbosity":
        """Map CLI flags to a level. Suppression wins over verbose."""
        if suppress:
            return cls.QUIET
        if verbose:
            return cls.VERBOSE
        return cls.NORMAL


class RunLogger:
    """Logger handed to every component of a run.

    QUIET drops everything, errors included. NORMAL emits info, warning
    and error messages. VERBOSE adds debug messages.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NORMAL,
        log_format: Literal["text", "json"] = "text",
        stream: IO[str] | None = None,
    ):
        self.verbosity = verbosity
        self.log_format = log_format
        self._stream = stream

    @property
    def quiet(self) -> bool:
        return self.verbosity == Verbosity.QUIET

    def enabled(self, level: LogLevel) -> bool:
        if self.verbosity == Verbosity.QUIET:
            return False
        if level == "debug":
            return self.verbosity >= Verbosity.VERBOSE
        return True

    def log(self, message: str, level: LogLevel = "info", **context: Any) -> None:
        """Log a message to stderr.

        Args:
            message: Log message
            level: Log level
            **context: Additional context to include
        """
        if not self.enabled(level):
            return

        stream = self._stream if self._stream is not None else sys.stderr

        if self.log_format == "json":
            log_entry = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": level,
                "message": message,
                **context,
            }
            print(json.dumps(log_entry, default=str), file=stream)
        else:
            prefix = f"[{level.upper()}]" if level != "info" else ""
            if prefix:
                print(f"{prefix} {message}", file=stream)
            else:
                print(message, file=stream)

    def debug(self, message: str, **context: Any) -> None:
        """Log a debug message."""
        self.log(message, level="debug", **context)

    def info(self, message: str, **context: Any) -> None:
        """Log an info message."""
        self.log(message, level="info", **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log a warning message."""
        self.log(message, level="warning", **context)

    def error(self, message: str, **context: Any) -> None:
        """Log an error message."""
        self.log(message, level="error", **context)


def format_duration(seconds: float) -> str:
    """Format duration in human-readable form."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
