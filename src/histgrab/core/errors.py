"""Structured error handling for histgrab."""

from typing import Any

from histgrab.models.error import ErrorCode, StructuredError


class HistgrabError(Exception):
    """Base exception for histgrab errors.

    Wraps a StructuredError for consistent error handling.
    """

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured(self) -> StructuredError:
        """Convert to StructuredError."""
        return self.error

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class ValidationError(HistgrabError):
    """Invalid invocation parameter."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            remediation="Check the input parameters and try again",
            retryable=False,
            context={"field": field} if field else None,
        )


class EnumerationError(HistgrabError):
    """A directory under a browser profile root could not be listed."""

    def __init__(self, path: str, reason: str, browser: str | None = None):
        context: dict[str, Any] = {"path": path}
        if browser:
            context["browser"] = browser
        super().__init__(
            code=ErrorCode.ENUMERATION_ERROR,
            message=f"Cannot enumerate {path}: {reason}",
            remediation="Run with an account that can read the target user's profile",
            retryable=True,
            context=context,
        )


class StagingError(HistgrabError):
    """The staging directory or manifest could not be created."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code=ErrorCode.STAGING_ERROR,
            message=f"Cannot prepare staging directory {path}: {reason}",
            remediation="Check that the destination exists and is writable",
            retryable=True,
            context={"path": path},
        )


class CopyFailedError(HistgrabError):
    """A single history database could not be copied."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            code=ErrorCode.COPY_FAILED,
            message=f"Failed to copy {source}: {reason}",
            remediation="The file may be locked by a running browser. Close it and retry.",
            retryable=True,
            context={"source_path": source},
        )


class ArchiveError(HistgrabError):
    """The staging directory could not be compressed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code=ErrorCode.ARCHIVE_FAILED,
            message=f"Failed to write archive {path}: {reason}",
            remediation="Check free space and permissions on the destination",
            retryable=True,
            context={"archive_path": path},
        )


class CleanupError(HistgrabError):
    """The staging directory could not be removed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code=ErrorCode.CLEANUP_FAILED,
            message=f"Failed to remove staging directory {path}: {reason}",
            remediation="Remove the directory manually",
            retryable=False,
            context={"path": path},
        )
