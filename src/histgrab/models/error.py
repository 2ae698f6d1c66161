"""Structured error model for histgrab."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Structured error response format.

    Every failure recorded during a run follows this schema so that the
    JSON results stay machine-readable and carry a remediation hint.
    """

    code: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Error code (e.g., COPY_FAILED)",
        examples=[
            "VALIDATION_ERROR",
            "ENUMERATION_ERROR",
            "STAGING_ERROR",
            "COPY_FAILED",
            "ARCHIVE_FAILED",
            "CLEANUP_FAILED",
        ],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    remediation: str = Field(
        ...,
        description="Suggested fix or next step",
    )

    retryable: bool = Field(
        ...,
        description="Whether retry may succeed",
    )

    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (path, run_id, etc.)",
    )

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Standard error codes for histgrab."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    ENUMERATION_ERROR = "ENUMERATION_ERROR"
    STAGING_ERROR = "STAGING_ERROR"
    COPY_FAILED = "COPY_FAILED"
    ARCHIVE_FAILED = "ARCHIVE_FAILED"
    CLEANUP_FAILED = "CLEANUP_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
