"""Pydantic models for histgrab."""

from histgrab.models.error import ErrorCode, StructuredError
from histgrab.models.run import (
    BrowserType,
    CollectionResult,
    CopyRecord,
    DiscoveredFile,
    LocateResult,
    RunContext,
)

__all__ = [
    "BrowserType",
    "CollectionResult",
    "CopyRecord",
    "DiscoveredFile",
    "ErrorCode",
    "LocateResult",
    "RunContext",
    "StructuredError",
]
