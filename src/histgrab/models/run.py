"""Run models: invocation context, discovered files and collection results."""

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from histgrab.models.error import StructuredError


class BrowserType(str, Enum):
    """Supported browsers, in discovery order."""

    CHROME = "chrome"
    EDGE = "edge"
    FIREFOX = "firefox"


class RunContext(BaseModel):
    """Immutable per-invocation settings shared by the Locator and Collector."""

    target_user: str = Field(..., min_length=1, description="User whose profile is searched")
    output_dir: Path = Field(..., description="Base directory for staging and archive output")
    hostname: str = Field(..., description="Host the run was executed on")
    run_id: UUID = Field(default_factory=uuid4, description="Unique run identifier (UUID v4)")
    system_root: Path = Field(..., description="Directory standing in for the system drive")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="ISO-8601 creation timestamp",
    )

    model_config = {"frozen": True}

    @field_validator("target_user")
    @classmethod
    def _check_user(cls, value: str) -> str:
        if value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"'{value}' is not a valid user name")
        return value

    @property
    def staging_dir(self) -> Path:
        """Staging directory named by the run id."""
        return self.output_dir / str(self.run_id)

    @property
    def manifest_name(self) -> str:
        return f"{self.run_id}.log"

    @property
    def archive_path(self) -> Path:
        """Final archive location."""
        return self.output_dir / f"{self.run_id}.zip"


class DiscoveredFile(BaseModel):
    """A browser history database found by the Locator."""

    path: str = Field(..., description="Absolute path to the history file")
    browser: BrowserType = Field(..., description="Browser the file belongs to")
    size_bytes: int = Field(default=0, ge=0, description="File size at discovery time")


class CopyRecord(BaseModel):
    """A history database copied into the staging directory."""

    index: int = Field(..., ge=0)
    source_path: str
    dest_name: str
    browser: BrowserType
    size_bytes: int
    sha256: str
    copied_at: datetime


class LocateResult(BaseModel):
    """Discovery results for one run."""

    run_id: UUID
    hostname: str
    target_user: str
    files: list[DiscoveredFile]
    errors: list[StructuredError] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        """Number of matches per browser, including browsers with none."""
        totals = {browser.value: 0 for browser in BrowserType}
        for discovered in self.files:
            totals[discovered.browser.value] += 1
        return totals

    def to_json_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        data["counts"] = self.counts()
        return data


class CollectionResult(BaseModel):
    """Outcome of a gather run."""

    run_id: UUID
    archive_path: str | None
    staging_dir: str
    copied: list[CopyRecord]
    errors: list[StructuredError]
    archived: bool
    cleaned_up: bool
    duration_seconds: float

    @property
    def success(self) -> bool:
        return self.archived

    def to_json_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict for output."""
        data = self.model_dump(mode="json")
        data["success"] = self.success
        return data
