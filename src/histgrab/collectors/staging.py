"""Staging, archival and cleanup of discovered history databases.

Each discovered file is copied into ``<output_dir>/<run_id>/`` as
``history_db_<n>`` next to a manifest log, the directory is compressed to
``<output_dir>/<run_id>.zip`` and then removed.
"""

import hashlib
import shutil
import time
import zipfile
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from histgrab.collectors.manifest import StagingManifest
from histgrab.core.errors import (
    ArchiveError,
    CleanupError,
    CopyFailedError,
    HistgrabError,
    StagingError,
)
from histgrab.core.logging import RunLogger, format_duration
from histgrab.models.error import StructuredError
from histgrab.models.run import CollectionResult, CopyRecord, DiscoveredFile, RunContext

STAGED_NAME_PREFIX = "history_db_"

ProgressCallback = Callable[[str, int, int], None]


def compute_file_hash(file_path: Path) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to file

    Returns:
        Hex-encoded SHA-256 hash
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


class HistoryCollector:
    """Copies discovered history databases into a single ZIP archive."""

    def __init__(self, context: RunContext, logger: RunLogger | None = None) -> None:
        """Initialize the collector.

        Args:
            context: Run context naming the output directory and run id
            logger: Run logger (defaults to NORMAL verbosity)
        """
        self._context = context
        self._logger = logger or RunLogger()
        self._copied: list[CopyRecord] = []
        self._errors: list[StructuredError] = []

    def collect(
        self,
        files: list[DiscoveredFile],
        progress_callback: ProgressCallback | None = None,
    ) -> CollectionResult:
        """Stage, archive and clean up.

        The staging directory is removed on every exit path, whether or
        not the copies and the archive succeeded.

        Args:
            files: Locator output, possibly empty
            progress_callback: Optional callback(source_path, current, total)

        Returns:
            CollectionResult; ``success`` is true when the archive was written
        """
        start_time = time.time()
        self._copied = []
        self._errors = []
        staging_dir = self._context.staging_dir
        archived = False
        cleaned_up = False

        self._logger.debug(f"Staging into {staging_dir}", run_id=str(self._context.run_id))

        try:
            if self._stage(staging_dir, files, progress_callback):
                archived = self._archive(staging_dir)
        finally:
            cleaned_up = self._cleanup(staging_dir)

        duration = time.time() - start_time
        if archived:
            self._logger.info(
                f"Archived {len(self._copied)} of {len(files)} file(s) to "
                f"{self._context.archive_path} in {format_duration(duration)}"
            )

        return CollectionResult(
            run_id=self._context.run_id,
            archive_path=str(self._context.archive_path) if archived else None,
            staging_dir=str(staging_dir),
            copied=self._copied,
            errors=self._errors,
            archived=archived,
            cleaned_up=cleaned_up,
            duration_seconds=duration,
        )

    def _stage(
        self,
        staging_dir: Path,
        files: list[DiscoveredFile],
        progress_callback: ProgressCallback | None,
    ) -> bool:
        """Copy every file and write the manifest. False if staging failed."""
        try:
            staging_dir.mkdir(parents=True, exist_ok=True)
            manifest = StagingManifest(staging_dir / self._context.manifest_name)
            with manifest:
                manifest.write_header(self._context)
                total = len(files)
                for i, discovered in enumerate(files):
                    if progress_callback:
                        progress_callback(discovered.path, i + 1, total)
                    self._copy_file(discovered, staging_dir, manifest)
                manifest.write_footer()
        except OSError as e:
            self._record(StagingError(str(staging_dir), str(e)))
            return False
        return True

    def _copy_file(
        self,
        discovered: DiscoveredFile,
        staging_dir: Path,
        manifest: StagingManifest,
    ) -> None:
        """Copy one file to the next free sequential name.

        A failed copy leaves no file and no manifest line behind, so the
        sequence stays contiguous among successful copies.
        """
        index = len(self._copied)
        dest_name = f"{STAGED_NAME_PREFIX}{index}"
        dest_path = staging_dir / dest_name

        try:
            shutil.copy2(discovered.path, dest_path)
            record = CopyRecord(
                index=index,
                source_path=discovered.path,
                dest_name=dest_name,
                browser=discovered.browser,
                size_bytes=dest_path.stat().st_size,
                sha256=compute_file_hash(dest_path),
                copied_at=datetime.now(UTC),
            )
            manifest.write_copy(record)
        except OSError as e:
            self._record(CopyFailedError(discovered.path, str(e)))
            self._discard(dest_path)
            return

        self._copied.append(record)
        self._logger.debug(f"Copied {discovered.path} -> {dest_name}")

    def _archive(self, staging_dir: Path) -> bool:
        """Compress the staging directory, overwriting any previous archive."""
        archive_path = self._context.archive_path
        try:
            with zipfile.ZipFile(
                archive_path,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=1,
                strict_timestamps=False,
            ) as zf:
                for path in sorted(staging_dir.rglob("*")):
                    if path.is_file():
                        zf.write(path, arcname=path.relative_to(staging_dir).as_posix())
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            self._record(ArchiveError(str(archive_path), str(e)))
            self._discard(archive_path)
            return False
        return True

    def _cleanup(self, staging_dir: Path) -> bool:
        """Remove the staging directory and everything in it."""
        if not staging_dir.exists():
            return True
        try:
            shutil.rmtree(staging_dir)
        except OSError as e:
            self._record(CleanupError(str(staging_dir), str(e)))
            return False
        self._logger.debug(f"Removed staging directory {staging_dir}")
        return True

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.debug(f"Could not remove partial file {path}: {e}")

    def _record(self, error: HistgrabError) -> None:
        self._logger.error(error.error.message, code=error.error.code)
        self._errors.append(error.to_structured())
