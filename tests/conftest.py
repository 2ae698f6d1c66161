"""Shared pytest fixtures for histgrab tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from histgrab.core.context import build_run_context
from histgrab.core.logging import RunLogger, Verbosity
from histgrab.models.run import RunContext

PROFILE_ROOTS = {
    "chrome": "AppData/Local/Google/Chrome/User Data",
    "edge": "AppData/Local/Microsoft/Edge/User Data",
    "firefox": "AppData/Roaming/Mozilla/Firefox",
}

HISTORY_NAMES = {
    "chrome": "History",
    "edge": "History",
    "firefox": "places.sqlite",
}


@pytest.fixture
def system_root(tmp_path: Path) -> Path:
    """Empty directory standing in for the system drive."""
    root = tmp_path / "C"
    root.mkdir()
    return root


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Destination directory for staging and archives."""
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def run_context(system_root: Path, output_dir: Path) -> RunContext:
    """Run context for user alice on host WS01."""
    return build_run_context(
        target_user="alice",
        output_dir=output_dir,
        system_root=system_root,
        hostname="WS01",
    )


@pytest.fixture
def quiet_logger() -> RunLogger:
    return RunLogger(verbosity=Verbosity.QUIET)


@pytest.fixture
def make_history(system_root: Path) -> Callable[..., Path]:
    """Factory creating a history database inside a browser profile root.

    ``make_history("chrome", "Default")`` creates
    ``Users/alice/AppData/Local/Google/Chrome/User Data/Default/History``.
    """

    def _make(
        browser: str,
        *subdirs: str,
        user: str = "alice",
        content: bytes | None = None,
        filename: str | None = None,
    ) -> Path:
        directory = system_root / "Users" / user / PROFILE_ROOTS[browser]
        for part in subdirs:
            directory = directory / part
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / (filename or HISTORY_NAMES[browser])
        if content is None:
            content = f"SQLite format 3 {browser} {'/'.join(subdirs)}".encode()
        path.write_bytes(content)
        return path

    return _make
