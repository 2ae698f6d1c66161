"""Run context construction from invocation parameters and host defaults."""

import getpass
import os
import platform
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from histgrab.core.errors import ValidationError
from histgrab.models.run import RunContext


def default_target_user() -> str:
    """Identity of the current process user."""
    user = os.getenv("USERNAME", os.getenv("USER"))
    if user:
        return user
    return getpass.getuser()


def default_output_dir() -> Path:
    """Current user's roaming application-data directory."""
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata)
    return Path.home() / "AppData" / "Roaming"


def default_system_root() -> Path:
    """Root of the Windows system drive, e.g. ``C:/``."""
    drive = os.getenv("SystemDrive", "C:")
    return Path(f"{drive}/")


def build_run_context(
    target_user: str | None = None,
    output_dir: Path | None = None,
    system_root: Path | None = None,
    hostname: str | None = None,
) -> RunContext:
    """Build the immutable context for one invocation.

    Missing parameters fall back to the current user, the roaming
    application-data directory, the system drive and ``platform.node()``.
    A fresh run id is generated on every call.

    Raises:
        ValidationError: If the target user is not a usable profile name
    """
    try:
        return RunContext(
            target_user=target_user if target_user is not None else default_target_user(),
            output_dir=output_dir if output_dir is not None else default_output_dir(),
            system_root=system_root if system_root is not None else default_system_root(),
            hostname=hostname or platform.node() or "unknown",
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", str(e)), field=field) from e
