"""Browser history database discovery.

Known profile roots, relative to the system root:
- Chrome:  Users/<user>/AppData/Local/Google/Chrome/User Data  (History)
- Edge:    Users/<user>/AppData/Local/Microsoft/Edge/User Data (History)
- Firefox: Users/<user>/AppData/Roaming/Mozilla/Firefox        (places.sqlite)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from histgrab.core.errors import EnumerationError
from histgrab.core.logging import RunLogger
from histgrab.models.error import StructuredError
from histgrab.models.run import BrowserType, DiscoveredFile, RunContext


@dataclass(frozen=True)
class BrowserProfile:
    """Where a browser keeps its history database."""

    browser: BrowserType
    name: str
    root_template: str  # Relative to the system root, {user} is substituted
    history_filename: str


BROWSER_PROFILES: list[BrowserProfile] = [
    BrowserProfile(
        browser=BrowserType.CHROME,
        name="Chrome",
        root_template="Users/{user}/AppData/Local/Google/Chrome/User Data",
        history_filename="History",
    ),
    BrowserProfile(
        browser=BrowserType.EDGE,
        name="Edge",
        root_template="Users/{user}/AppData/Local/Microsoft/Edge/User Data",
        history_filename="History",
    ),
    BrowserProfile(
        browser=BrowserType.FIREFOX,
        name="Firefox",
        root_template="Users/{user}/AppData/Roaming/Mozilla/Firefox",
        history_filename="places.sqlite",
    ),
]


class BrowserLocator:
    """Finds browser history databases under a user's profile."""

    def __init__(
        self,
        context: RunContext,
        logger: RunLogger | None = None,
        profiles: list[BrowserProfile] | None = None,
    ) -> None:
        """Initialize the locator.

        Args:
            context: Run context naming the target user and system root
            logger: Run logger (defaults to NORMAL verbosity)
            profiles: Browser profile table (defaults to BROWSER_PROFILES)
        """
        self._context = context
        self._logger = logger or RunLogger()
        self._profiles = profiles if profiles is not None else BROWSER_PROFILES
        self._errors: list[StructuredError] = []

    @property
    def errors(self) -> list[StructuredError]:
        """Enumeration errors recorded so far."""
        return list(self._errors)

    def profile_root(self, profile: BrowserProfile) -> Path:
        """Absolute profile root of a browser for the target user."""
        relative = profile.root_template.format(user=self._context.target_user)
        return self._context.system_root / relative

    def locate(self) -> list[DiscoveredFile]:
        """Find history databases for every supported browser.

        Returns:
            Matches in profile table order (Chrome, Edge, then Firefox)
        """
        self._logger.info(
            f"Run {self._context.run_id}: searching browser history for "
            f"user '{self._context.target_user}'",
            run_id=str(self._context.run_id),
        )

        found: list[DiscoveredFile] = []
        for profile in self._profiles:
            matches = self.locate_browser(profile)
            self._logger.debug(
                f"{profile.name}: {len(matches)} match(es)",
                browser=profile.browser.value,
            )
            found.extend(matches)

        self._logger.info(f"Found {len(found)} history database(s)")
        return found

    def locate_browser(self, profile: BrowserProfile) -> list[DiscoveredFile]:
        """Recursively search one browser's profile root.

        A missing or unreadable root yields no matches. Errors on
        subdirectories are logged and the walk continues.
        """
        root = self.profile_root(profile)
        if not os.path.isdir(root):
            self._logger.debug(f"{profile.name}: {root} not found", path=str(root))
            return []

        self._logger.debug(f"{profile.name}: searching {root}", path=str(root))

        def on_error(exc: OSError) -> None:
            path = exc.filename or str(root)
            self._record(EnumerationError(str(path), exc.strerror or str(exc), profile.browser.value))

        matches: list[DiscoveredFile] = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename != profile.history_filename:
                    continue
                file_path = Path(dirpath) / filename
                try:
                    if file_path.is_symlink() or not file_path.is_file():
                        continue
                    size = file_path.stat().st_size
                except OSError as e:
                    self._record(EnumerationError(str(file_path), str(e), profile.browser.value))
                    continue
                matches.append(
                    DiscoveredFile(
                        path=str(file_path.absolute()),
                        browser=profile.browser,
                        size_bytes=size,
                    )
                )
        return matches

    def _record(self, error: EnumerationError) -> None:
        self._logger.warning(error.error.message, **(error.error.context or {}))
        self._errors.append(error.to_structured())
