"""Collectors for browser history databases.

- BrowserLocator finds the history databases of Chrome, Edge and Firefox
  under a user's profile.
- HistoryCollector stages copies of them and compresses them into a
  single archive.
"""

from histgrab.collectors.browsers import BROWSER_PROFILES, BrowserLocator, BrowserProfile
from histgrab.collectors.staging import HistoryCollector

__all__ = [
    "BROWSER_PROFILES",
    "BrowserLocator",
    "BrowserProfile",
    "HistoryCollector",
]
