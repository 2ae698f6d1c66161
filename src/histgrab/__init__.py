"""histgrab: browser history triage collector for Windows hosts."""

__version__ = "0.1.0"
