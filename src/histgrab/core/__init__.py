"""Core utilities: errors, logging and run context construction."""
