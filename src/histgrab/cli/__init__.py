"""histgrab CLI layer."""
