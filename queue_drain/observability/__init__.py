"""Log hygiene helpers."""
