"""Shell execution and logging helpers."""
