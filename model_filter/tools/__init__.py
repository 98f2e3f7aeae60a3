"""Command-line helpers; run with ``python -m model_filter.tools.<name>``."""
