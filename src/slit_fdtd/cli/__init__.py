"""Command-line interface for headless simulation runs."""
