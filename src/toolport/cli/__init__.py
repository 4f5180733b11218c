"""Command-line interface for toolport."""
