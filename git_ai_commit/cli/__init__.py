"""Command-line entry point and workflow."""
