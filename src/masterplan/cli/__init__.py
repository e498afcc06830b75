"""Command line interface for masterplan."""
