"""Command-line client for Model Context Protocol servers."""

__version__ = "1.0.0"
