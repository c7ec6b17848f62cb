"""Command-line interface for envsource."""

from envsource.cli.app import entrypoint, main

__all__ = ["entrypoint", "main"]
