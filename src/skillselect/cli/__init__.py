"""
CLI module for skillselect.

Provides the command-line interface using Click.
"""

from skillselect.cli.main import cli, main

__all__ = ["main", "cli"]
