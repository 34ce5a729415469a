"""CLI module for safedecompress.

This module contains the command-line interface components including
the Typer application and command orchestration logic.
"""

from safedecompress.cli.parser import app

__all__ = ["app"]
