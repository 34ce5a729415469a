"""Command pattern implementations for archive operations.

This module aggregates all command classes for easy importing.
"""

from safedecompress.commands.command import Command
from safedecompress.commands.extract import ExtractCommand
from safedecompress.commands.list import ListCommand

__all__ = [
    "Command",
    "ExtractCommand",
    "ListCommand",
]
