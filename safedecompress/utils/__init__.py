"""Utility package for extraction helpers."""

from .format import format_entry_line, format_size
from .utils import current_umask, ensure_output_folder

__all__ = [
    "current_umask",
    "ensure_output_folder",
    "format_entry_line",
    "format_size",
]
