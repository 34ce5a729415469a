"""Utilities for formatting entries for display."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from safedecompress.entry import Entry

BYTES_IN_KB = 1024.0


def format_size(size_in_bytes: int) -> str:
    """Convert a size in bytes to a human-readable format (KB, MB, GB).

    Args:
        size_in_bytes: The size in bytes.

    Returns:
        The formatted size string.

    """
    size = float(size_in_bytes)

    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < BYTES_IN_KB:
            return f"{size:.2f} {unit}"
        size /= BYTES_IN_KB
    return f"{size:.2f} PB"


def format_entry_line(entry: Entry) -> str:
    """Render one entry as a listing line: type, mode, size and path."""
    line = (
        f"{entry.type.value:<9} {entry.mode:04o} "
        f"{format_size(len(entry.data)):>11}  {entry.path}"
    )
    if entry.linkname is not None:
        line += f" -> {entry.linkname}"
    return line
