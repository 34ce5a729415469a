"""safedecompress package.

Extract tar, tar.gz, tar.bz2 and zip archives without letting any entry
write outside the chosen output directory.
"""

import tomllib
from pathlib import Path

try:
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    with pyproject_path.open("rb") as f:
        data = tomllib.load(f)
    __version__ = data.get("project", {}).get("version", "unknown")
except (OSError, ValueError):
    __version__ = "unknown"

from safedecompress.config import ExtractOptions
from safedecompress.engine import extract, extract_async
from safedecompress.entry import Entry, EntryType
from safedecompress.errors import (
    ContainmentViolation,
    DecodeError,
    InputError,
    SafeDecompressError,
)

__all__ = [
    "ContainmentViolation",
    "DecodeError",
    "Entry",
    "EntryType",
    "ExtractOptions",
    "InputError",
    "SafeDecompressError",
    "extract",
    "extract_async",
]
