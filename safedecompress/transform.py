"""Strip, filter and map stages applied to decoded entries.

These functions never touch the filesystem. Each stage returns a new
list and leaves the incoming entries untouched.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from safedecompress.entry import Entry, split_path

if TYPE_CHECKING:
    from safedecompress.config import ExtractOptions

logger = logging.getLogger(__name__)


def strip_path(path: str, count: int) -> str:
    """Remove the first ``count`` segments of ``path``.

    Empty and ``.`` segments do not count. A trailing ``/`` survives when
    something is left. Over-stripping returns ``""``.

    >>> strip_path("package/lib/index.js", 1)
    'lib/index.js'
    >>> strip_path("package/", 1)
    ''
    """
    if count <= 0:
        return path
    segments = split_path(path)
    remaining = segments[count:]
    if not remaining:
        return ""
    stripped = "/".join(remaining)
    if path.endswith("/"):
        stripped += "/"
    return stripped


def strip_entries(entries: Iterable[Entry], count: int) -> list[Entry]:
    """Strip every entry path, dropping entries left with no path.

    Hard link sources name other archive members, so they are stripped
    the same way. A hard link whose source is stripped away is dropped.
    """
    result: list[Entry] = []
    for entry in entries:
        path = strip_path(entry.path, count)
        if not path:
            logger.debug("Dropping %s after stripping %d", entry.path, count)
            continue
        changes = {"path": path}
        if entry.is_hardlink and entry.linkname:
            linkname = strip_path(entry.linkname, count)
            if not linkname:
                logger.debug(
                    "Dropping hard link %s: source %s stripped away",
                    entry.path,
                    entry.linkname,
                )
                continue
            changes["linkname"] = linkname
        result.append(dataclasses.replace(entry, **changes))
    return result


def filter_entries(
    entries: Iterable[Entry], predicate: Callable[[Entry], bool]
) -> list[Entry]:
    """Keep the entries for which ``predicate`` holds, in order."""
    return [entry for entry in entries if predicate(entry)]


def map_entries(
    entries: Iterable[Entry], mapper: Callable[[Entry], Entry]
) -> list[Entry]:
    """Apply ``mapper`` to every entry, in order."""
    return [mapper(entry) for entry in entries]


def apply_transforms(
    entries: Iterable[Entry], options: ExtractOptions
) -> list[Entry]:
    """Run strip, filter and map, in that order, as configured."""
    result = list(entries)
    if options.strip > 0:
        result = strip_entries(result, options.strip)
    if options.filter is not None:
        result = filter_entries(result, options.filter)
    if options.map is not None:
        result = map_entries(result, options.map)
    return result
