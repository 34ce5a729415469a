"""Entry model shared by decoders, the transform pipeline and the materializer.

An ``Entry`` is one logical archive member. Entries are immutable: the
transform pipeline builds new values with ``dataclasses.replace`` rather
than mutating the ones produced by a decoder.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum


def split_path(path: str) -> list[str]:
    """Split a ``/``-separated path, skipping empty and ``.`` segments."""
    return [part for part in path.split("/") if part not in ("", ".")]


class EntryType(str, Enum):
    """Kind of filesystem object an entry materializes into."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"


@dataclass(frozen=True)
class Entry:
    """One decoded archive member.

    Attributes:
        path: Relative ``/``-separated path. Directory entries keep a
            trailing ``/``. Literal dot runs such as ``name..`` are part
            of the file name and are never treated as traversal.
        type: The entry kind.
        data: Raw payload, only meaningful for files.
        linkname: Link target, only meaningful for symlinks and hardlinks.
        mode: Permission bits as stored in the archive.
        mtime: Modification time restored on files and directories.

    """

    path: str
    type: EntryType
    mtime: datetime.datetime
    data: bytes = b""
    linkname: str | None = None
    mode: int = 0o644

    @property
    def is_file(self) -> bool:
        return self.type is EntryType.FILE

    @property
    def is_dir(self) -> bool:
        return self.type is EntryType.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.type is EntryType.SYMLINK

    @property
    def is_hardlink(self) -> bool:
        return self.type is EntryType.HARDLINK

    def path_segments(self) -> list[str]:
        """Return the genuine segments of ``path``."""
        return split_path(self.path)
