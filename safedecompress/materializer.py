"""Materializer that writes transformed entries into the output directory.

Each entry runs as its own task; all of them are started together and
awaited together. Writes for different entries may therefore interleave
in any order, which is why every entry re-runs its containment checks
against the filesystem right before writing instead of trusting what
another entry already verified.
"""

from __future__ import annotations

import asyncio
import datetime
import errno
import logging
import os
import posixpath
from collections.abc import Iterable

from safedecompress.entry import Entry, EntryType
from safedecompress.errors import ContainmentViolation
from safedecompress.guard import (
    canonicalize,
    ensure_contained,
    guard_against_symlink_overwrite,
    is_contained,
    verify_contained,
)

_WRITE_FLAGS = (
    os.O_WRONLY
    | os.O_CREAT
    | os.O_TRUNC
    | getattr(os, "O_NOFOLLOW", 0)
    | getattr(os, "O_BINARY", 0)
)


def supports_symlinks() -> bool:
    """Return True if this process can create real symlinks."""
    return hasattr(os, "symlink") and os.name != "nt"


def _dependency_paths(entry: Entry) -> list[str]:
    """Return the paths of earlier entries ``entry`` must wait for."""
    key = entry.path.rstrip("/")
    segments = entry.path_segments()
    paths = ["/".join(segments[:i]) for i in range(1, len(segments))]
    paths.append(key)
    if entry.is_hardlink and entry.linkname:
        paths.append(entry.linkname.rstrip("/"))
    elif entry.is_symlink and entry.linkname and not posixpath.isabs(entry.linkname):
        # Needed when a symlink is replaced by a hard link to its target.
        target = posixpath.join(posixpath.dirname(key), entry.linkname)
        paths.append(posixpath.normpath(target))
    return paths


def _write_file(destination: str, data: bytes, mode: int) -> None:
    try:
        fd = os.open(destination, _WRITE_FLAGS, mode)
    except OSError as e:
        # O_NOFOLLOW: a symlink appeared after the guard ran.
        if e.errno == errno.ELOOP:
            raise ContainmentViolation(
                f"Refusing to write into a symlink: {destination}"
            ) from e
        raise
    with os.fdopen(fd, "wb") as f:
        f.write(data)
        if hasattr(os, "fchmod"):
            os.fchmod(f.fileno(), mode)


class Materializer:
    """Write entries below an output directory without escaping it.

    Handles directory creation, file writes, symlinks and hard links,
    and restores modification times on files and directories.
    """

    def __init__(
        self,
        output: str | os.PathLike[str],
        umask: int,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize Materializer.

        Args:
            output: Directory the caller chose as the extraction target.
                Created if missing.
            umask: File-creation mask applied to every file mode.
            logger: Logger instance (optional, creates default if not provided)

        """
        self.output: str = os.fspath(output)
        self.umask: int = umask
        self.logger = logger or logging.getLogger(__name__)

    async def materialize(self, entries: Iterable[Entry]) -> list[Entry]:
        """Materialize all entries concurrently.

        Entries are submitted in order. An entry only waits for earlier
        entries it depends on: one at the same path, one at an ancestor
        path, or the source of a hard link. Containment is still checked
        again by every entry once it runs. Every entry runs to completion;
        the first failure in submission order is raised and any others
        are logged.

        Returns:
            The entries, in submission order.

        Raises:
            ContainmentViolation: Any entry would escape the output root.
            OSError: Any underlying filesystem operation failed.

        """
        now = datetime.datetime.now().timestamp()
        tasks: list[asyncio.Task[Entry]] = []
        by_path: dict[str, asyncio.Task[Entry]] = {}

        for entry in entries:
            waits = [
                by_path[path]
                for path in _dependency_paths(entry)
                if path in by_path
            ]
            task = asyncio.ensure_future(
                self._materialize_after(entry, now, waits)
            )
            tasks.append(task)
            by_path[entry.path.rstrip("/")] = task

        results = await asyncio.gather(*tasks, return_exceptions=True)
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for extra in failures[1:]:
                self.logger.error("Another entry also failed: %s", extra)
            raise failures[0]
        return list(results)

    async def _materialize_after(
        self,
        entry: Entry,
        now: float,
        waits: list[asyncio.Task[Entry]],
    ) -> Entry:
        if waits:
            await asyncio.wait(waits)
        return await self.materialize_entry(entry, now)

    async def _prepare_root(self) -> str:
        await asyncio.to_thread(os.makedirs, self.output, exist_ok=True)
        return await canonicalize(self.output)

    async def materialize_entry(self, entry: Entry, now: float) -> Entry:
        """Write one entry and return it unchanged.

        Args:
            entry: Entry to write.
            now: Access time set alongside the entry's mtime.

        """
        destination = os.path.join(self.output, entry.path)
        mtime = entry.mtime.timestamp()

        if entry.is_dir:
            real_root = await self._prepare_root()
            await ensure_contained(destination, real_root)
            await asyncio.to_thread(os.utime, destination, (now, mtime))
            self.logger.debug("Created directory %s", destination)
            return entry

        real_root = await self._prepare_root()
        parent = os.path.dirname(destination)
        await ensure_contained(parent, real_root)
        if entry.is_file:
            await guard_against_symlink_overwrite(destination)
        await verify_contained(parent, real_root)

        if entry.type is EntryType.HARDLINK:
            await self._link(entry, destination, real_root)
        elif entry.type is EntryType.SYMLINK:
            await self._symlink(entry, destination, real_root)
        else:
            mode = entry.mode & ~self.umask
            await asyncio.to_thread(_write_file, destination, entry.data, mode)
            await asyncio.to_thread(os.utime, destination, (now, mtime))
            self.logger.debug("Wrote %s (%o)", destination, mode)
        return entry

    async def _link(self, entry: Entry, destination: str, real_root: str) -> None:
        """Hard link ``destination`` to an archive path below the root."""
        source = os.path.join(self.output, entry.linkname or "")
        await self._create_link(source, destination, real_root)
        self.logger.debug("Linked %s -> %s", destination, source)

    async def _symlink(
        self, entry: Entry, destination: str, real_root: str
    ) -> None:
        linkname = entry.linkname or ""
        if supports_symlinks():
            try:
                await asyncio.to_thread(os.symlink, linkname, destination)
            except NotImplementedError:
                self.logger.debug("os.symlink unavailable for %s", destination)
            else:
                self.logger.debug("Symlinked %s -> %s", destination, linkname)
                return

        # Symlink targets are relative to the link's own directory.
        source = os.path.join(os.path.dirname(destination), linkname)
        await self._create_link(source, destination, real_root)
        self.logger.debug(
            "Linked %s -> %s in place of a symlink", destination, source
        )

    async def _create_link(
        self, source: str, destination: str, real_root: str
    ) -> None:
        real_source = await canonicalize(source)
        if not is_contained(real_source, real_root):
            raise ContainmentViolation(
                f"Refusing to link to a file outside the output path: {real_source}"
            )
        await asyncio.to_thread(os.link, real_source, destination)
