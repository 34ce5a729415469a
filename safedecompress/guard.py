"""Path containment checks for extraction.

Every check here resolves paths against the live filesystem. Nothing is
remembered between calls: an entry processed earlier in the same
extraction may have planted a symlink, so a parent that was safe a moment
ago is resolved again before each write.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os

from safedecompress.errors import ContainmentViolation

logger = logging.getLogger(__name__)

# readlink() errors meaning "nothing to write through here"
_NOT_A_SYMLINK_ERRNOS = frozenset({errno.ENOENT, errno.EINVAL, errno.ENOTDIR})


def is_contained(path: str, root: str) -> bool:
    """Return True if canonical ``path`` equals or lies below ``root``.

    The comparison is segment-wise, so ``/out2`` is not inside ``/out``.
    Both arguments must already be canonical absolute paths.
    """
    try:
        return os.path.commonpath([root, path]) == os.path.commonpath([root])
    except ValueError:
        # Different drives, or a mix of absolute and relative paths.
        return False


async def canonicalize(path: str) -> str:
    """Resolve ``path`` to its canonical form; it must already exist.

    Raises:
        FileNotFoundError: A component of ``path`` does not exist yet.
        NotADirectoryError: A non-final component is not a directory.
        OSError: Resolution is impossible, e.g. permission denied.

    """
    return await asyncio.to_thread(os.path.realpath, path, strict=True)


async def ensure_contained(directory: str, root: str) -> str:
    """Create ``directory`` inside ``root``, one missing level at a time.

    The nearest existing ancestor is resolved first and must be inside
    ``root``; each missing level is then created and resolved again, so a
    symlinked component can never redirect creation outside the root.

    Args:
        directory: Directory to create. May contain ``..`` segments and
            symlinks; both are resolved from disk.
        root: Canonical output root.

    Returns:
        The canonical path of ``directory``.

    Raises:
        ContainmentViolation: ``directory`` or one of its ancestors
            resolves outside ``root``.

    """
    try:
        real_parent = await canonicalize(directory)
    except (FileNotFoundError, NotADirectoryError):
        parent = os.path.dirname(directory)
        if parent == directory:
            raise
        real_parent = await ensure_contained(parent, root)

    if not is_contained(real_parent, root):
        raise ContainmentViolation(
            "Refusing to create a directory outside the output path: "
            f"{real_parent}"
        )

    await asyncio.to_thread(os.makedirs, directory, exist_ok=True)
    real_directory = await canonicalize(directory)
    if not is_contained(real_directory, root):
        raise ContainmentViolation(
            "Refusing to create a directory outside the output path: "
            f"{real_directory}"
        )
    return real_directory


async def guard_against_symlink_overwrite(destination: str) -> None:
    """Refuse to write file content through an existing symlink.

    Raises:
        ContainmentViolation: ``destination`` is a symlink.

    """
    try:
        target = await asyncio.to_thread(os.readlink, destination)
    except OSError as e:
        if e.errno in _NOT_A_SYMLINK_ERRNOS:
            return
        raise
    raise ContainmentViolation(
        f"Refusing to write into a symlink: {destination} -> {target}"
    )


async def verify_contained(path: str, root: str) -> str:
    """Resolve ``path`` again and check that it is still inside ``root``.

    Returns:
        The canonical path.

    Raises:
        ContainmentViolation: ``path`` now resolves outside ``root``.

    """
    real_path = await canonicalize(path)
    if not is_contained(real_path, root):
        logger.error("Blocked write outside %s: %s", root, real_path)
        raise ContainmentViolation(
            f"Refusing to write outside output directory: {real_path}"
        )
    return real_path
