"""Shared pytest fixtures for safedecompress tests.

Archives are built in memory with ``tarfile`` and ``zipfile`` so every
test controls exactly which members, links and timestamps it feeds in.
"""

import io
import os
import sys
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add the parent directory to sys.path so Python can find safedecompress
sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
)

from safedecompress.config import AppConfig

# 2021-03-04 05:06:08 UTC
FIXED_MTIME = 1614834368
ZIP_DATE_TIME = (2021, 3, 4, 5, 6, 8)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01" + b"\x00" * 32

Member = dict[str, Any]

skip_without_symlinks = pytest.mark.skipif(
    os.name == "nt", reason="symlinks need privileges on Windows"
)


def build_tar(members: list[Member], compression: str = "") -> bytes:
    """Build a tar archive from member dicts.

    Each dict has ``name`` and optionally ``type`` (file, directory,
    symlink, hardlink), ``data``, ``linkname``, ``mode`` and ``mtime``.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=f"w:{compression}") as tar:
        for member in members:
            info = tarfile.TarInfo(member["name"])
            info.mtime = member.get("mtime", FIXED_MTIME)
            kind = member.get("type", "file")
            if kind == "file":
                data = member.get("data", b"")
                info.size = len(data)
                info.mode = member.get("mode", 0o644)
                tar.addfile(info, io.BytesIO(data))
                continue
            if kind == "directory":
                info.type = tarfile.DIRTYPE
                info.mode = member.get("mode", 0o755)
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = member["linkname"]
                info.mode = 0o777
            elif kind == "hardlink":
                info.type = tarfile.LNKTYPE
                info.linkname = member["linkname"]
                info.mode = member.get("mode", 0o644)
            elif kind == "fifo":
                info.type = tarfile.FIFOTYPE
            tar.addfile(info)
    return buffer.getvalue()


def build_zip(members: list[Member]) -> bytes:
    """Build a zip archive from member dicts (file, directory, symlink)."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for member in members:
            info = zipfile.ZipInfo(member["name"], date_time=ZIP_DATE_TIME)
            info.create_system = 3
            kind = member.get("type", "file")
            if kind == "directory":
                info.external_attr = (0o40000 | member.get("mode", 0o755)) << 16
                info.external_attr |= 0x10
                archive.writestr(info, b"")
            elif kind == "symlink":
                info.external_attr = (0o120000 | 0o777) << 16
                archive.writestr(info, member["linkname"])
            else:
                info.external_attr = (0o100000 | member.get("mode", 0o644)) << 16
                archive.writestr(info, member.get("data", b""))
    return buffer.getvalue()


@pytest.fixture
def make_tar() -> Callable[..., bytes]:
    """Return the in-memory tar builder."""
    return build_tar


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    """Return the in-memory zip builder."""
    return build_zip


@pytest.fixture
def jpeg_tar() -> bytes:
    """Create a tar archive holding a single ``test.jpg``."""
    return build_tar([{"name": "test.jpg", "data": JPEG_BYTES}])


@pytest.fixture
def archive_file(tmp_path: Path, jpeg_tar: bytes) -> Path:
    """Write the single-file tar archive to disk."""
    path = tmp_path / "file.tar"
    path.write_bytes(jpeg_tar)
    return path


@pytest.fixture
def test_config(tmp_path: Path) -> AppConfig:
    """Create a configuration stored in a temporary directory.

    Keeps tests from touching the real user configuration directory.
    """
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return AppConfig(config_dir=str(config_dir))
