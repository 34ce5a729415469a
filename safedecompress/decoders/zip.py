"""Decoder for zip archives."""

from __future__ import annotations

import datetime
import io
import logging
import stat
import zipfile
import zlib

from safedecompress.decoders.base import Decoder, normalize_member_path
from safedecompress.entry import Entry, EntryType
from safedecompress.errors import DecodeError

logger = logging.getLogger(__name__)

ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


class ZipDecoder(Decoder):
    """Decoder for zip archives.

    Symlinks are recognised from Unix external attributes; their target
    is stored as the member's content.
    """

    name = "zip"

    def matches(self, buffer: bytes) -> bool:
        return buffer[:4] in ZIP_MAGICS

    def _decode(self, buffer: bytes) -> list[Entry]:
        entries: list[Entry] = []
        try:
            with zipfile.ZipFile(io.BytesIO(buffer)) as archive:
                for info in archive.infolist():
                    entry = self._to_entry(archive, info)
                    if entry is not None:
                        entries.append(entry)
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            EOFError,
            zlib.error,
            RuntimeError,
            NotImplementedError,
            UnicodeDecodeError,
        ) as e:
            raise DecodeError(f"Failed to decode {self.name} archive: {e}") from e
        return entries

    def _to_entry(
        self, archive: zipfile.ZipFile, info: zipfile.ZipInfo
    ) -> Entry | None:
        unix_mode = (info.external_attr >> 16) & 0xFFFF

        if stat.S_ISLNK(unix_mode):
            entry_type = EntryType.SYMLINK
        elif info.is_dir():
            entry_type = EntryType.DIRECTORY
        else:
            entry_type = EntryType.FILE

        path = normalize_member_path(
            info.filename, is_dir=entry_type is EntryType.DIRECTORY
        )
        if not path:
            return None

        mode = stat.S_IMODE(unix_mode)
        if not mode:
            mode = (
                DEFAULT_DIR_MODE
                if entry_type is EntryType.DIRECTORY
                else DEFAULT_FILE_MODE
            )

        data = b""
        linkname = None
        if entry_type is EntryType.FILE:
            data = archive.read(info)
        elif entry_type is EntryType.SYMLINK:
            linkname = archive.read(info).decode("utf-8")

        return Entry(
            path=path,
            type=entry_type,
            data=data,
            linkname=linkname,
            mode=mode,
            mtime=datetime.datetime(*info.date_time),
        )
