"""Decoders for tar archives, plain or compressed with gzip or bzip2."""

from __future__ import annotations

import bz2
import datetime
import gzip
import io
import logging
import tarfile
import zlib

from safedecompress.decoders.base import Decoder, normalize_member_path
from safedecompress.entry import Entry, EntryType
from safedecompress.errors import DecodeError

logger = logging.getLogger(__name__)

USTAR_MAGIC_OFFSET = 257
USTAR_MAGIC = b"ustar"
GZIP_MAGIC = b"\x1f\x8b"
BZIP2_MAGIC = b"BZh"


def _entry_type(member: tarfile.TarInfo) -> EntryType | None:
    if member.isdir():
        return EntryType.DIRECTORY
    if member.issym():
        return EntryType.SYMLINK
    if member.islnk():
        return EntryType.HARDLINK
    if member.isreg():
        return EntryType.FILE
    return None


class TarDecoder(Decoder):
    """Decoder for uncompressed POSIX, GNU and PAX tar archives."""

    name = "tar"

    def matches(self, buffer: bytes) -> bool:
        end = USTAR_MAGIC_OFFSET + len(USTAR_MAGIC)
        return buffer[USTAR_MAGIC_OFFSET:end] == USTAR_MAGIC

    def _decode(self, buffer: bytes) -> list[Entry]:
        entries: list[Entry] = []
        try:
            with tarfile.open(fileobj=io.BytesIO(buffer), mode="r:") as tar:
                for member in tar.getmembers():
                    entry = self._to_entry(tar, member)
                    if entry is not None:
                        entries.append(entry)
        except (tarfile.TarError, EOFError) as e:
            raise DecodeError(f"Failed to decode {self.name} archive: {e}") from e
        return entries

    def _to_entry(
        self, tar: tarfile.TarFile, member: tarfile.TarInfo
    ) -> Entry | None:
        entry_type = _entry_type(member)
        if entry_type is None:
            logger.debug(
                "Skipping unsupported tar member %s (type %r)",
                member.name,
                member.type,
            )
            return None

        path = normalize_member_path(
            member.name, is_dir=entry_type is EntryType.DIRECTORY
        )
        if not path:
            return None

        data = b""
        if entry_type is EntryType.FILE:
            extracted = tar.extractfile(member)
            if extracted is not None:
                with extracted:
                    data = extracted.read()

        linkname = None
        if entry_type in (EntryType.SYMLINK, EntryType.HARDLINK):
            linkname = member.linkname
            if entry_type is EntryType.HARDLINK:
                linkname = normalize_member_path(linkname)

        return Entry(
            path=path,
            type=entry_type,
            data=data,
            linkname=linkname,
            mode=member.mode,
            mtime=datetime.datetime.fromtimestamp(
                member.mtime, tz=datetime.timezone.utc
            ),
        )


class TarGzDecoder(TarDecoder):
    """Decoder for gzip-compressed tar archives."""

    name = "tar.gz"

    def matches(self, buffer: bytes) -> bool:
        return buffer[: len(GZIP_MAGIC)] == GZIP_MAGIC

    def _decode(self, buffer: bytes) -> list[Entry]:
        try:
            inner = gzip.decompress(buffer)
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(f"Failed to decode {self.name} archive: {e}") from e
        return TarDecoder().decode(inner)


class TarBz2Decoder(TarDecoder):
    """Decoder for bzip2-compressed tar archives."""

    name = "tar.bz2"

    def matches(self, buffer: bytes) -> bool:
        return buffer[: len(BZIP2_MAGIC)] == BZIP2_MAGIC

    def _decode(self, buffer: bytes) -> list[Entry]:
        try:
            inner = bz2.decompress(buffer)
        except (OSError, EOFError, ValueError) as e:
            raise DecodeError(f"Failed to decode {self.name} archive: {e}") from e
        return TarDecoder().decode(inner)
