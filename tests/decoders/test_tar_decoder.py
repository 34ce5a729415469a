"""Tests for the tar family of decoders."""

from collections.abc import Callable

import pytest

from conftest import FIXED_MTIME, JPEG_BYTES
from safedecompress.decoders import TarBz2Decoder, TarDecoder, TarGzDecoder
from safedecompress.entry import EntryType
from safedecompress.errors import DecodeError


class TestTarDecoder:
    """Test cases for TarDecoder."""

    def test_decodes_file_entry(self, make_tar: Callable[..., bytes]) -> None:
        """A regular member becomes a file entry with data and mtime."""
        buffer = make_tar([{"name": "test.jpg", "data": JPEG_BYTES, "mode": 0o600}])

        entries = TarDecoder().decode(buffer)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.path == "test.jpg"
        assert entry.type is EntryType.FILE
        assert entry.data == JPEG_BYTES
        assert entry.mode == 0o600
        assert entry.mtime.timestamp() == FIXED_MTIME

    def test_directories_keep_trailing_slash(
        self, make_tar: Callable[..., bytes]
    ) -> None:
        """Directory entries end with '/' and dotted names are verbatim."""
        buffer = make_tar(
            [
                {"name": "edge_case_dots/", "type": "directory"},
                {"name": "edge_case_dots/sample../", "type": "directory"},
                {"name": "edge_case_dots/ending_dots..", "data": b"x"},
            ]
        )

        paths = [entry.path for entry in TarDecoder().decode(buffer)]

        assert paths == [
            "edge_case_dots/",
            "edge_case_dots/sample../",
            "edge_case_dots/ending_dots..",
        ]

    def test_links(self, make_tar: Callable[..., bytes]) -> None:
        """Symlinks and hard links carry their link names."""
        buffer = make_tar(
            [
                {"name": "file.txt", "data": b"x"},
                {"name": "sym", "type": "symlink", "linkname": "file.txt"},
                {"name": "hard", "type": "hardlink", "linkname": "./file.txt"},
            ]
        )

        entries = TarDecoder().decode(buffer)

        assert [(e.type, e.linkname) for e in entries[1:]] == [
            (EntryType.SYMLINK, "file.txt"),
            (EntryType.HARDLINK, "file.txt"),
        ]

    def test_unsupported_members_are_skipped(
        self, make_tar: Callable[..., bytes]
    ) -> None:
        """FIFOs and devices produce no entries."""
        buffer = make_tar([{"name": "pipe", "type": "fifo"}, {"name": "a.txt"}])
        assert [e.path for e in TarDecoder().decode(buffer)] == ["a.txt"]

    def test_leading_slash_and_dot_are_removed(
        self, make_tar: Callable[..., bytes]
    ) -> None:
        """Absolute and ./-prefixed names become relative."""
        buffer = make_tar(
            [
                {"name": "./", "type": "directory"},
                {"name": "./a.txt"},
                {"name": "/etc/passwd"},
            ]
        )
        assert [e.path for e in TarDecoder().decode(buffer)] == ["a.txt", "etc/passwd"]

    def test_other_formats_yield_nothing(
        self, make_tar: Callable[..., bytes], make_zip: Callable[..., bytes]
    ) -> None:
        """Non-tar input is not an error, just zero entries."""
        assert TarDecoder().decode(make_tar([{"name": "a"}], "gz")) == []
        assert TarDecoder().decode(make_zip([{"name": "a"}])) == []
        assert TarDecoder().decode(b"") == []

    def test_truncated_archive_raises(self, make_tar: Callable[..., bytes]) -> None:
        """A tar whose header matches but whose body is cut off fails."""
        buffer = make_tar([{"name": "big.bin", "data": b"x" * 4096}])
        with pytest.raises(DecodeError, match="tar"):
            TarDecoder().decode(buffer[:1024])

    def test_decoder_is_callable(self, make_tar: Callable[..., bytes]) -> None:
        """Decoders can be called like plain plugin functions."""
        buffer = make_tar([{"name": "a.txt"}])
        assert TarDecoder()(buffer, None) == TarDecoder().decode(buffer)


class TestCompressedTarDecoders:
    """Test cases for gzip and bzip2 tar decoders."""

    @pytest.mark.parametrize(
        ("decoder", "compression"),
        [(TarGzDecoder(), "gz"), (TarBz2Decoder(), "bz2")],
    )
    def test_decodes_compressed_tar(
        self,
        make_tar: Callable[..., bytes],
        decoder: TarDecoder,
        compression: str,
    ) -> None:
        """Compressed archives decode to the same entries."""
        buffer = make_tar([{"name": "test.jpg", "data": JPEG_BYTES}], compression)

        entries = decoder.decode(buffer)

        assert [e.path for e in entries] == ["test.jpg"]
        assert entries[0].data == JPEG_BYTES

    @pytest.mark.parametrize("decoder", [TarGzDecoder(), TarBz2Decoder()])
    def test_plain_tar_yields_nothing(
        self, make_tar: Callable[..., bytes], decoder: TarDecoder
    ) -> None:
        """An uncompressed tar is not theirs to decode."""
        assert decoder.decode(make_tar([{"name": "a"}])) == []

    def test_corrupt_gzip_raises(self) -> None:
        """A gzip header followed by garbage is a decode error."""
        with pytest.raises(DecodeError, match="tar.gz"):
            TarGzDecoder().decode(b"\x1f\x8b" + b"garbage" * 10)

    def test_corrupt_bzip2_raises(self) -> None:
        """A bzip2 header followed by garbage is a decode error."""
        with pytest.raises(DecodeError, match="tar.bz2"):
            TarBz2Decoder().decode(b"BZh9" + b"garbage" * 10)
