"""Decoder interface.

A decoder turns a raw archive buffer into ``Entry`` records. Decoders
sniff the buffer first: a buffer in some other format yields no entries
instead of an error, so every configured decoder can be tried on every
input.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from safedecompress.entry import Entry

if TYPE_CHECKING:
    from safedecompress.config import ExtractOptions

logger = logging.getLogger(__name__)


def normalize_member_path(name: str, is_dir: bool = False) -> str:
    """Turn an archive member name into a relative entry path.

    Leading ``./`` and ``/`` are removed. Directories end with ``/``.
    Returns ``""`` for the archive root itself.
    """
    path = name
    while path.startswith("./"):
        path = path[2:]
    relative = path.lstrip("/")
    if relative != path:
        logger.warning("Removing leading '/' from member name %s", name)
    if relative in ("", ".", "./"):
        return ""
    if is_dir and not relative.endswith("/"):
        relative += "/"
    return relative


class Decoder(ABC):
    """Abstract archive decoder.

    Instances are callable with ``(buffer, options)`` so plain functions
    with the same signature can be mixed in with them.
    """

    name: str = ""

    def __call__(
        self, buffer: bytes, options: ExtractOptions | None = None
    ) -> list[Entry]:
        return self.decode(buffer, options)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @abstractmethod
    def matches(self, buffer: bytes) -> bool:
        """Return True if ``buffer`` carries this format's signature."""

    @abstractmethod
    def _decode(self, buffer: bytes) -> list[Entry]:
        """Decode a buffer already known to match."""

    def decode(
        self, buffer: bytes, options: ExtractOptions | None = None
    ) -> list[Entry]:
        """Decode ``buffer`` into entries, or none if the format differs.

        Args:
            buffer: Whole archive contents.
            options: Options of the running extraction; unused by the
                built-in decoders.

        Raises:
            DecodeError: The signature matched but the body is corrupt.

        """
        if not self.matches(buffer):
            logger.debug("%s: input is not a %s archive", self, self.name)
            return []
        entries = self._decode(buffer)
        logger.debug("%s decoded %d entries", self, len(entries))
        return entries
