"""Registry of built-in decoders and the function that runs them."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from safedecompress.decoders.base import Decoder
from safedecompress.decoders.tar import TarBz2Decoder, TarDecoder, TarGzDecoder
from safedecompress.decoders.zip import ZipDecoder
from safedecompress.entry import Entry

if TYPE_CHECKING:
    from safedecompress.config import ExtractOptions

logger = logging.getLogger(__name__)

DECODER_REGISTRY: dict[str, type[Decoder]] = {
    TarDecoder.name: TarDecoder,
    TarBz2Decoder.name: TarBz2Decoder,
    TarGzDecoder.name: TarGzDecoder,
    ZipDecoder.name: ZipDecoder,
}


def default_decoders() -> list[Decoder]:
    """Return fresh instances of every built-in decoder, in registry order."""
    return [decoder_cls() for decoder_cls in DECODER_REGISTRY.values()]


def get_decoder(name: str) -> Decoder:
    """Return a decoder instance for a format name such as ``"tar.gz"``.

    Raises:
        KeyError: No decoder is registered under ``name``.

    """
    try:
        return DECODER_REGISTRY[name]()
    except KeyError:
        raise KeyError(
            f"Unknown archive format '{name}' "
            f"(expected one of: {', '.join(DECODER_REGISTRY)})"
        ) from None


async def run_decoders(buffer: bytes, options: ExtractOptions) -> list[Entry]:
    """Run every configured decoder and concatenate their entries.

    Decoders run concurrently; the result keeps configuration order.
    """
    if not options.plugins:
        return []

    results = await asyncio.gather(
        *(asyncio.to_thread(plugin, buffer, options) for plugin in options.plugins)
    )
    entries = [entry for decoded in results for entry in decoded]
    logger.debug(
        "Decoded %d entries with %d decoders", len(entries), len(options.plugins)
    )
    return entries
