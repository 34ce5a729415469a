"""Archive decoders.

This package aggregates the decoder classes and registry helpers for easy
importing.
"""

from safedecompress.decoders.base import Decoder, normalize_member_path
from safedecompress.decoders.registry import (
    DECODER_REGISTRY,
    default_decoders,
    get_decoder,
    run_decoders,
)
from safedecompress.decoders.tar import TarBz2Decoder, TarDecoder, TarGzDecoder
from safedecompress.decoders.zip import ZipDecoder

__all__ = [
    "DECODER_REGISTRY",
    "Decoder",
    "TarBz2Decoder",
    "TarDecoder",
    "TarGzDecoder",
    "ZipDecoder",
    "default_decoders",
    "get_decoder",
    "normalize_member_path",
    "run_decoders",
]
