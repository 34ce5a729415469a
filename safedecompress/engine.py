"""Extraction engine entry points.

``extract`` reads an archive (bytes or a path), runs the configured
decoders, applies the strip / filter / map pipeline and, when an output
directory is given, writes the entries below it. Without an output
directory the call is dry and only returns the entries.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

from safedecompress.config import ExtractOptions
from safedecompress.decoders import run_decoders
from safedecompress.entry import Entry
from safedecompress.errors import InputError
from safedecompress.materializer import Materializer
from safedecompress.transform import apply_transforms
from safedecompress.utils import current_umask

logger = logging.getLogger(__name__)

ArchiveInput = bytes | bytearray | memoryview | str | os.PathLike
OutputPath = str | os.PathLike


def _resolve_arguments(
    output: OutputPath | ExtractOptions | None,
    options: ExtractOptions | None,
    overrides: dict[str, Any],
) -> tuple[OutputPath | None, ExtractOptions]:
    """Allow options in place of output, and keyword options."""
    if isinstance(output, ExtractOptions):
        if options is not None:
            raise TypeError("options given twice")
        options, output = output, None
    if options is None:
        options = ExtractOptions(**overrides)
    elif overrides:
        raise TypeError(
            "pass either an ExtractOptions instance or keyword options, "
            "not both"
        )
    return output, options


async def _read_input(input: ArchiveInput) -> bytes:
    if isinstance(input, (bytes, bytearray, memoryview)):
        return bytes(input)
    try:
        return await asyncio.to_thread(Path(input).read_bytes)
    except OSError as e:
        raise InputError(f"Input file required: cannot read {input}") from e


async def extract_async(
    input: ArchiveInput,
    output: OutputPath | ExtractOptions | None = None,
    options: ExtractOptions | None = None,
    **overrides: Any,
) -> list[Entry]:
    """Decode an archive and, if ``output`` is given, write it out safely.

    Args:
        input: Archive contents, or a path to read them from.
        output: Target directory. ``None`` makes the call dry. An
            ``ExtractOptions`` here is taken as ``options``.
        options: Extraction options. Keyword arguments (``strip``,
            ``filter``, ``map``, ``plugins``, ``umask``) build one instead.

    Returns:
        The entries that were written, or would be in a dry call, after
        the strip / filter / map pipeline.

    Raises:
        InputError: ``input`` is neither bytes nor a readable path.
        ContainmentViolation: An entry would escape ``output``.
        DecodeError: An archive matched a decoder but is corrupt.
        OSError: A filesystem operation failed.

    """
    if not isinstance(input, (bytes, bytearray, memoryview, str, os.PathLike)):
        raise InputError("Input file required")
    output, options = _resolve_arguments(output, options, overrides)

    buffer = await _read_input(input)
    entries = await run_decoders(buffer, options)
    entries = apply_transforms(entries, options)

    if output is None:
        logger.debug("Dry run: %d entries decoded", len(entries))
        return entries

    umask = options.umask if options.umask is not None else current_umask()
    materializer = Materializer(output, umask)
    result = await materializer.materialize(entries)
    logger.info("Extracted %d entries to %s", len(result), output)
    return result


def extract(
    input: ArchiveInput,
    output: OutputPath | ExtractOptions | None = None,
    options: ExtractOptions | None = None,
    **overrides: Any,
) -> list[Entry]:
    """Run ``extract_async`` to completion on a fresh event loop."""
    return asyncio.run(extract_async(input, output, options, **overrides))
