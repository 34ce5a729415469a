"""Exception hierarchy for safedecompress.

Every error raised by the extraction engine derives from
``SafeDecompressError`` so callers can catch the whole surface at once.
Plain filesystem failures are not wrapped: they surface as ``OSError``.
"""


class SafeDecompressError(Exception):
    """Base exception for extraction failures."""


class InputError(SafeDecompressError, TypeError):
    """The input is neither a byte buffer nor a path to read one from."""


class ContainmentViolation(SafeDecompressError):
    """An entry would write outside the canonical output root.

    Raised for ``../`` traversal, symlinked parent directories and
    writes through an existing symlink. Messages start with "Refusing".
    """


class DecodeError(SafeDecompressError):
    """A decoder recognised the archive signature but could not parse it."""
