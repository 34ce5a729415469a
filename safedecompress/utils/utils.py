"""Small filesystem helpers used by the engine and the CLI."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

PROC_STATUS = "/proc/self/status"


def _read_proc_umask(status_path: str = PROC_STATUS) -> int | None:
    """Return the ``Umask:`` field of a Linux process status file.

    Returns None where the file or the field does not exist (non-Linux
    systems, kernels older than 4.7).
    """
    try:
        with open(status_path, encoding="ascii") as f:
            for line in f:
                if line.startswith("Umask:"):
                    return int(line.split()[1], 8)
    except (OSError, ValueError, IndexError):
        logger.debug("Cannot read umask from %s", status_path)
    return None


def current_umask() -> int:
    """Return the process file-creation mask without changing it.

    On Linux the mask is read from ``/proc``. Elsewhere ``os.umask`` can
    only be read by setting it, so the old value is restored straight
    away; call this before starting threads that create files.
    """
    mask = _read_proc_umask()
    if mask is not None:
        return mask
    mask = os.umask(0)
    os.umask(mask)
    return mask


def ensure_output_folder(folder: str) -> Path:
    """Expand ``~`` in ``folder`` and create it if necessary.

    Args:
        folder (str): Path to the output folder.

    Returns:
        pathlib.Path: Expanded ``Path`` pointing to the ensured folder.

    Raises:
        OSError: If the folder cannot be created due to permission or
            filesystem errors.

    """
    path = Path(folder).expanduser()
    if not path.exists():
        logger.info("Creating output folder at %s", path)
        path.mkdir(parents=True, exist_ok=True)
    return path
