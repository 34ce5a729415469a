"""Logging setup for the safedecompress command-line tool.

Library modules only create module-level loggers; handlers are installed
here by the CLI. Every run appends to a rotating log file in the XDG
state directory, or wherever ``--log-file`` points. The console shows
errors only, which keeps ``list`` output clean, and per-entry progress
with ``--verbose``.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "safedecompress.log"
MAX_LOG_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3
FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def get_xdg_state_home() -> Path:
    """Return the XDG state home directory path.

    Returns:
        Path: XDG state home directory or fallback to ~/.local/state

    """
    xdg_state_home: str | None = os.getenv("XDG_STATE_HOME")
    if not xdg_state_home or not Path(xdg_state_home).is_absolute():
        return Path.home() / ".local" / "state"
    return Path(xdg_state_home)


def default_log_file() -> Path:
    """Return the log file used when none is given."""
    return get_xdg_state_home() / "safedecompress" / LOG_FILE_NAME


class ConsoleFormatter(logging.Formatter):
    """Print progress bare and prefix warnings and errors with their level.

    Refusals from the containment guard then read as
    ``error: Refusing to write ...`` on the terminal.
    """

    def __init__(self) -> None:
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.lower()}: {message}"
        return message


def setup_application_logging(
    log_level: int = logging.INFO,
    verbose: bool = False,
    log_file: str | os.PathLike[str] | None = None,
) -> Path:
    """Install the file and console handlers on the root logger.

    Handlers from an earlier call are closed and replaced, so calling
    this twice does not duplicate output.

    Args:
        log_level (int): Level written to the log file.
        verbose (bool): Also show INFO and DEBUG records on the console,
            down to ``log_level``.
        log_file: Log file path. Defaults to ``default_log_file()``.

    Returns:
        Path: The log file in use.

    """
    path = Path(log_file).expanduser() if log_file else default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    file_handler.setLevel(log_level)

    console_level = min(log_level, logging.INFO) if verbose else logging.ERROR
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(console_level)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(min(log_level, console_level))
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    logging.getLogger(__name__).debug(
        "Logging to %s at %s", path, logging.getLevelName(log_level)
    )
    return path


def setup_basic_logging() -> None:
    """Show INFO messages on the console before the config is read."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
