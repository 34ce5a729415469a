"""CLI orchestration utilities for safedecompress.

This module contains helpers for the CLI layer such as config
initialization.
"""

from __future__ import annotations

import logging

from safedecompress.config import AppConfig
from safedecompress.logger import (
    setup_application_logging,
    setup_basic_logging,
)

logger = logging.getLogger(__name__)


def initialize_config(
    config_dir: str | None = None,
    verbose: bool = False,
    log_file: str | None = None,
) -> AppConfig:
    """Initialize configuration and logging for the application.

    Args:
        config_dir: Optional directory holding ``config.conf``.
        verbose: Show progress on the console, not just errors.
        log_file: Log file to use instead of the XDG state location.

    Returns:
        AppConfig: Loaded or newly created config instance.
    """
    config = AppConfig.load(config_dir)

    if not config.config_path.exists():
        # Basic logging for initial setup
        setup_basic_logging()
        logger.info("No configuration found. Creating defaults.")
        config = AppConfig.create_default(config_dir)
        logger.info("Default config created at %s", config.config_path)

    setup_application_logging(
        config.get_log_level(), verbose=verbose, log_file=log_file
    )
    return config
