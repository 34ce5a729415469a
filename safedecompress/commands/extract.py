"""Extract command implementation.

This module contains the ExtractCommand class that extracts an archive
into an output directory through the containment-checked engine.
"""

import logging
from pathlib import Path

from safedecompress.commands.command import Command
from safedecompress.config import AppConfig, ExtractOptions
from safedecompress.engine import extract
from safedecompress.entry import Entry
from safedecompress.errors import ContainmentViolation, SafeDecompressError
from safedecompress.utils import ensure_output_folder


class ExtractCommand(Command):
    """Command to extract an archive without escaping the output directory."""

    def __init__(
        self,
        config: AppConfig,
        file_path: str,
        output_dir: str | None = None,
        strip: int | None = None,
    ) -> None:
        """Initialize ExtractCommand.

        Args:
            config (AppConfig): Application configuration.
            file_path (str): Path to the archive to extract.
            output_dir (str | None): Target directory. Defaults to
                ``<archive name>-extracted`` next to the archive.
            strip (int | None): Leading segments to strip; falls back to
                ``config.default_strip``.

        """
        self.config: AppConfig = config
        self.file_path: str = file_path
        self.output_dir: str = output_dir or self._default_output_dir()
        self.strip: int = config.default_strip if strip is None else strip
        self.extracted: list[Entry] = []
        self.logger: logging.Logger = logging.getLogger(__name__)

    def _default_output_dir(self) -> str:
        name = Path(self.file_path).name
        for suffix in (".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar", ".zip"):
            if name.endswith(suffix):
                name = name[: -len(suffix)]
                break
        return str(Path(self.file_path).with_name(f"{name}-extracted"))

    def execute(self) -> bool:
        """Extract the archive to the output directory.

        Returns:
            bool: True if extraction succeeded, False otherwise.

        """
        options = ExtractOptions(
            plugins=self.config.build_plugins(), strip=self.strip
        )
        try:
            output = ensure_output_folder(self.output_dir)
            self.extracted = extract(self.file_path, output, options)
        except ContainmentViolation as e:
            self.logger.error("Unsafe archive %s: %s", self.file_path, e)
            return False
        except SafeDecompressError as e:
            self.logger.error("Extraction failed: %s", e)
            return False
        except OSError:
            self.logger.exception("Unexpected error during extraction")
            return False

        if not self.extracted:
            self.logger.warning(
                "No entries extracted from %s (unsupported format?)",
                self.file_path,
            )
        self.logger.info(
            "Successfully extracted %d entries to %s",
            len(self.extracted),
            self.output_dir,
        )
        return True
