"""List command implementation.

Decodes an archive in dry mode and prints one line per entry.
"""

import logging

import typer

from safedecompress.commands.command import Command
from safedecompress.config import AppConfig, ExtractOptions
from safedecompress.engine import extract
from safedecompress.entry import Entry
from safedecompress.errors import SafeDecompressError
from safedecompress.utils.format import format_entry_line, format_size


class ListCommand(Command):
    """Command to show archive contents without writing anything."""

    def __init__(
        self, config: AppConfig, file_path: str, strip: int | None = None
    ) -> None:
        """Initialize ListCommand.

        Args:
            config (AppConfig): Application configuration.
            file_path (str): Path to the archive to list.
            strip (int | None): Leading segments to strip before listing.

        """
        self.config: AppConfig = config
        self.file_path: str = file_path
        self.strip: int = config.default_strip if strip is None else strip
        self.entries: list[Entry] = []
        self.logger: logging.Logger = logging.getLogger(__name__)

    def execute(self) -> bool:
        """Print the archive listing.

        Returns:
            bool: True if the archive could be decoded, False otherwise.

        """
        options = ExtractOptions(
            plugins=self.config.build_plugins(), strip=self.strip
        )
        try:
            self.entries = extract(self.file_path, options)
        except SafeDecompressError as e:
            self.logger.error("Listing failed: %s", e)
            return False

        for entry in self.entries:
            typer.echo(format_entry_line(entry))
        total = sum(len(entry.data) for entry in self.entries)
        typer.echo(f"{len(self.entries)} entries, {format_size(total)}")
        return True
