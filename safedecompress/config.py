"""Configuration for extraction calls and for the command-line tool.

``ExtractOptions`` is the immutable per-call configuration consumed by the
engine. ``AppConfig`` is the user's INI (.conf) file that the CLI reads
to pick defaults; comments are supported in that file.
"""

from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from safedecompress.decoders import (
    DECODER_REGISTRY,
    default_decoders,
    get_decoder,
)
from safedecompress.entry import Entry

logger = logging.getLogger(__name__)

# Any callable taking (buffer, options) and returning entries.
DecoderFn = Callable[[bytes, "ExtractOptions"], Sequence[Entry]]


def _default_plugins() -> tuple[DecoderFn, ...]:
    return tuple(default_decoders())


@dataclass(frozen=True)
class ExtractOptions:
    """Options for a single extraction call.

    Attributes:
        plugins: Decoders to run, in order. An empty tuple yields no
            entries at all.
        strip: Number of leading path segments removed from every entry.
        filter: Predicate; entries for which it is false are dropped.
        map: Function applied to every surviving entry.
        umask: File-creation mask applied to file modes. ``None`` reads
            the process umask once when the extraction starts.

    """

    plugins: tuple[DecoderFn, ...] = field(default_factory=_default_plugins)
    strip: int = 0
    filter: Callable[[Entry], bool] | None = None
    map: Callable[[Entry], Entry] | None = None
    umask: int | None = None

    def __post_init__(self) -> None:
        """Normalize plugins to a tuple and reject negative strip counts."""
        if self.strip < 0:
            raise ValueError(f"strip must be non-negative, got {self.strip}")
        object.__setattr__(self, "plugins", tuple(self.plugins))


def get_xdg_config_home() -> Path:
    """Return the XDG config home directory path."""
    xdg_config_home: str | None = os.getenv("XDG_CONFIG_HOME")
    if not xdg_config_home or not Path(xdg_config_home).is_absolute():
        return Path.home() / ".config"
    return Path(xdg_config_home)


def _default_config_dir() -> str:
    return str(get_xdg_config_home() / "safedecompress")


def _default_formats() -> list[str]:
    return list(DECODER_REGISTRY)


@dataclass
class AppConfig:
    """User configuration for the ``safedecompress`` command.

    Stored as an INI file so users can keep comments next to settings.
    """

    config_dir: str = field(default_factory=_default_config_dir)
    log_level: str = "INFO"
    default_strip: int = 0
    formats: list[str] = field(default_factory=_default_formats)

    def __post_init__(self) -> None:
        """Validate log level, strip count and format names."""
        self.log_level = self._validate_log_level(self.log_level)
        if self.default_strip < 0:
            logger.warning(
                "Invalid default_strip %d, defaulting to 0", self.default_strip
            )
            self.default_strip = 0
        self.formats = self._validate_formats(self.formats)

    def _validate_log_level(self, level: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level_upper = level.upper()
        if level_upper not in valid_levels:
            logger.warning("Invalid log level '%s', defaulting to INFO", level)
            return "INFO"
        return level_upper

    def _validate_formats(self, formats: list[str]) -> list[str]:
        known: list[str] = []
        for name in formats:
            if name in DECODER_REGISTRY:
                known.append(name)
            else:
                logger.warning("Ignoring unknown archive format '%s'", name)
        return known

    def get_log_level(self) -> int:
        """Convert the string log level to a ``logging`` constant."""
        return getattr(logging, self.log_level, logging.INFO)

    @property
    def config_path(self) -> Path:
        """Return the full path to the config file (INI format)."""
        return Path(self.config_dir).expanduser() / "config.conf"

    def build_plugins(self) -> tuple[DecoderFn, ...]:
        """Instantiate the decoders named in ``formats``, in order."""
        return tuple(get_decoder(name) for name in self.formats)

    def save(self) -> None:
        """Save the configuration with explanatory comments."""
        Path(self.config_dir).expanduser().mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write("[DEFAULT]\n")

            f.write("# Logging level for the application.\n")
            f.write(
                "#   Valid levels: DEBUG, INFO, WARNING, ERROR, CRITICAL\n"
            )
            f.write(f"log_level = {self.log_level}\n\n")

            f.write(
                "# Leading path segments removed from every entry when\n"
            )
            f.write("#   --strip is not given on the command line.\n")
            f.write(f"default_strip = {self.default_strip}\n\n")

            f.write("# Archive formats to try, one per line, in order.\n")
            f.write(f"#   Known formats: {', '.join(DECODER_REGISTRY)}\n")
            f.write("formats =\n")
            f.writelines(f"\t{name}\n" for name in self.formats)

        logger.info("Configuration saved to %s", self.config_path)

    @classmethod
    def load(cls, config_dir: str | None = None) -> AppConfig:
        """Load config from the INI file, or return defaults if missing.

        A file that cannot be parsed is logged and replaced by defaults.
        """
        default_config = cls(config_dir=config_dir) if config_dir else cls()
        config_path = default_config.config_path

        if not config_path.exists():
            return default_config

        parser = configparser.ConfigParser()
        try:
            parser.read(config_path, encoding="utf-8")
            section = parser["DEFAULT"]
            log_level = section.get("log_level", default_config.log_level)
            default_strip = int(
                section.get("default_strip", default_config.default_strip)
            )
            formats_value = section.get("formats", "")
            formats = [
                line.strip()
                for line in formats_value.strip().splitlines()
                if line.strip()
            ] or list(default_config.formats)

            return cls(
                config_dir=default_config.config_dir,
                log_level=log_level,
                default_strip=default_strip,
                formats=formats,
            )
        except (OSError, ValueError, configparser.Error):
            logger.exception("Error reading config file")
            logger.warning("Using default configuration")
            return default_config

    @classmethod
    def create_default(cls, config_dir: str | None = None) -> AppConfig:
        """Create and save the default configuration."""
        config = cls(config_dir=config_dir) if config_dir else cls()
        config.save()
        logger.info("Created default configuration at %s", config.config_path)
        return config
