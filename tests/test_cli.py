"""Tests for the Typer command-line interface."""

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from conftest import JPEG_BYTES, build_tar
from safedecompress import __version__
from safedecompress.cli import app
from safedecompress.config import AppConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_logging() -> Iterator[MagicMock]:
    """Keep CLI runs from configuring real log files."""
    with patch("safedecompress.cli.runner.setup_application_logging") as mock_setup, patch(
        "safedecompress.cli.runner.setup_basic_logging"
    ):
        yield mock_setup


@pytest.fixture
def config_dir(tmp_path: Path) -> str:
    """Create a config directory holding a default config file."""
    path = tmp_path / "config"
    AppConfig.create_default(str(path))
    return str(path)


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    """Create a tar archive with one file below a directory."""
    path = tmp_path / "pkg.tar"
    path.write_bytes(
        build_tar(
            [
                {"name": "pkg/", "type": "directory"},
                {"name": "pkg/test.jpg", "data": JPEG_BYTES},
            ]
        )
    )
    return path


class TestCli:
    """Test CLI commands."""

    def test_version_option(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_command(self) -> None:
        """The version command prints the version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_extract(self, archive: Path, tmp_path: Path, config_dir: str) -> None:
        """extract writes the archive into the given directory."""
        output = tmp_path / "out"
        result = runner.invoke(
            app,
            ["extract", str(archive), str(output), "--strip", "1", "--config-dir", config_dir],
        )
        assert result.exit_code == 0, result.stdout
        assert (output / "test.jpg").read_bytes() == JPEG_BYTES
        assert "Extracted 1 entries" in result.stdout

    def test_extract_default_output(self, archive: Path, config_dir: str) -> None:
        """Without OUTPUT the archive goes to <name>-extracted."""
        result = runner.invoke(app, ["extract", str(archive), "--config-dir", config_dir])
        assert result.exit_code == 0, result.stdout
        assert (archive.parent / "pkg-extracted" / "pkg" / "test.jpg").exists()

    def test_extract_unknown_format(self, archive: Path, config_dir: str) -> None:
        """Unknown --format values are rejected."""
        result = runner.invoke(
            app, ["extract", str(archive), "--format", "rar", "--config-dir", config_dir]
        )
        assert result.exit_code == 1
        assert "Unknown format(s): rar" in result.stdout

    def test_extract_refuses_escape(self, tmp_path: Path, config_dir: str) -> None:
        """An escaping archive exits non-zero and writes nothing outside."""
        evil = tmp_path / "evil.tar"
        evil.write_bytes(build_tar([{"name": "../escaped.txt", "data": b"x"}]))
        result = runner.invoke(
            app, ["extract", str(evil), str(tmp_path / "out"), "--config-dir", config_dir]
        )
        assert result.exit_code == 1
        assert not (tmp_path / "escaped.txt").exists()

    def test_list(self, archive: Path, config_dir: str) -> None:
        """list prints entries without extracting."""
        result = runner.invoke(app, ["list", str(archive), "--config-dir", config_dir])
        assert result.exit_code == 0
        assert "pkg/test.jpg" in result.stdout
        assert not (archive.parent / "pkg-extracted").exists()

    def test_list_missing_archive(self, tmp_path: Path, config_dir: str) -> None:
        """Listing a missing file exits with an error."""
        result = runner.invoke(
            app, ["list", str(tmp_path / "missing.tar"), "--config-dir", config_dir]
        )
        assert result.exit_code == 1

    def test_first_run_creates_config(self, archive: Path, tmp_path: Path) -> None:
        """A missing config file is created with defaults."""
        config_dir = tmp_path / "new-config"
        result = runner.invoke(app, ["list", str(archive), "--config-dir", str(config_dir)])
        assert result.exit_code == 0
        assert (config_dir / "config.conf").exists()

    def test_logging_options(
        self,
        archive: Path,
        config_dir: str,
        tmp_path: Path,
        isolated_logging: MagicMock,
    ) -> None:
        """--verbose and --log-file reach the logging setup."""
        log_file = str(tmp_path / "run.log")
        result = runner.invoke(
            app,
            ["list", str(archive), "-v", "--log-file", log_file, "--config-dir", config_dir],
        )
        assert result.exit_code == 0
        isolated_logging.assert_called_once_with(
            logging.INFO, verbose=True, log_file=log_file
        )
