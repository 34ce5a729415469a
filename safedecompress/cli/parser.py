"""CLI module for safedecompress.

This file contains the Typer application and CLI command handlers.
Config and logging setup live in ``safedecompress.cli.runner``.
"""

from typing import Annotated

import typer

from safedecompress import __version__
from safedecompress.cli.runner import initialize_config
from safedecompress.commands import ExtractCommand, ListCommand
from safedecompress.config import AppConfig
from safedecompress.decoders import DECODER_REGISTRY

# Create the main Typer app
app = typer.Typer(
    name="safedecompress",
    help="safedecompress - Extract archives without escaping the target directory",
    add_completion=False,
)

ConfigDirOption = Annotated[
    str | None,
    typer.Option(
        "--config-dir",
        help="Directory holding config.conf",
        envvar="SAFEDECOMPRESS_CONFIG_DIR",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show progress, not just errors"),
]
LogFileOption = Annotated[
    str | None,
    typer.Option(
        "--log-file",
        help="Write the log here instead of the state directory",
    ),
]
StripOption = Annotated[
    int | None,
    typer.Option(
        "--strip",
        min=0,
        help="Remove N leading path segments from every entry",
    ),
]


def get_version() -> str:
    """Return the application version."""
    version: str = __version__
    return version


def _version_callback(
    ctx: typer.Context, _param: typer.CallbackParam, value: bool
) -> None:
    """Print the version and exit when --version is given."""
    if not value or ctx.resilient_parsing:
        return
    typer.echo(get_version())
    raise typer.Exit


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    _show_version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            is_eager=True,
            callback=_version_callback,
            help="Show the application version",
        ),
    ] = False,
) -> None:
    """Allow a global --version option."""
    if ctx.invoked_subcommand is None:
        return


@app.command(name="version")
def version_cmd() -> None:
    """Print the installed package version."""
    typer.echo(get_version())


def apply_format_override(config: AppConfig, formats: list[str] | None) -> None:
    """Replace the configured formats with the ones given on the CLI."""
    if not formats:
        return
    unknown = [name for name in formats if name not in DECODER_REGISTRY]
    if unknown:
        typer.echo(
            f"Error: Unknown format(s): {', '.join(unknown)}. "
            f"Expected one of: {', '.join(DECODER_REGISTRY)}"
        )
        raise typer.Exit(1)
    config.formats = list(formats)


@app.command()
def extract(
    archive: Annotated[str, typer.Argument(help="Archive file to extract")],
    output: Annotated[
        str | None,
        typer.Argument(
            help="Target directory (default: <archive>-extracted)"
        ),
    ] = None,
    strip: StripOption = None,
    formats: Annotated[
        list[str] | None,
        typer.Option(
            "--format",
            "-f",
            help="Archive format to try; repeat for several",
        ),
    ] = None,
    config_dir: ConfigDirOption = None,
    verbose: VerboseOption = False,
    log_file: LogFileOption = None,
) -> None:
    """Extract an archive into a directory."""
    config = initialize_config(config_dir, verbose=verbose, log_file=log_file)
    apply_format_override(config, formats)

    command = ExtractCommand(config, archive, output_dir=output, strip=strip)
    success = command.execute()
    if not success:
        typer.echo(f"Error: Failed to extract {archive}")
        raise typer.Exit(1)
    typer.echo(
        f"Extracted {len(command.extracted)} entries to {command.output_dir}"
    )


@app.command(name="list")
def list_cmd(
    archive: Annotated[str, typer.Argument(help="Archive file to list")],
    strip: StripOption = None,
    config_dir: ConfigDirOption = None,
    verbose: VerboseOption = False,
    log_file: LogFileOption = None,
) -> None:
    """List archive entries without writing anything."""
    config = initialize_config(config_dir, verbose=verbose, log_file=log_file)
    command = ListCommand(config, archive, strip=strip)
    success = command.execute()
    if not success:
        typer.echo(f"Error: Failed to read {archive}")
        raise typer.Exit(1)
