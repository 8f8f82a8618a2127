"""Main CLI application for the Translation Model Registry."""

import logging
from typing import Optional

import click
import rich_click as rich_click

from .utils import resolve_format

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


def _resolve_log_level(verbose: int, quiet: int, debug: bool) -> str:
    log_level = "WARNING"
    if debug:
        log_level = "DEBUG"
    elif verbose > quiet:
        if verbose >= 2:
            log_level = "DEBUG"
        elif verbose >= 1:
            log_level = "INFO"
    elif quiet > verbose:
        if quiet >= 2:
            log_level = "CRITICAL"
        elif quiet >= 1:
            log_level = "ERROR"
    return log_level


@click.group(invoke_without_command=True)
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option(
    "--models-dir",
    type=click.Path(file_okay=True, dir_okay=True),
    help="Directory of installed models. Takes precedence over the TMR_MODELS_DIR environment variable.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, is_eager=True, help="Print CLI and library version information.")
@click.pass_context
def app(
    ctx: click.Context,
    format: Optional[str] = None,
    models_dir: Optional[str] = None,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
) -> None:
    """Translation Model Registry CLI - install and update translation models.

    The TMR CLI installs model packages from .tar.gz archives, lists installed
    models, and compares them with the remote model catalog.

    Examples:
      # List installed models
      tmr models list

      # Install a downloaded archive
      tmr models install deen.student.tiny11.tar.gz

      # Check for updates
      tmr update check

      # Show where models are stored
      tmr data paths
    """
    if version:
        try:
            from .. import __version__

            library_version = __version__
        except ImportError:
            library_version = "unknown"

        click.echo(f"TMR CLI version: {library_version}")
        click.echo(f"Library version: {library_version}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    # Store global options in context for subcommands
    ctx.ensure_object(dict)

    log_level = _resolve_log_level(verbose, quiet, debug)
    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("translation_model_registry").setLevel(log_level)

    ctx.obj.update(
        {
            "format": resolve_format(format),
            "format_explicit": format is not None,
            "models_dir": models_dir,
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
        }
    )


# Import and register subcommands (at module top is preferred, but we place
# here after context is built to avoid circular import issues in runtime.)
from .commands import data, models, update  # noqa: E402

app.add_command(data.data)
app.add_command(update.update)
app.add_command(models.models)


if __name__ == "__main__":
    app()
