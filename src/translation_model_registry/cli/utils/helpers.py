"""Helper functions for CLI operations."""

import os
import sys
from typing import Any, Dict, List, Optional

import click

from ...config_paths import ENV_CATALOG_URL, ENV_DISABLE_CWD_SCAN, ENV_MODELS_DIR
from ...events import RegistryEvent
from ...manager import ModelManager


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    MODEL_NOT_FOUND = 3
    DATA_SOURCE_ERROR = 4
    UPDATE_AVAILABLE = 10  # CI-friendly code for update check


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    # Auto-detect based on TTY
    if sys.stdout.isatty():
        return default_tty
    else:
        return default_non_tty


def handle_error(error: Exception, exit_code: int = ExitCode.GENERIC_ERROR) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        error: Exception to handle
        exit_code: Exit code to use
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code)


def get_tmr_env_vars() -> Dict[str, Optional[str]]:
    """Get all TMR_* environment variables.

    Returns:
        Dictionary of TMR environment variables and their values
    """
    tmr_vars: Dict[str, Optional[str]] = {}
    for key, value in os.environ.items():
        if key.startswith("TMR_"):
            tmr_vars[key] = value

    # Include known variables even if not set
    common_vars: List[str] = [ENV_MODELS_DIR, ENV_CATALOG_URL, ENV_DISABLE_CWD_SCAN]

    for var in common_vars:
        if var not in tmr_vars:
            tmr_vars[var] = None

    return tmr_vars


def validate_format_support(
    format_type: str,
    supported_formats: List[str],
    command_name: str,
    ctx_obj: Dict[str, Any],
) -> str:
    """Validate format support for a command with consistent fallback behavior.

    Args:
        format_type: The requested format
        supported_formats: List of supported formats for this command
        command_name: Name of the command for error messages
        ctx_obj: Click context object containing verbosity settings

    Returns:
        The validated format (may be changed from input for fallback)

    Raises:
        click.BadParameter: For unsupported formats that can't fall back
    """
    if format_type in supported_formats:
        return format_type

    if format_type == "table":
        fallback_format = "json" if "json" in supported_formats else supported_formats[0]
        # Only show message in verbose mode to avoid cluttering output
        if ctx_obj.get("verbose", 0) > 0:
            click.echo(
                f"Note: {command_name} doesn't support '{format_type}' format, using {fallback_format} instead.",
                err=True,
            )
        return fallback_format
    else:
        supported_list = "', '".join(supported_formats)
        raise click.BadParameter(f"Format '{format_type}' is not supported for {command_name}. Use '{supported_list}'.")


def _warn_corrupt_package(event: RegistryEvent, data: Dict[str, Any]) -> None:
    if event == RegistryEvent.CORRUPT_PACKAGE:
        click.echo(f"Warning: {data.get('message')}", err=True)


def get_manager_from_context(ctx: click.Context) -> ModelManager:
    """Get the model manager for this invocation, creating it on first use.

    Corrupt packages found while scanning are reported on stderr.

    Args:
        ctx: Click context holding the global options

    Returns:
        The model manager
    """
    obj = ctx.find_root().ensure_object(dict)
    manager = obj.get("manager")
    if manager is None:
        manager = ModelManager(models_dir=obj.get("models_dir"), load=False)
        manager.subscribe(_warn_corrupt_package)
        manager.startup_load()
        obj["manager"] = manager
    return manager


def require_managed_root(manager: ModelManager) -> None:
    """Exit with a data source error if the managed root is unusable."""
    if manager.root_error is not None:
        handle_error(manager.root_error, ExitCode.DATA_SOURCE_ERROR)
