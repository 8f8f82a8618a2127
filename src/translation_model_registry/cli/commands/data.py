"""Data inspection commands for the TMR CLI."""

import os
from typing import Any, Dict

import click

from ...config_paths import (
    DEFAULT_CATALOG_URL,
    ENV_CATALOG_URL,
    ENV_MODELS_DIR,
    get_catalog_url,
    get_managed_root,
    get_user_data_dir,
)
from ..formatters import (
    create_console,
    format_data_paths_json,
    format_data_paths_table,
    format_env_vars_json,
    format_env_vars_table,
    format_json,
    format_yaml,
)
from ..utils import ExitCode, get_tmr_env_vars, handle_error


@click.group()
def data() -> None:
    """Inspect data sources and configuration."""
    pass


@data.command()
@click.pass_context
def paths(ctx: click.Context) -> None:
    """Show resolved data source paths and precedence."""
    try:
        models_dir = ctx.obj.get("models_dir")
        managed_root = get_managed_root(models_dir)
        if models_dir:
            root_source = "CLI flag (--models-dir)"
        elif os.environ.get(ENV_MODELS_DIR):
            root_source = f"Environment variable ({ENV_MODELS_DIR})"
        else:
            root_source = "User data directory"

        catalog_url = get_catalog_url()
        catalog_source = "Default"
        if catalog_url != DEFAULT_CATALOG_URL:
            catalog_source = f"Environment variable ({ENV_CATALOG_URL})"

        paths_info: Dict[str, Dict[str, Any]] = {
            "models_dir": {
                "path": str(managed_root),
                "source": root_source,
                "exists": managed_root.is_dir(),
            },
            "user_data_dir": {
                "path": str(get_user_data_dir()),
                "source": "platformdirs",
                "exists": get_user_data_dir().is_dir(),
            },
            "catalog": {"path": catalog_url, "source": catalog_source, "exists": None},
        }

        format_type = ctx.obj["format"]
        if format_type == "json":
            format_json(format_data_paths_json(paths_info))
        elif format_type == "yaml":
            format_yaml(format_data_paths_json(paths_info))
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_data_paths_table(paths_info, console)

    except Exception as e:
        handle_error(e, ExitCode.DATA_SOURCE_ERROR)


@data.command()
@click.pass_context
def env(ctx: click.Context) -> None:
    """Show effective TMR environment variables."""
    try:
        env_vars = get_tmr_env_vars()

        format_type = ctx.obj["format"]
        if format_type == "json":
            format_json(format_env_vars_json(env_vars))
        elif format_type == "yaml":
            format_yaml(format_env_vars_json(env_vars))
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_env_vars_table(env_vars, console)

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
