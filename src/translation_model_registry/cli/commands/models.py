"""Model management commands for the TMR CLI."""

from pathlib import Path
from typing import List, Optional

import click

from ...errors import ModelNotFoundError
from ...manager import ModelManager
from ...model import Model
from ..formatters import (
    create_console,
    format_json,
    format_models_list_json,
    format_models_table,
    format_yaml,
)
from ..utils import (
    ExitCode,
    get_manager_from_context,
    handle_error,
    require_managed_root,
    validate_format_support,
)


def _output_models(ctx: click.Context, models: List[Model], kind: str) -> None:
    format_type = ctx.obj["format"]
    if format_type == "json":
        format_json(format_models_list_json(models, kind))
    elif format_type == "yaml":
        format_yaml(format_models_list_json(models, kind))
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        format_models_table(models, console, kind=kind)


def _fetch_or_exit(manager: ModelManager) -> None:
    result = manager.fetch_remote_models()
    if not result.success:
        handle_error(Exception(result.message), ExitCode.DATA_SOURCE_ERROR)


@click.group()
def models() -> None:
    """List, install and remove translation models."""
    pass


@models.command(name="list")
@click.option("--remote", "kind", flag_value="remote", help="List every model in the remote catalog.")
@click.option("--new", "kind", flag_value="new", help="List remote models that are not installed.")
@click.option("--updates", "kind", flag_value="updates", help="List remote models newer than the installed ones.")
@click.pass_context
def list_models(ctx: click.Context, kind: Optional[str] = None) -> None:
    """List installed models, or models from the remote catalog."""
    try:
        manager = get_manager_from_context(ctx)
        kind = kind or "installed"

        if kind == "installed":
            models_data = manager.installed_models()
        else:
            _fetch_or_exit(manager)
            if kind == "remote":
                models_data = manager.remote_models()
            elif kind == "new":
                models_data = manager.new_models()
            else:
                models_data = manager.updated_models()

        _output_models(ctx, models_data, kind)

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@models.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", type=str, help="File name used to name the installed directory.")
@click.pass_context
def install(ctx: click.Context, archive: Path, name: Optional[str] = None) -> None:
    """Install a model from a local .tar.gz archive.

    The archive is extracted and validated before anything is moved into the
    models directory. Installing a model with the same identity as an installed
    one replaces the registry entry.
    """
    manager = get_manager_from_context(ctx)
    require_managed_root(manager)

    result = manager.install_file(archive, name)
    if not result.success:
        handle_error(Exception(result.message), ExitCode.GENERIC_ERROR)

    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        payload = {"success": result.success, "status": result.status, "message": result.message, "model": result.model}
        (format_yaml if format_type == "yaml" else format_json)(payload)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        verb = "Installed" if result.status.value == "installed" else "Replaced"
        console.print(f"✅ [green]{verb}[/green] {result.model}")
        console.print(f"Location: {result.model.path}")


def _select_model(
    manager: ModelManager,
    short_name: str,
    src: Optional[str],
    trg: Optional[str],
    model_type: Optional[str],
) -> Model:
    matches = manager.find_models(short_name, source_language=src, target_language=trg, model_type=model_type)
    if not matches:
        handle_error(
            ModelNotFoundError(f"Model '{short_name}' is not installed", short_name),
            ExitCode.MODEL_NOT_FOUND,
        )
    if len(matches) > 1:
        candidates = ", ".join(str(m) for m in matches)
        handle_error(
            Exception(f"Model '{short_name}' is ambiguous ({candidates}). Use --src, --trg or --type."),
            ExitCode.INVALID_USAGE,
        )
    return matches[0]


@models.command()
@click.argument("short_name", type=str)
@click.option("--src", type=str, help="Source language of the model.")
@click.option("--trg", type=str, help="Target language of the model.")
@click.option("--type", "model_type", type=str, help="Model type.")
@click.option("--yes", is_flag=True, help="Confirm removal without prompting (required for non-interactive use).")
@click.pass_context
def remove(
    ctx: click.Context,
    short_name: str,
    src: Optional[str] = None,
    trg: Optional[str] = None,
    model_type: Optional[str] = None,
    yes: bool = False,
) -> None:
    """Remove an installed model from disk.

    Only models inside the models directory can be removed.
    """
    manager = get_manager_from_context(ctx)
    model = _select_model(manager, short_name, src, trg, model_type)

    if not yes:
        click.confirm(f"Delete {model} at {model.path}?", abort=True)

    result = manager.remove(model)
    if not result.success:
        handle_error(Exception(result.message), ExitCode.GENERIC_ERROR)

    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        payload = {"success": result.success, "status": result.status, "message": result.message, "path": model.path}
        (format_yaml if format_type == "yaml" else format_json)(payload)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        if result.status.value == "removed":
            console.print(f"✅ [green]Removed[/green] {model}")
        else:
            console.print(f"⚠️ [yellow]{result.message}[/yellow]")


@models.command()
@click.argument("short_name", type=str)
@click.option("--remote", is_flag=True, help="Also search the remote catalog.")
@click.pass_context
def get(ctx: click.Context, short_name: str, remote: bool = False) -> None:
    """Show every field of a model."""
    try:
        manager = get_manager_from_context(ctx)
        if remote:
            _fetch_or_exit(manager)

        matches = manager.find_models(short_name, include_remote=remote)
        if not matches:
            handle_error(ModelNotFoundError(f"Model '{short_name}' not found", short_name), ExitCode.MODEL_NOT_FOUND)
            return

        format_type = ctx.obj["format"]

        # Validate format support for models get
        try:
            format_type = validate_format_support(format_type, ["json", "yaml"], "models get", ctx.obj)
        except click.BadParameter as e:
            handle_error(e, ExitCode.INVALID_USAGE)

        payload = [m.to_dict() for m in matches]
        data = payload[0] if len(payload) == 1 else payload
        if format_type == "yaml":
            format_yaml(data)
        else:
            format_json(data)

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
