"""Update management commands for the TMR CLI."""

import sys

import click

from ..formatters import create_console, format_json, format_models_table, format_yaml
from ..utils import ExitCode, get_manager_from_context, handle_error, require_managed_root


@click.group()
def update() -> None:
    """Check the remote catalog for new and updated models.

    Installed models are compared with the remote catalog by short name,
    languages and type. A model is outdated when the catalog offers a higher
    version.
    """
    pass


@update.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Fetch the remote catalog and report new and updated models.

    Exit codes:
      0: All installed models are up to date
     10: Updates available (CI-friendly)
    """
    manager = get_manager_from_context(ctx)
    result = manager.fetch_remote_models()
    if not result.success:
        handle_error(Exception(result.message), ExitCode.DATA_SOURCE_ERROR)

    format_type = ctx.obj["format"]

    if format_type in ("json", "yaml"):
        result_data = {
            "update_available": bool(result.updated_models),
            "status": result.status,
            "message": result.message,
            "new_models": [m.to_dict() for m in result.new_models],
            "updated_models": [m.to_dict() for m in result.updated_models],
        }
        (format_yaml if format_type == "yaml" else format_json)(result_data)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        if result.updated_models:
            console.print(f"🔄 [yellow]{len(result.updated_models)} update(s) available[/yellow]")
            format_models_table(result.updated_models, console, kind="updates")
        else:
            console.print("✅ [green]All installed models are up to date[/green]")
        if result.new_models:
            console.print(f"{len(result.new_models)} model(s) available for installation, see 'tmr models list --new'")

    sys.exit(ExitCode.UPDATE_AVAILABLE if result.updated_models else ExitCode.SUCCESS)


@update.command()
@click.option("--yes", is_flag=True, help="Install every update without prompting.")
@click.pass_context
def apply(ctx: click.Context, yes: bool = False) -> None:
    """Download and install every available model update.

    The previous installation of an updated model stays on disk; remove it
    with 'tmr models remove' once the update works.
    """
    manager = get_manager_from_context(ctx)
    require_managed_root(manager)

    fetched = manager.fetch_remote_models()
    if not fetched.success:
        handle_error(Exception(fetched.message), ExitCode.DATA_SOURCE_ERROR)

    results = []
    for model in fetched.updated_models:
        if not yes and not click.confirm(f"Install {model} version {model.remote_version:g}?", default=True):
            continue
        results.append(manager.install_remote(model))

    success = all(r.success for r in results)
    format_type = ctx.obj["format"]

    if format_type in ("json", "yaml"):
        result_data = {
            "success": success,
            "installed": [r.model.to_dict() for r in results if r.success and r.model is not None],
            "failed": [{"status": r.status, "message": r.message} for r in results if not r.success],
        }
        (format_yaml if format_type == "yaml" else format_json)(result_data)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        if not fetched.updated_models:
            console.print("✅ [green]All installed models are up to date[/green]")
        for r in results:
            if r.success:
                console.print(f"✅ [green]Installed[/green] {r.model}")
            else:
                console.print(f"❌ [red]Update failed[/red] {r.message}")

    sys.exit(ExitCode.SUCCESS if success else ExitCode.GENERIC_ERROR)
