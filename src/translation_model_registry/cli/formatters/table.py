"""Rich table formatter for CLI output."""

import sys
from typing import Any, Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ...model import Model


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    # Let Rich use the actual terminal width to avoid truncating headers
    return Console(file=output, no_color=no_color)


def _format_version(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:g}"


_TITLES = {
    "installed": "Installed Models",
    "remote": "Remote Models",
    "new": "New Models",
    "updates": "Model Updates",
}


def format_models_table(models: List[Model], console: Optional[Console] = None, kind: str = "installed") -> None:
    """Format models as a Rich table.

    Args:
        models: Models in presentation order
        console: Rich console (will create if None)
        kind: Which list is shown (installed, remote, new, updates)
    """
    if console is None:
        console = create_console()

    table = Table(title=_TITLES.get(kind, "Models"), show_header=True, header_style="bold magenta")

    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Short Name", no_wrap=True)
    table.add_column("Src", justify="center")
    table.add_column("Trg", justify="center")
    table.add_column("Type")
    table.add_column("Version", justify="right")
    table.add_column("Latest", justify="right")
    table.add_column("Location", style="dim")

    for model in models:
        if model.is_local:
            version = _format_version(model.local_version)
            location = model.path
        else:
            version = _format_version(model.remote_version)
            location = model.url

        latest = Text(_format_version(model.remote_version), style="yellow" if model.outdated else "")
        table.add_row(
            model.display_name or model.short_name,
            model.short_name,
            model.source_language,
            model.target_language,
            model.type,
            version,
            latest,
            location,
        )

    console.print(table)
    if not models:
        console.print("[dim]No models.[/dim]")


def format_data_paths_table(paths: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Format data paths as a Rich table.

    Args:
        paths: Path information
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Data Source Paths", show_header=True, header_style="bold magenta")

    table.add_column("Item", style="cyan")
    table.add_column("Source", style="yellow")
    table.add_column("Location", style="dim")
    table.add_column("Status", justify="center")

    for name, info in paths.items():
        exists = info.get("exists")
        if exists is None:
            status = Text("-", style="dim")
        else:
            status = Text("✓" if exists else "✗", style="green" if exists else "red")
        table.add_row(name, info.get("source", "Unknown"), str(info.get("path", "N/A")), status)

    console.print(table)


def format_env_vars_table(env_vars: Dict[str, Optional[str]], console: Optional[Console] = None) -> None:
    """Format environment variables as a Rich table.

    Args:
        env_vars: Environment variables
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="TMR Environment Variables", show_header=True, header_style="bold magenta")

    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_column("Set", justify="center")

    for key, value in sorted(env_vars.items()):
        is_set = value is not None
        display_value = value if is_set else "[dim]<not set>[/dim]"
        status = "✓" if is_set else "✗"
        status_style = "green" if is_set else "red"

        table.add_row(key, display_value, Text(status, style=status_style))

    console.print(table)
