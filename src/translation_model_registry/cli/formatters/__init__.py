"""CLI formatters package."""

from .json import (
    format_data_paths_json,
    format_env_vars_json,
    format_json,
    format_models_list_json,
    format_yaml,
)
from .table import (
    create_console,
    format_data_paths_table,
    format_env_vars_table,
    format_models_table,
)

__all__ = [
    "format_json",
    "format_yaml",
    "format_models_list_json",
    "format_data_paths_json",
    "format_env_vars_json",
    "create_console",
    "format_models_table",
    "format_data_paths_table",
    "format_env_vars_table",
]
