"""CLI utilities package."""

from .helpers import (
    ExitCode,
    get_manager_from_context,
    get_tmr_env_vars,
    handle_error,
    require_managed_root,
    resolve_format,
    validate_format_support,
)

__all__ = [
    "ExitCode",
    "resolve_format",
    "handle_error",
    "get_tmr_env_vars",
    "get_manager_from_context",
    "require_managed_root",
    "validate_format_support",
]
