"""JSON and YAML output formatters for CLI."""

import json
import sys
from enum import Enum as _Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

import yaml

from ...model import Model


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - Enum -> value (fallback to name)
    - Path -> string
    - Model -> dictionary
    - Fallback -> str(obj)
    """
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    if isinstance(obj, Model):
        return obj.to_dict()
    if isinstance(obj, Path):
        return str(obj)
    return str(obj)


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        sort_keys=True,
        default=_default_serializer,
    )
    output.write("\n")


def format_yaml(data: Any, output: Optional[TextIO] = None) -> None:
    """Format data as YAML and write to output.

    The data goes through JSON first so enums and models are rendered the same
    way in both formats.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
    """
    if output is None:
        output = sys.stdout

    plain = json.loads(json.dumps(data, default=_default_serializer))
    output.write(yaml.safe_dump(plain, default_flow_style=False, sort_keys=True, allow_unicode=True))


def format_models_list_json(models: List[Model], kind: str = "installed") -> Dict[str, Any]:
    """Format a models list for JSON output.

    Args:
        models: Models in presentation order
        kind: Which list is shown (installed, remote, new, updates)

    Returns:
        Formatted data structure
    """
    return {"kind": kind, "models": [m.to_dict() for m in models], "count": len(models)}


def format_data_paths_json(paths: Dict[str, Any]) -> Dict[str, Any]:
    """Format data paths for JSON output.

    Args:
        paths: Path information

    Returns:
        Formatted data structure
    """
    return {
        "data_sources": paths,
        "resolution_order": [
            "--models-dir option",
            "TMR_MODELS_DIR environment variable",
            "User data directory",
        ],
    }


def format_env_vars_json(env_vars: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """Format environment variables for JSON output.

    Args:
        env_vars: Environment variables

    Returns:
        Formatted data structure
    """
    return {
        "environment_variables": {key: {"value": value, "set": value is not None} for key, value in env_vars.items()},
        "set_count": sum(1 for v in env_vars.values() if v is not None),
        "total_count": len(env_vars),
    }
