"""Path handling for the managed models directory.

This module resolves where installed model packages live, following the XDG Base
Directory Specification for user-specific data, and makes sure the directory is usable.
"""

import os
from pathlib import Path
from typing import Optional, Union

import platformdirs

from .errors import ManagedRootError

# Application name used for directory paths
APP_NAME = "translation-model-registry"

# Environment variable names (all prefixed with TMR_)
ENV_MODELS_DIR = "TMR_MODELS_DIR"
ENV_CATALOG_URL = "TMR_CATALOG_URL"
ENV_DISABLE_CWD_SCAN = "TMR_DISABLE_CWD_SCAN"

# Remote catalog of downloadable models
DEFAULT_CATALOG_URL = "http://data.statmt.org/bergamot/models/models.json"

# Default filenames
MODEL_INFO_FILENAME = "model_info.json"
ARCHIVE_SUFFIX = ".tar.gz"


def get_user_data_dir() -> Path:
    """Get the path to the user's data directory for this application."""
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_managed_root(path: Optional[Union[str, Path]] = None) -> Path:
    """Resolve the managed models directory.

    Precedence is: explicit argument, then ``TMR_MODELS_DIR``, then the user data directory.

    Args:
        path: Explicit directory, usually passed from the CLI

    Returns:
        Absolute path of the managed root (not necessarily existing yet)
    """
    if path:
        return Path(path).expanduser().absolute()

    env_path = os.environ.get(ENV_MODELS_DIR)
    if env_path:
        return Path(env_path).expanduser().absolute()

    return get_user_data_dir().absolute()


def ensure_managed_root(path: Path) -> Path:
    """Ensure that the managed root exists and is a writable directory.

    Args:
        path: Managed root to check

    Returns:
        The same path, for chaining

    Raises:
        ManagedRootError: If a non-directory occupies the path, or the directory
            cannot be created or written to
    """
    if path.exists() and not path.is_dir():
        raise ManagedRootError(
            f"Cannot store models at {path}: a file with the same name exists",
            path=str(path),
        )

    if not path.exists():
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise ManagedRootError(f"Failed to create models directory {path}: {e}", path=str(path)) from e

    if not os.access(path, os.W_OK):
        raise ManagedRootError(f"Models directory exists but is not writable: {path}", path=str(path))

    return path


def get_catalog_url(url: Optional[str] = None) -> str:
    """Get the remote catalog URL, respecting ``TMR_CATALOG_URL``.

    Args:
        url: Explicit URL override

    Returns:
        URL of the remote models catalog
    """
    if url:
        return url
    return os.environ.get(ENV_CATALOG_URL) or DEFAULT_CATALOG_URL


def is_cwd_scan_disabled() -> bool:
    """Check whether scanning the working directory at startup is disabled."""
    return os.getenv(ENV_DISABLE_CWD_SCAN, "").lower() in ("1", "true", "yes")
