"""Registry of installed machine-translation model packages.

This package installs translation models from ``.tar.gz`` archives into a managed
directory, discovers models that are already on disk, and reconciles them with a
remote catalog to report new and updated models.
"""

# Version of the package
try:
    from importlib.metadata import version as _version

    __version__ = _version("translation-model-registry")
except ImportError:
    raise ImportError(
        "Failed to determine package version. This package requires Python 3.8+ "
        "where importlib.metadata is available, or must be installed as a package."
    )

# Import main components for easier access
from .catalog import CatalogClient
from .errors import (
    AmbiguousLayoutError,
    DescriptorParseError,
    DescriptorRemovalError,
    EmptyArchiveError,
    ExtractError,
    InstallError,
    InvalidPackageError,
    ManagedRootError,
    ModelNotFoundError,
    ModelRegistryError,
    NetworkError,
    NotManagedError,
    PackageIOError,
    RelocationFailedError,
    RemoveError,
)
from .events import EventEmitter, RegistryEvent
from .manager import ModelManager, get_manager
from .model import Model, Provenance
from .registry import ModelRegistry
from .results import (
    FetchResult,
    FetchStatus,
    InstallResult,
    InstallStatus,
    RemoveResult,
    RemoveStatus,
    ScanResult,
)

# Define public API
__all__ = [
    # Core
    "ModelManager",
    "ModelRegistry",
    "get_manager",
    "CatalogClient",
    "Model",
    "Provenance",
    # Events
    "EventEmitter",
    "RegistryEvent",
    # Results
    "InstallResult",
    "InstallStatus",
    "RemoveResult",
    "RemoveStatus",
    "FetchResult",
    "FetchStatus",
    "ScanResult",
    # Errors
    "ModelRegistryError",
    "ManagedRootError",
    "PackageIOError",
    "ExtractError",
    "DescriptorParseError",
    "InstallError",
    "EmptyArchiveError",
    "AmbiguousLayoutError",
    "InvalidPackageError",
    "RelocationFailedError",
    "RemoveError",
    "NotManagedError",
    "DescriptorRemovalError",
    "ModelNotFoundError",
    "NetworkError",
]
