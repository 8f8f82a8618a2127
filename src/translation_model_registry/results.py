"""Result objects returned by registry operations.

Public operations of the model manager never raise; they report what happened
through these result objects and through error events.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .model import Model


class InstallStatus(Enum):
    """Status of an install operation."""

    INSTALLED = "installed"
    REPLACED = "replaced"
    EXTRACTION_FAILED = "extraction_failed"
    EMPTY_ARCHIVE = "empty_archive"
    AMBIGUOUS_LAYOUT = "ambiguous_layout"
    INVALID_PACKAGE = "invalid_package"
    RELOCATION_FAILED = "relocation_failed"
    DOWNLOAD_FAILED = "download_failed"
    IO_ERROR = "io_error"


class RemoveStatus(Enum):
    """Status of a remove operation."""

    REMOVED = "removed"
    PARTIALLY_REMOVED = "partially_removed"
    NOT_MANAGED = "not_managed"
    NOT_FOUND = "not_found"
    DESCRIPTOR_NOT_REMOVED = "descriptor_not_removed"


class FetchStatus(Enum):
    """Status of a remote catalog fetch."""

    FETCHED = "fetched"
    ALREADY_FETCHING = "already_fetching"
    NETWORK_ERROR = "network_error"
    INVALID_CATALOG = "invalid_catalog"


@dataclass
class InstallResult:
    """Result of an install operation."""

    success: bool
    status: InstallStatus
    message: str
    model: Optional[Model] = None
    error: Optional[Exception] = None


@dataclass
class RemoveResult:
    """Result of a remove operation.

    A partially removed model (descriptor deleted, some files left behind) is
    reported with ``success=True`` since it is no longer installed.
    """

    success: bool
    status: RemoveStatus
    message: str
    error: Optional[Exception] = None


@dataclass
class FetchResult:
    """Result of a remote catalog fetch."""

    success: bool
    status: FetchStatus
    message: str
    new_models: List[Model] = field(default_factory=list)
    updated_models: List[Model] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass
class ScanResult:
    """Result of scanning a directory for installed models."""

    directory: str
    models: List[Model] = field(default_factory=list)
    archives: List[str] = field(default_factory=list)
    corrupt: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
