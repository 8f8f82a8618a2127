"""Error types for the translation model registry.

This module defines the error types raised while installing, scanning,
removing and reconciling translation model packages.
"""

from typing import Optional


class ModelRegistryError(Exception):
    """Base class for all registry-related errors.

    This is the parent class for all registry-specific exceptions.
    """

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ConfigurationError(ModelRegistryError):
    """Base class for configuration-related errors."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path to the directory or file that caused the error
        """
        super().__init__(message)
        self.path = path


class ManagedRootError(ConfigurationError):
    """Raised when the managed models directory cannot be used.

    Examples:
        >>> try:
        ...     ensure_managed_root(Path("/etc/passwd"))
        ... except ManagedRootError as e:
        ...     print(f"Unusable models directory: {e.path}")
    """

    pass


class PackageIOError(ModelRegistryError):
    """Raised when a package file cannot be opened, read or written."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize I/O error.

        Args:
            message: Error message
            path: Path of the file that could not be accessed
        """
        super().__init__(message)
        self.path = path


class ExtractError(ModelRegistryError):
    """Raised when a model archive is malformed or cannot be written to disk."""

    def __init__(self, message: str, entry: Optional[str] = None) -> None:
        """Initialize extraction error.

        Args:
            message: Error message
            entry: Archive entry being processed when the failure happened
        """
        super().__init__(message)
        self.entry = entry


class DescriptorParseError(ModelRegistryError):
    """Raised when a model_info.json descriptor is malformed or incomplete.

    Examples:
        >>> try:
        ...     build_model({"shortName": "deen.student.tiny11"}, Provenance.REMOTE)
        ... except DescriptorParseError as e:
        ...     print(f"Missing field: {e.field}")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        """Initialize descriptor parse error.

        Args:
            message: Error message
            path: Directory or catalog location of the descriptor
            field: Name of the missing critical field, if that was the problem
        """
        super().__init__(message)
        self.path = path
        self.field = field


class InstallError(ModelRegistryError):
    """Base class for errors raised while installing a model archive."""

    pass


class EmptyArchiveError(InstallError):
    """Raised when a well-formed archive contains no entries."""

    pass


class AmbiguousLayoutError(InstallError):
    """Raised when no common top-level directory can be found in an archive."""

    pass


class InvalidPackageError(InstallError):
    """Raised when the extracted package fails validation.

    Examples:
        >>> try:
        ...     installer.install(stream, "deen.tar.gz")
        ... except InvalidPackageError as e:
        ...     print(f"Rejected: {e.cause}")
    """

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        """Initialize invalid package error.

        Args:
            message: Error message
            cause: The underlying parse problem
        """
        super().__init__(message)
        self.cause = cause


class RelocationFailedError(InstallError):
    """Raised when the validated package cannot be moved into the managed root."""

    def __init__(self, message: str, source: str, destination: str) -> None:
        """Initialize relocation error.

        Args:
            message: Error message
            source: Scratch directory that was kept for diagnosis
            destination: Intended final location
        """
        super().__init__(message)
        self.source = source
        self.destination = destination


class RemoveError(ModelRegistryError):
    """Base class for errors raised while removing an installed model."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize removal error.

        Args:
            message: Error message
            path: Directory of the model being removed
        """
        super().__init__(message)
        self.path = path


class NotManagedError(RemoveError):
    """Raised when removal is attempted on a model outside the managed root."""

    pass


class DescriptorRemovalError(RemoveError):
    """Raised when the model_info.json of an installed model cannot be deleted."""

    pass


class ModelNotFoundError(ModelRegistryError):
    """Raised when a model lookup does not match any known model."""

    def __init__(self, message: str, short_name: Optional[str] = None) -> None:
        """Initialize model not found error.

        Args:
            message: Error message
            short_name: The short name that was looked up
        """
        super().__init__(message)
        self.short_name = short_name


class NetworkError(ModelRegistryError):
    """Raised when a network operation fails.

    Examples:
        >>> try:
        ...     client.fetch_catalog()
        ... except NetworkError as e:
        ...     print(f"Network error: {e}")
    """

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        """Initialize network error.

        Args:
            message: Error message
            url: Optional URL that was being accessed
        """
        super().__init__(message)
        self.url = url
