"""Model manager: the public entry point for installed translation models.

The manager owns the managed root, the registry and the catalog client. Every
public operation recovers from registry errors at its boundary: the failure is
logged, sent to observers as an ``error`` event, and returned as a result
object. Nothing raises past these methods.

Typical usage:

    from translation_model_registry import get_manager

    manager = get_manager()
    manager.fetch_remote_models()
    for model in manager.updated_models():
        manager.install_remote(model)
"""

import os
import tempfile
import threading
import time
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Optional, Type, Union

from .catalog import CatalogClient, decode_catalog
from .config_paths import ARCHIVE_SUFFIX, ensure_managed_root, get_managed_root, is_cwd_scan_disabled
from .descriptor import parse_catalog
from .errors import (
    AmbiguousLayoutError,
    DescriptorParseError,
    DescriptorRemovalError,
    EmptyArchiveError,
    ExtractError,
    InvalidPackageError,
    ManagedRootError,
    ModelRegistryError,
    NetworkError,
    NotManagedError,
    PackageIOError,
    RelocationFailedError,
)
from .events import EventCallback, EventEmitter, RegistryEvent
from .installer import PackageInstaller
from .logging import LogEvent, get_logger, log_error, log_info, log_warning
from .model import Model
from .registry import ModelRegistry
from .results import FetchResult, FetchStatus, InstallResult, InstallStatus, RemoveResult, RemoveStatus, ScanResult
from .scanner import scan_directory

logger = get_logger("manager")

_INSTALL_STATUS: Dict[Type[ModelRegistryError], InstallStatus] = {
    ExtractError: InstallStatus.EXTRACTION_FAILED,
    EmptyArchiveError: InstallStatus.EMPTY_ARCHIVE,
    AmbiguousLayoutError: InstallStatus.AMBIGUOUS_LAYOUT,
    InvalidPackageError: InstallStatus.INVALID_PACKAGE,
    RelocationFailedError: InstallStatus.RELOCATION_FAILED,
    NetworkError: InstallStatus.DOWNLOAD_FAILED,
}

_REMOVE_STATUS: Dict[Type[ModelRegistryError], RemoveStatus] = {
    NotManagedError: RemoveStatus.NOT_MANAGED,
    DescriptorRemovalError: RemoveStatus.DESCRIPTOR_NOT_REMOVED,
}


def _status_for(error: Exception, table: Dict[Type[ModelRegistryError], Any], default: Any) -> Any:
    for error_type, status in table.items():
        if isinstance(error, error_type):
            return status
    return default


class ModelManager:
    """Installs, removes and discovers translation models and tracks catalog updates.

    All registry mutations are serialized by one lock, and at most one catalog
    fetch is in flight at a time.
    """

    _default_instance: Optional["ModelManager"] = None
    _instance_lock = threading.RLock()

    @classmethod
    def get_default(cls) -> "ModelManager":
        """Get the default manager instance with standard configuration.

        Returns:
            The default ModelManager instance
        """
        with cls._instance_lock:
            if cls._default_instance is None:
                cls._default_instance = cls()
            return cls._default_instance

    def __init__(
        self,
        models_dir: Optional[Union[str, Path]] = None,
        catalog: Optional[CatalogClient] = None,
        emitter: Optional[EventEmitter] = None,
        load: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize a manager.

        Args:
            models_dir: Managed root. If None, ``TMR_MODELS_DIR`` or the user data
                        directory is used.
            catalog: Catalog client. A default client is created if None.
            emitter: Event emitter, pass one to observe events raised during startup.
            load: Scan for installed models immediately.
            clock: Time source for installed directory names.
        """
        self.managed_root = get_managed_root(models_dir)
        self.events = emitter or EventEmitter()
        self.registry = ModelRegistry(self.events)
        self.catalog = catalog or CatalogClient()
        self.installer = PackageInstaller(self.managed_root, self.registry, clock=clock)
        self.root_error: Optional[ManagedRootError] = None

        self._lock = threading.RLock()
        self._fetch_lock = threading.Lock()
        self._fetching = False

        try:
            ensure_managed_root(self.managed_root)
        except ManagedRootError as e:
            self.root_error = e
            self._report(LogEvent.MODEL_REGISTRY, e)

        if load:
            self.startup_load()

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Subscribe to registry events. Returns a function that unsubscribes."""
        return self.events.subscribe(callback)

    def _report(self, event: LogEvent, error: Exception) -> None:
        log_error(event, str(error), error_type=type(error).__name__)
        self.events.emit(RegistryEvent.ERROR, message=str(error))

    # Discovery

    def startup_load(self) -> List[ScanResult]:
        """Scan the managed root and, best effort, the working directory.

        Returns:
            One scan result per scanned directory
        """
        results = []
        if self.root_error is None:
            results.append(self.scan(self.managed_root))

        if not is_cwd_scan_disabled():
            cwd = Path(os.getcwd())
            if cwd.resolve() != self.managed_root.resolve():
                results.append(self.scan(cwd))
        return results

    def scan(self, directory: Union[str, Path]) -> ScanResult:
        """Register the models installed directly inside ``directory``."""
        with self._lock:
            return scan_directory(directory, self.registry)

    # Installation

    def install_archive(self, source: IO[bytes], filename: str) -> InstallResult:
        """Install a model from an archive stream.

        Args:
            source: Binary stream of a ``.tar.gz`` model archive
            filename: Suggested archive file name

        Returns:
            The install result, carrying the installed model on success
        """
        with self._lock:
            try:
                model, inserted = self.installer.install(source, filename)
            except ModelRegistryError as e:
                return self._install_failed(e)
        return self._installed(model, inserted)

    def install_file(self, archive_path: Union[str, Path], filename: Optional[str] = None) -> InstallResult:
        """Install a model from an archive on disk.

        Args:
            archive_path: Path of the ``.tar.gz`` file
            filename: Suggested name, defaults to the archive's file name

        Returns:
            The install result, carrying the installed model on success
        """
        with self._lock:
            try:
                model, inserted = self.installer.install_file(archive_path, filename)
            except ModelRegistryError as e:
                return self._install_failed(e)
        return self._installed(model, inserted)

    def install_remote(self, model: Model) -> InstallResult:
        """Download a model listed in the remote catalog and install it.

        Args:
            model: Remote model with a download ``url``

        Returns:
            The install result, carrying the installed model on success
        """
        if not model.url:
            return self._install_failed(
                InvalidPackageError(f"Model {model.short_name} has no download location")
            )

        filename = model.url.rstrip("/").rsplit("/", 1)[-1] or f"{model.short_name}{ARCHIVE_SUFFIX}"
        try:
            with tempfile.TemporaryDirectory() as temp_dir:
                archive_path = self.catalog.download_archive(model.url, Path(temp_dir) / "download.tar.gz")
                return self.install_file(archive_path, filename)
        except ModelRegistryError as e:
            return self._install_failed(e)
        except OSError as e:
            return self._install_failed(PackageIOError(f"Could not prepare download of {model.url}: {e}"))

    def _installed(self, model: Model, inserted: bool) -> InstallResult:
        status = InstallStatus.INSTALLED if inserted else InstallStatus.REPLACED
        return InstallResult(
            success=True,
            status=status,
            message=f"Installed {model.display_name or model.short_name}",
            model=model,
        )

    def _install_failed(self, error: ModelRegistryError) -> InstallResult:
        self._report(LogEvent.PACKAGE_INSTALL, error)
        return InstallResult(
            success=False,
            status=_status_for(error, _INSTALL_STATUS, InstallStatus.IO_ERROR),
            message=str(error),
            error=error,
        )

    # Removal

    def is_managed(self, model: Model) -> bool:
        """Check if ``model`` is installed in the managed root and may be removed."""
        return self.installer.is_managed(model)

    def remove(self, model: Model) -> RemoveResult:
        """Delete an installed model from disk and from the registry.

        Args:
            model: The installed model

        Returns:
            The removal result
        """
        with self._lock:
            try:
                complete = self.installer.remove(model)
            except ModelRegistryError as e:
                self._report(LogEvent.PACKAGE_REMOVE, e)
                return RemoveResult(
                    success=False,
                    status=_status_for(e, _REMOVE_STATUS, RemoveStatus.NOT_FOUND),
                    message=str(e),
                    error=e,
                )

        if not complete:
            message = f"Could not completely remove the model directory {model.path}"
            self.events.emit(RegistryEvent.ERROR, message=message)
            return RemoveResult(success=True, status=RemoveStatus.PARTIALLY_REMOVED, message=message)
        return RemoveResult(success=True, status=RemoveStatus.REMOVED, message=f"Removed {model.path}")

    # Remote catalog

    @property
    def is_fetching(self) -> bool:
        """Whether a catalog fetch is in flight."""
        return self._fetching

    def fetch_remote_models(self) -> FetchResult:
        """Fetch the remote catalog and reconcile it with the installed models.

        A request made while another fetch is in flight is a no-op.

        Returns:
            The fetch result, with the new and updated models on success
        """
        with self._fetch_lock:
            if self._fetching:
                return FetchResult(
                    success=False,
                    status=FetchStatus.ALREADY_FETCHING,
                    message="A catalog fetch is already in progress",
                )
            self._fetching = True

        self.events.emit(RegistryEvent.FETCH_STARTED, url=self.catalog.url)
        try:
            try:
                payload = self.catalog.fetch_catalog()
            except NetworkError as e:
                self._report(LogEvent.CATALOG_FETCH, e)
                return FetchResult(success=False, status=FetchStatus.NETWORK_ERROR, message=str(e), error=e)
            except DescriptorParseError as e:
                self._report(LogEvent.CATALOG_FETCH, e)
                return FetchResult(success=False, status=FetchStatus.INVALID_CATALOG, message=str(e), error=e)
            return self.parse_remote_models(payload)
        finally:
            with self._fetch_lock:
                self._fetching = False
            self.events.emit(RegistryEvent.FETCH_FINISHED, url=self.catalog.url)

    def start_fetch_remote_models(
        self, on_done: Optional[Callable[[FetchResult], None]] = None
    ) -> Optional[threading.Thread]:
        """Fetch the remote catalog on a background thread.

        Args:
            on_done: Called with the fetch result when the fetch completes

        Returns:
            The started thread, or None if a fetch is already in flight
        """
        if self._fetching:
            return None

        def run() -> None:
            result = self.fetch_remote_models()
            if on_done is not None:
                on_done(result)

        thread = threading.Thread(target=run, name="tmr-catalog-fetch", daemon=True)
        thread.start()
        return thread

    def load_remote_catalog(self, content: Union[bytes, str]) -> FetchResult:
        """Reconcile with a catalog document that was downloaded elsewhere.

        Args:
            content: Raw catalog JSON

        Returns:
            The fetch result, with the new and updated models on success
        """
        try:
            payload = decode_catalog(content)
        except DescriptorParseError as e:
            self._report(LogEvent.CATALOG_FETCH, e)
            return FetchResult(success=False, status=FetchStatus.INVALID_CATALOG, message=str(e), error=e)
        return self.parse_remote_models(payload)

    def parse_remote_models(self, payload: Dict[str, Any]) -> FetchResult:
        """Replace the remote catalog with ``payload`` and reconcile.

        Args:
            payload: Decoded catalog document with a ``models`` array

        Returns:
            The fetch result, with the new and updated models on success
        """
        try:
            models, skipped = parse_catalog(payload)
        except DescriptorParseError as e:
            self._report(LogEvent.CATALOG_FETCH, e)
            return FetchResult(success=False, status=FetchStatus.INVALID_CATALOG, message=str(e), error=e)

        for error in skipped:
            self.events.emit(RegistryEvent.ERROR, message=str(error))

        with self._lock:
            result = self.registry.set_remote_models(models)

        if skipped:
            log_warning(LogEvent.CATALOG_FETCH, f"Skipped {len(skipped)} invalid catalog entries")
        log_info(
            LogEvent.RECONCILE,
            f"{len(result.new_models)} new and {len(result.updated_models)} updated models available",
        )
        return FetchResult(
            success=True,
            status=FetchStatus.FETCHED,
            message=f"Fetched {len(models)} remote models",
            new_models=result.new_models,
            updated_models=result.updated_models,
        )

    # Queries

    def installed_models(self) -> List[Model]:
        """Get the installed models in presentation order."""
        return self.registry.all()

    def remote_models(self) -> List[Model]:
        """Get the models of the last fetched catalog."""
        return self.registry.remote_models()

    def new_models(self) -> List[Model]:
        """Get catalog models that are not installed."""
        return self.registry.new_models()

    def updated_models(self) -> List[Model]:
        """Get catalog models that are newer than the installed ones."""
        return self.registry.updated_models()

    def archives(self) -> List[str]:
        """Get archive files found while scanning."""
        return self.registry.archives()

    def find_models(
        self,
        short_name: str,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None,
        model_type: Optional[str] = None,
        include_remote: bool = False,
    ) -> List[Model]:
        """Look up models by short name. See :meth:`ModelRegistry.find`."""
        return self.registry.find(
            short_name,
            source_language=source_language,
            target_language=target_language,
            model_type=model_type,
            include_remote=include_remote,
        )

    @staticmethod
    def cleanup() -> None:
        """Drop the default instance, e.g. between tests."""
        with ModelManager._instance_lock:
            ModelManager._default_instance = None


def get_manager() -> ModelManager:
    """Return the process-wide default :class:`ModelManager` instance."""
    return ModelManager.get_default()
