"""Installation and removal of model packages in the managed root.

Archives are first extracted into a scratch directory next to the installed
models, validated there, and only then renamed into place. The managed root
therefore only ever contains complete, valid package directories.
"""

import os
import shutil
import sys
import tempfile
import time
from pathlib import Path
from typing import IO, Callable, List, Optional, Tuple, Union

from .archive import common_prefix_path, extract_tar_gz, join_entries
from .config_paths import ARCHIVE_SUFFIX, MODEL_INFO_FILENAME, ensure_managed_root
from .descriptor import load_local_model
from .errors import (
    AmbiguousLayoutError,
    DescriptorParseError,
    DescriptorRemovalError,
    EmptyArchiveError,
    InvalidPackageError,
    NotManagedError,
    PackageIOError,
    RelocationFailedError,
)
from .logging import LogEvent, get_logger, log_debug, log_error, log_info, log_warning
from .model import Model
from .registry import ModelRegistry

logger = get_logger(__name__)

# Scratch directories live in the managed root so the final rename stays on one filesystem
SCRATCH_PREFIX = ".extracting-"


def destination_name(filename: str, timestamp: int) -> str:
    """Build the directory name for a newly installed package.

    Args:
        filename: Suggested archive file name, e.g. ``deen.student.tiny11.tar.gz``
        timestamp: Installation time in seconds since the epoch

    Returns:
        Directory name such as ``deen.student.tiny11-1700000000``
    """
    stem = Path(filename).name.split(ARCHIVE_SUFFIX)[0] or "model"
    return f"{stem}-{timestamp}"


class PackageInstaller:
    """Installs archives into, and removes packages from, the managed root."""

    def __init__(
        self,
        managed_root: Path,
        registry: ModelRegistry,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the installer.

        Args:
            managed_root: Directory owned by the registry for installed packages
            registry: Registry that installed models are added to
            clock: Time source for destination names
        """
        self.managed_root = managed_root
        self.registry = registry
        self._clock = clock

    def is_managed(self, model: Model) -> bool:
        """Check if ``model`` is installed inside the managed root."""
        if not model.is_local:
            return False
        try:
            path = Path(model.path).resolve()
            root = self.managed_root.resolve()
        except (OSError, RuntimeError):
            return False
        return path != root and root in path.parents

    def install_file(self, archive_path: Union[str, Path], filename: Optional[str] = None) -> Tuple[Model, bool]:
        """Install a model archive stored on disk.

        Args:
            archive_path: Path of the ``.tar.gz`` file
            filename: Suggested name, defaults to the archive's file name

        Returns:
            The installed model and whether it was newly inserted

        Raises:
            PackageIOError: If the archive cannot be opened
            InstallError: If any installation step fails
        """
        archive_path = Path(archive_path)
        try:
            source = open(archive_path, "rb")
        except OSError as e:
            raise PackageIOError(f"Could not open model archive {archive_path}: {e}", path=str(archive_path)) from e

        with source:
            return self.install(source, filename or archive_path.name)

    def install(self, source: IO[bytes], filename: str) -> Tuple[Model, bool]:
        """Install a model archive.

        Args:
            source: Binary stream of the ``.tar.gz`` archive
            filename: Suggested archive file name, used to name the package directory

        Returns:
            The installed model and whether it was newly inserted (False if it
            replaced an installed model with the same identity)

        Raises:
            ManagedRootError: If the managed root is unusable
            PackageIOError: If the scratch directory cannot be created
            ExtractError: If the archive cannot be extracted
            EmptyArchiveError: If the archive has no entries
            AmbiguousLayoutError: If no common top-level directory is found
            InvalidPackageError: If the extracted package fails validation
            RelocationFailedError: If the package cannot be moved into place
        """
        ensure_managed_root(self.managed_root)

        try:
            scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=str(self.managed_root)))
        except OSError as e:
            raise PackageIOError(
                f"Could not create extraction directory in {self.managed_root}: {e}", path=str(self.managed_root)
            ) from e
        keep_scratch = False
        try:
            package_dir = self._extract_and_locate(source, scratch)
            self._validate(package_dir)

            destination = self._unique_destination(filename)
            log_debug(LogEvent.PACKAGE_INSTALL, f"Rename {package_dir} to {destination}")
            try:
                os.rename(package_dir, destination)
            except OSError as e:
                keep_scratch = True
                raise RelocationFailedError(
                    f"Could not move extracted model from {scratch} to {destination}: {e}",
                    source=str(scratch),
                    destination=str(destination),
                ) from e

            model = load_local_model(destination)
            if model is None:
                # The descriptor was validated before the rename
                raise InvalidPackageError(f"Model descriptor disappeared from {destination}")
        finally:
            if not keep_scratch:
                shutil.rmtree(scratch, ignore_errors=True)

        inserted = self.registry.upsert(model)
        self.registry.update_available_models()
        log_info(
            LogEvent.PACKAGE_INSTALL,
            f"Installed {model.short_name or model.display_name} into {model.path}",
            replaced=not inserted,
        )
        return model, inserted

    def _extract_and_locate(self, source: IO[bytes], scratch: Path) -> Path:
        entries = extract_tar_gz(source, scratch)
        if not entries:
            raise EmptyArchiveError("Did not extract any files from the model archive.")

        # Ideally the prefix is the scratch directory itself, but archives may wrap
        # their contents in a folder of their own.
        prefix = common_prefix_path(join_entries(scratch, entries))
        log_debug(LogEvent.PACKAGE_INSTALL, f"Common prefix: {prefix}", entries=len(entries))
        if not prefix:
            raise AmbiguousLayoutError("Could not determine prefix path of extracted model.")

        package_dir = Path(prefix)
        resolved = package_dir.resolve()
        scratch_resolved = scratch.resolve()
        if resolved != scratch_resolved and scratch_resolved not in resolved.parents:
            raise AmbiguousLayoutError(f"Extracted model prefix {prefix} lies outside the extraction directory.")
        if not package_dir.is_dir():
            raise AmbiguousLayoutError(f"Extracted model prefix {prefix} is not a directory.")
        return package_dir

    def _validate(self, package_dir: Path) -> None:
        try:
            model = load_local_model(package_dir)
        except (DescriptorParseError, PackageIOError) as e:
            raise InvalidPackageError(f"Extracted model in {package_dir} is invalid: {e}", cause=e) from e

        if model is None:
            raise InvalidPackageError(f"Failed to find, open or parse the {MODEL_INFO_FILENAME} in {package_dir}")

    def _unique_destination(self, filename: str) -> Path:
        name = destination_name(filename, int(self._clock()))
        destination = self.managed_root / name
        counter = 1
        try:
            while destination.exists():
                destination = self.managed_root / f"{name}-{counter}"
                counter += 1
        except OSError as e:
            raise PackageIOError(f"Could not inspect {destination}: {e}", path=str(destination)) from e
        return destination

    def remove(self, model: Model) -> bool:
        """Delete an installed model and unregister it.

        The descriptor is deleted first. Once it is gone the model counts as
        uninstalled, even if some of the remaining files cannot be deleted.

        Args:
            model: The installed model

        Returns:
            True if the package directory was removed completely, False if files
            were left behind

        Raises:
            NotManagedError: If the model does not live in the managed root
            DescriptorRemovalError: If model_info.json cannot be deleted
        """
        if not self.is_managed(model):
            raise NotManagedError(
                f"Refusing to remove {model.path or model.short_name}: not installed in {self.managed_root}",
                path=model.path or None,
            )

        model_dir = Path(model.path)
        try:
            (model_dir / MODEL_INFO_FILENAME).unlink()
        except OSError as e:
            raise DescriptorRemovalError(
                f"Could not delete {model_dir}/{MODEL_INFO_FILENAME}: {e}", path=str(model_dir)
            ) from e

        failures: List[str] = []

        def on_error(function: Callable[..., object], path: str, exc_info: object) -> None:
            failures.append(path)

        if sys.version_info >= (3, 12):
            shutil.rmtree(model_dir, onexc=on_error)
        else:
            shutil.rmtree(model_dir, onerror=on_error)
        complete = not failures
        if not complete:
            log_error(
                LogEvent.PACKAGE_REMOVE,
                f"Could not completely remove the model directory {model_dir}",
                leftovers=failures,
            )

        if not self.registry.remove(model):
            log_warning(LogEvent.PACKAGE_REMOVE, f"Removed model {model_dir} was not registered")
        self.registry.update_available_models()
        log_info(LogEvent.PACKAGE_REMOVE, f"Removed {model.short_name} from {model_dir}", complete=complete)
        return complete
