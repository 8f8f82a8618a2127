"""Discovery of installed model packages and stray archives in a directory."""

from pathlib import Path
from typing import Union

from .config_paths import ARCHIVE_SUFFIX, MODEL_INFO_FILENAME
from .descriptor import load_local_model
from .errors import DescriptorParseError, PackageIOError
from .events import RegistryEvent
from .installer import SCRATCH_PREFIX
from .logging import LogEvent, log_debug, log_error, log_warning
from .registry import ModelRegistry
from .results import ScanResult


def scan_directory(directory: Union[str, Path], registry: ModelRegistry) -> ScanResult:
    """Register the model packages found directly inside ``directory``.

    Subdirectories holding a valid model_info.json are added to the registry;
    subdirectories without one are skipped silently. A descriptor that exists but
    is corrupt is reported as a corrupt package. Archive files are only recorded,
    never installed.

    Args:
        directory: Directory to scan (not recursively)
        registry: Registry receiving the models and archive names

    Returns:
        What the scan found
    """
    directory = Path(directory)
    result = ScanResult(directory=str(directory))

    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        message = f"Could not list models directory {directory}: {e}"
        log_error(LogEvent.PACKAGE_SCAN, message)
        registry.events.emit(RegistryEvent.ERROR, message=message)
        result.errors.append(message)
        return result

    for entry in entries:
        if entry.name.startswith(SCRATCH_PREFIX):
            continue

        if entry.is_dir():
            try:
                model = load_local_model(entry)
            except DescriptorParseError as e:
                message = f"Corrupted json file: {entry / MODEL_INFO_FILENAME}. Delete or redownload."
                log_warning(LogEvent.PACKAGE_SCAN, message, error=str(e))
                registry.events.emit(RegistryEvent.CORRUPT_PACKAGE, message=message, path=str(entry))
                result.corrupt.append(str(entry))
                continue
            except PackageIOError as e:
                log_error(LogEvent.PACKAGE_SCAN, str(e))
                registry.events.emit(RegistryEvent.ERROR, message=str(e), path=str(entry))
                result.errors.append(str(e))
                continue

            if model is None:
                # A folder without a model in it. This is ok.
                continue

            registry.upsert(model)
            result.models.append(model)
        elif entry.name.endswith(ARCHIVE_SUFFIX):
            registry.add_archive(entry.name)
            result.archives.append(entry.name)

    log_debug(
        LogEvent.PACKAGE_SCAN,
        f"Found {len(result.models)} models and {len(result.archives)} archives in {directory}",
        corrupt=len(result.corrupt),
    )
    registry.update_available_models()
    return result
