"""Parsing of model_info.json descriptors and remote catalog entries.

Local descriptors and catalog entries share the same shape. Descriptive fields
are optional so that older packages keep loading; the location field (``path``
for installed packages, ``url`` for catalog entries) is critical and a record
without it is discarded entirely.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config_paths import MODEL_INFO_FILENAME
from .errors import DescriptorParseError, PackageIOError
from .logging import LogEvent, log_error
from .model import Model, Provenance

# model_info.json key -> Model attribute
STRING_FIELDS = {
    "shortName": "short_name",
    "modelName": "display_name",
    "src": "source_language",
    "trg": "target_language",
    "type": "type",
}

# model_info.json key -> Model attribute suffix, prefixed with the provenance
NUMERIC_FIELDS = {
    "version": "version",
    "API": "api",
}

CRITICAL_FIELDS = {
    Provenance.LOCAL: "path",
    Provenance.REMOTE: "url",
}


def read_descriptor(directory: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """Read the model_info.json found directly inside ``directory``.

    A directory without a descriptor is simply not a package, which is not an error.

    Args:
        directory: Directory to probe

    Returns:
        The parsed descriptor with ``path`` set to ``directory``, or None if the
        directory holds no model_info.json

    Raises:
        PackageIOError: If the descriptor exists but cannot be read
        DescriptorParseError: If the descriptor is not a JSON object
    """
    directory = Path(directory)
    info_file = directory / MODEL_INFO_FILENAME
    if not info_file.exists():
        return None

    try:
        with open(info_file, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PackageIOError(f"Failed to open json config file: {info_file}: {e}", path=str(info_file)) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DescriptorParseError(f"Corrupted json file {info_file}: {e}", path=str(directory)) from e

    if not isinstance(data, dict):
        raise DescriptorParseError(
            f"Corrupted json file {info_file}: expected an object, got {type(data).__name__}",
            path=str(directory),
        )

    # The location is injected by the reader, never authored by the package
    data["path"] = str(directory)
    return data


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def build_model(raw: Dict[str, Any], provenance: Provenance = Provenance.LOCAL) -> Model:
    """Build a Model from a descriptor or catalog entry.

    Args:
        raw: Descriptor dictionary
        provenance: Whether ``raw`` describes an installed package or a catalog entry

    Returns:
        The populated Model

    Raises:
        DescriptorParseError: If the critical location field is missing
    """
    critical = CRITICAL_FIELDS[provenance]
    location = raw.get(critical)
    if not isinstance(location, str) or not location:
        raise DescriptorParseError(
            f"The json file provided is missing '{critical}' or is corrupted. Please redownload the model.",
            path=raw.get("path") or raw.get("url"),
            field=critical,
        )

    fields: Dict[str, Any] = {critical: location}

    for key, attribute in STRING_FIELDS.items():
        value = raw.get(key)
        fields[attribute] = "" if value is None else str(value)

    for key, suffix in NUMERIC_FIELDS.items():
        if key in raw:
            fields[f"{provenance.value}_{suffix}"] = _to_float(raw[key])

    return Model(**fields)


def load_local_model(directory: Union[str, Path]) -> Optional[Model]:
    """Read and parse the package installed in ``directory``.

    Args:
        directory: Package directory

    Returns:
        The local Model, or None if ``directory`` has no descriptor

    Raises:
        PackageIOError: If the descriptor cannot be read
        DescriptorParseError: If the descriptor is corrupt
    """
    raw = read_descriptor(directory)
    if raw is None:
        return None
    return build_model(raw, Provenance.LOCAL)


def parse_catalog(payload: Dict[str, Any]) -> Tuple[List[Model], List[DescriptorParseError]]:
    """Parse the remote catalog into remote-provenance models.

    Entries without a ``url`` are skipped and returned as errors.

    Args:
        payload: Decoded catalog document with a ``models`` array

    Returns:
        Remote models in catalog order, and the errors of the skipped entries

    Raises:
        DescriptorParseError: If the document has no ``models`` array
    """
    entries = payload.get("models") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        raise DescriptorParseError("Remote catalog does not contain a 'models' array")

    models: List[Model] = []
    errors: List[DescriptorParseError] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            errors.append(DescriptorParseError(f"Catalog entry {index} is not an object"))
            continue
        try:
            models.append(build_model(entry, Provenance.REMOTE))
        except DescriptorParseError as e:
            errors.append(e)

    for error in errors:
        log_error(LogEvent.CATALOG_FETCH, f"Skipping catalog entry: {error}", field=error.field)
    return models, errors
