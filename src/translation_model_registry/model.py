"""Model package descriptor.

This module provides the Model record describing a translation model package,
either installed on disk (local provenance) or listed in the remote catalog
(remote provenance).
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Provenance(str, Enum):
    """Where the data of a Model comes from."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass
class Model:
    """A translation model package.

    Exactly one of ``path`` (local provenance) or ``url`` (remote provenance) is set
    on a successfully parsed model. Versions and API levels are tracked separately
    for each provenance so a local entry can learn about a newer remote release.

    Attributes:
        short_name: Short identifier, e.g. ``deen.student.tiny11``
        display_name: Human readable name (``modelName`` in model_info.json)
        source_language: Source language code (``src``)
        target_language: Target language code (``trg``)
        type: Model type tag, e.g. ``tiny`` or ``base``
        local_version: Version of the installed package, if known
        remote_version: Version offered by the remote catalog, if known
        local_api: API level of the installed package, if known
        remote_api: API level offered by the remote catalog, if known
        path: Directory of the installed package
        url: Download location of the remote package
    """

    short_name: str = ""
    display_name: str = ""
    source_language: str = ""
    target_language: str = ""
    type: str = ""
    local_version: Optional[float] = None
    remote_version: Optional[float] = None
    local_api: Optional[float] = None
    remote_api: Optional[float] = None
    path: str = ""
    url: str = ""

    @property
    def is_local(self) -> bool:
        """Check if the model is installed on disk."""
        return bool(self.path)

    @property
    def is_remote(self) -> bool:
        """Check if the model comes from the remote catalog."""
        return bool(self.url)

    @property
    def is_empty(self) -> bool:
        """Check if this is the empty sentinel model."""
        return not self.path and not self.url

    @property
    def identity_key(self) -> Tuple[str, str, str, str]:
        """Fields that decide whether two records denote the same package.

        Version and provenance are deliberately not part of the key.
        """
        return (self.short_name, self.source_language, self.target_language, self.type)

    def is_same_model(self, other: "Model") -> bool:
        """Check whether ``other`` denotes the same package as this model.

        Args:
            other: The model to compare with

        Returns:
            True if the identity keys match
        """
        return self.identity_key == other.identity_key

    def sort_key(self) -> Tuple[str, str, str, str, str]:
        """Key used to keep model lists in a stable presentation order."""
        return (
            self.display_name.casefold(),
            self.source_language,
            self.target_language,
            self.type,
            self.short_name,
        )

    def __lt__(self, other: "Model") -> bool:
        """Order models by display name, then language pair, then type."""
        if not isinstance(other, Model):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    @property
    def outdated(self) -> bool:
        """Check if an installed model has a newer release in the remote catalog."""
        if not self.is_local or self.remote_version is None:
            return False
        return self.remote_version > (self.local_version or 0.0)

    def copy(self) -> "Model":
        """Return an independent copy of this model."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for JSON or YAML output."""
        data = asdict(self)
        data["outdated"] = self.outdated
        return data

    def __str__(self) -> str:
        """Return a short human readable description."""
        return f"{self.display_name or self.short_name} ({self.source_language}->{self.target_language}, {self.type})"
