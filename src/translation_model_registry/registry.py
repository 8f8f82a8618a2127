"""In-memory registry of installed and remote translation models.

This module provides the ModelRegistry class, which keeps the ordered list of
installed models (unique by identity), the last fetched remote catalog, and the
new/updated lists derived from both.

Typical usage:

    from translation_model_registry import ModelRegistry

    registry = ModelRegistry()
    registry.upsert(model)
    registry.set_remote_models(catalog_models)
    print(registry.updated_models())
"""

import threading
from typing import List, Optional

from .events import EventEmitter, RegistryEvent
from .logging import LogEvent, get_logger, log_debug, log_info
from .model import Model
from .reconcile import ReconcileResult, reconcile

# Create module logger
logger = get_logger("registry")


class ModelRegistry:
    """Ordered registry of installed models and the remote catalog.

    Callers always receive copies; the stored models are only mutated through
    registry operations. All mutations are serialized by a single lock.
    """

    def __init__(self, emitter: Optional[EventEmitter] = None) -> None:
        """Initialize an empty registry.

        Args:
            emitter: Event emitter used to notify observers. A private one is
                     created if None.
        """
        self.events = emitter or EventEmitter()
        self._local_models: List[Model] = []
        self._remote_models: List[Model] = []
        self._new_models: List[Model] = []
        self._updated_models: List[Model] = []
        self._archives: List[str] = []
        self._lock = threading.RLock()

    def upsert(self, model: Model) -> bool:
        """Insert an installed model, or overwrite the entry with the same identity.

        An overwritten entry keeps its position. A new entry is inserted after the
        last model that sorts strictly before it.

        Args:
            model: The installed model

        Returns:
            True if the model was inserted, False if an existing entry was overwritten
        """
        stored = model.copy()
        with self._lock:
            position = 0
            for i, existing in enumerate(self._local_models):
                if existing.is_same_model(stored):
                    self._local_models[i] = stored
                    log_debug(LogEvent.MODEL_REGISTRY, f"Replaced {stored.short_name} at row {i}", path=stored.path)
                    self.events.emit(RegistryEvent.ROW_CHANGED, position=i)
                    return False

                if existing < stored:
                    position = i + 1

            self._local_models.insert(position, stored)

        log_debug(LogEvent.MODEL_REGISTRY, f"Inserted {stored.short_name} at row {position}", path=stored.path)
        self.events.emit(RegistryEvent.ROW_INSERTED, position=position)
        return True

    def remove(self, model: Model) -> bool:
        """Remove the installed model with the same identity as ``model``.

        Args:
            model: Model to remove

        Returns:
            True if a model was removed, False if none matched
        """
        with self._lock:
            position = self.index_of(model)
            if position is None:
                return False
            del self._local_models[position]

        self.events.emit(RegistryEvent.ROW_REMOVED, position=position)
        return True

    def index_of(self, model: Model) -> Optional[int]:
        """Get the row of the installed model with the same identity as ``model``."""
        with self._lock:
            for i, existing in enumerate(self._local_models):
                if existing.is_same_model(model):
                    return i
        return None

    def get(self, model: Model) -> Optional[Model]:
        """Get a copy of the installed model with the same identity as ``model``."""
        with self._lock:
            position = self.index_of(model)
            return None if position is None else self._local_models[position].copy()

    def find(
        self,
        short_name: str,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None,
        model_type: Optional[str] = None,
        include_remote: bool = False,
    ) -> List[Model]:
        """Look up models by short name and optional identity fields.

        Args:
            short_name: Short name to match
            source_language: Source language to match, any if None
            target_language: Target language to match, any if None
            model_type: Model type to match, any if None
            include_remote: Also search remote models that are not installed

        Returns:
            Copies of the matching models, installed ones first
        """
        def matches(m: Model) -> bool:
            return (
                m.short_name == short_name
                and (source_language is None or m.source_language == source_language)
                and (target_language is None or m.target_language == target_language)
                and (model_type is None or m.type == model_type)
            )

        with self._lock:
            found = [m.copy() for m in self._local_models if matches(m)]
            if include_remote:
                found.extend(m.copy() for m in self._new_models if matches(m))
        return found

    def all(self) -> List[Model]:
        """Get the installed models in presentation order."""
        with self._lock:
            return [m.copy() for m in self._local_models]

    def __len__(self) -> int:
        """Get the number of installed models."""
        with self._lock:
            return len(self._local_models)

    def remote_models(self) -> List[Model]:
        """Get the last fetched remote catalog, sorted."""
        with self._lock:
            return [m.copy() for m in self._remote_models]

    def new_models(self) -> List[Model]:
        """Get remote models that are not installed."""
        with self._lock:
            return [m.copy() for m in self._new_models]

    def updated_models(self) -> List[Model]:
        """Get remote models that are newer than their installed counterpart."""
        with self._lock:
            return [m.copy() for m in self._updated_models]

    def archives(self) -> List[str]:
        """Get file names of archives found on disk but not installed."""
        with self._lock:
            return list(self._archives)

    def add_archive(self, filename: str) -> None:
        """Record an archive file found during a scan."""
        with self._lock:
            if filename not in self._archives:
                self._archives.append(filename)

    def set_remote_models(self, models: List[Model]) -> ReconcileResult:
        """Replace the remote catalog and reconcile it with the installed models.

        Args:
            models: Remote models from a successful catalog fetch

        Returns:
            The reconciliation outcome
        """
        with self._lock:
            self._remote_models = sorted(m.copy() for m in models)
        log_info(LogEvent.CATALOG_FETCH, f"Remote catalog holds {len(models)} models")
        return self.update_available_models()

    def update_available_models(self) -> ReconcileResult:
        """Recompute the new and updated model lists.

        Returns:
            The reconciliation outcome
        """
        with self._lock:
            result = reconcile(self._local_models, self._remote_models)
            self._new_models = result.new_models
            self._updated_models = result.updated_models

        log_debug(
            LogEvent.RECONCILE,
            f"{len(result.new_models)} new, {len(result.updated_models)} updated models",
        )
        for position in result.changed_positions:
            self.events.emit(RegistryEvent.ROW_CHANGED, position=position)
        self.events.emit(RegistryEvent.REGISTRY_CHANGED)
        return ReconcileResult(
            [m.copy() for m in result.new_models],
            [m.copy() for m in result.updated_models],
            list(result.changed_positions),
        )
