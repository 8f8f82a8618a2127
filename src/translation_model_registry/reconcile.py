"""Reconciliation of installed models with the remote catalog."""

from typing import List, NamedTuple, Sequence

from .model import Model


class ReconcileResult(NamedTuple):
    """Outcome of a reconciliation pass.

    Attributes:
        new_models: Remote models that are not installed
        updated_models: Remote models whose installed counterpart is outdated
        changed_positions: Indexes of local models that received remote info
    """

    new_models: List[Model]
    updated_models: List[Model]
    changed_positions: List[int]


def reconcile(local: List[Model], remote: Sequence[Model]) -> ReconcileResult:
    """Cross-reference installed models with the remote catalog.

    Matching local entries are updated in place with the remote version and API
    level, which is how installed models learn about available updates. Both
    output lists follow the order of ``remote`` and are rebuilt on every call.

    Args:
        local: Installed models, mutated in place
        remote: Remote catalog models

    Returns:
        The new and updated models, plus the local positions that changed
    """
    new_models: List[Model] = []
    updated_models: List[Model] = []
    changed_positions: List[int] = []

    for remote_model in remote:
        position = next((i for i, m in enumerate(local) if m.is_same_model(remote_model)), None)
        if position is None:
            new_models.append(remote_model)
            continue

        installed = local[position]
        installed.remote_version = remote_model.remote_version
        installed.remote_api = remote_model.remote_api
        changed_positions.append(position)

        # Recomputed for each pair; never carried over from a previous entry
        if installed.outdated:
            updated_models.append(remote_model)

    return ReconcileResult(new_models, updated_models, changed_positions)
