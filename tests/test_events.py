"""Tests for registry event dispatch."""

from typing import Any, Dict, List, Tuple

from translation_model_registry.events import EventEmitter, RegistryEvent


def test_emit_reaches_all_subscribers() -> None:
    """Every subscriber receives the event and its data."""
    emitter = EventEmitter()
    first: List[Tuple[RegistryEvent, Dict[str, Any]]] = []
    second: List[Tuple[RegistryEvent, Dict[str, Any]]] = []
    emitter.subscribe(lambda event, data: first.append((event, data)))
    emitter.subscribe(lambda event, data: second.append((event, data)))

    emitter.emit(RegistryEvent.ROW_INSERTED, position=3)

    assert first == second == [(RegistryEvent.ROW_INSERTED, {"position": 3})]


def test_failing_subscriber_does_not_stop_others() -> None:
    """A broken observer is skipped."""
    emitter = EventEmitter()
    received: List[RegistryEvent] = []

    def broken(event: RegistryEvent, data: Dict[str, Any]) -> None:
        raise RuntimeError("observer failed")

    emitter.subscribe(broken)
    emitter.subscribe(lambda event, data: received.append(event))

    emitter.emit(RegistryEvent.ERROR, message="boom")

    assert received == [RegistryEvent.ERROR]


def test_unsubscribe_is_idempotent() -> None:
    """Unsubscribing twice is harmless."""
    emitter = EventEmitter()
    received: List[RegistryEvent] = []
    unsubscribe = emitter.subscribe(lambda event, data: received.append(event))

    unsubscribe()
    unsubscribe()
    emitter.emit(RegistryEvent.REGISTRY_CHANGED)

    assert received == []


def test_event_values() -> None:
    """Event names are stable strings."""
    assert RegistryEvent.CORRUPT_PACKAGE.value == "corrupt_package"
    assert RegistryEvent("fetch_finished") is RegistryEvent.FETCH_FINISHED
