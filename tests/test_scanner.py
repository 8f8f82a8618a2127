"""Tests for scanning directories for installed models."""

from pathlib import Path
from typing import Any, Dict, List, Tuple

from conftest import write_package

from translation_model_registry.events import EventEmitter, RegistryEvent
from translation_model_registry.registry import ModelRegistry
from translation_model_registry.scanner import scan_directory


def _registry() -> Tuple[ModelRegistry, List[Tuple[RegistryEvent, Dict[str, Any]]]]:
    events: List[Tuple[RegistryEvent, Dict[str, Any]]] = []
    emitter = EventEmitter()
    emitter.subscribe(lambda event, data: events.append((event, data)))
    return ModelRegistry(emitter), events


def test_scan_finds_packages_and_archives(tmp_path: Path) -> None:
    """Valid packages are registered and archives recorded."""
    write_package(tmp_path / "deen-1", short_name="deen", name="German-English")
    write_package(tmp_path / "csen-1", short_name="csen", name="Czech-English", src="cs")
    (tmp_path / "not-a-model").mkdir()
    (tmp_path / "esen.tar.gz").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("hello")
    registry, _ = _registry()

    result = scan_directory(tmp_path, registry)

    assert [m.short_name for m in registry.all()] == ["csen", "deen"]
    assert sorted(m.short_name for m in result.models) == ["csen", "deen"]
    assert result.archives == ["esen.tar.gz"]
    assert registry.archives() == ["esen.tar.gz"]
    assert result.corrupt == []
    assert result.errors == []


def test_corrupt_descriptor_is_reported(tmp_path: Path) -> None:
    """A broken model_info.json is skipped with a corrupt package event."""
    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "model_info.json").write_text("{oops")
    write_package(tmp_path / "good")
    registry, events = _registry()

    result = scan_directory(tmp_path, registry)

    assert len(registry) == 1
    assert result.corrupt == [str(broken)]
    corrupt_events = [data for event, data in events if event == RegistryEvent.CORRUPT_PACKAGE]
    assert corrupt_events == [
        {
            "message": f"Corrupted json file: {broken / 'model_info.json'}. Delete or redownload.",
            "path": str(broken),
        }
    ]


def test_scratch_directories_are_skipped(tmp_path: Path) -> None:
    """Unfinished extractions are not registered."""
    write_package(tmp_path / ".extracting-abc123")
    registry, _ = _registry()

    scan_directory(tmp_path, registry)

    assert len(registry) == 0


def test_missing_directory_reports_error(tmp_path: Path) -> None:
    """An unreadable directory is reported and the scan ends."""
    registry, events = _registry()

    result = scan_directory(tmp_path / "missing", registry)

    assert result.models == []
    assert len(result.errors) == 1
    assert events[0][0] == RegistryEvent.ERROR


def test_rescan_does_not_duplicate(tmp_path: Path) -> None:
    """Scanning twice keeps one entry per identity."""
    write_package(tmp_path / "deen-1")
    registry, _ = _registry()

    scan_directory(tmp_path, registry)
    scan_directory(tmp_path, registry)

    assert len(registry) == 1


def test_scan_reconciles(tmp_path: Path) -> None:
    """A scan recomputes updates against the known catalog."""
    write_package(tmp_path / "deen-1", version=1.0)
    registry, events = _registry()
    registry.set_remote_models([])

    scan_directory(tmp_path, registry)

    assert events[-1] == (RegistryEvent.REGISTRY_CHANGED, {})
