"""Tests for installing and removing model packages."""

import io
import json
import os
from pathlib import Path
from typing import Any, Callable, List
from unittest.mock import patch

import pytest
from conftest import FIXED_TIME, build_archive, model_info, wrapped_package, write_package

from translation_model_registry.errors import (
    AmbiguousLayoutError,
    DescriptorRemovalError,
    EmptyArchiveError,
    ExtractError,
    InvalidPackageError,
    ManagedRootError,
    NotManagedError,
    PackageIOError,
    RelocationFailedError,
)
from translation_model_registry.installer import SCRATCH_PREFIX, PackageInstaller, destination_name
from translation_model_registry.model import Model
from translation_model_registry.registry import ModelRegistry


@pytest.fixture
def registry() -> ModelRegistry:
    return ModelRegistry()


@pytest.fixture
def installer(models_dir: Path, registry: ModelRegistry) -> PackageInstaller:
    return PackageInstaller(models_dir, registry, clock=lambda: FIXED_TIME)


def _scratch_dirs(models_dir: Path) -> List[Path]:
    return [p for p in models_dir.iterdir() if p.name.startswith(SCRATCH_PREFIX)]


def test_destination_name() -> None:
    """Installed directories are named after the archive and the install time."""
    assert destination_name("deen.student.tiny11.tar.gz", 1700000000) == "deen.student.tiny11-1700000000"
    assert destination_name("/downloads/x.tar.gz", 5) == "x-5"
    assert destination_name(".tar.gz", 5) == "model-5"


class TestInstall:
    """Tests for PackageInstaller.install."""

    def test_wrapped_archive(
        self, installer: PackageInstaller, registry: ModelRegistry, models_dir: Path, archive_file: Callable[..., Path]
    ) -> None:
        """An archive with a top-level folder is installed under a fresh name."""
        model, inserted = installer.install_file(archive_file(wrapped_package()))

        destination = models_dir / f"deen.student.tiny11-{FIXED_TIME}"
        assert inserted is True
        assert model.path == str(destination)
        assert (destination / "model_info.json").is_file()
        assert (destination / "vocab.deen.spm").read_bytes() == b"vocab"
        assert registry.all() == [model]
        assert _scratch_dirs(models_dir) == []

    def test_flat_archive(self, installer: PackageInstaller, models_dir: Path) -> None:
        """Files at the archive root become the package directory."""
        data = build_archive(
            {"model_info.json": json.dumps(model_info()).encode("utf-8"), "model.bin": b"weights"}
        )

        model, _ = installer.install(io.BytesIO(data), "flat.tar.gz")

        assert Path(model.path).name == f"flat-{FIXED_TIME}"
        assert (Path(model.path) / "model.bin").exists()
        assert _scratch_dirs(models_dir) == []

    def test_reinstall_replaces_registry_entry(
        self, models_dir: Path, registry: ModelRegistry, archive_file: Callable[..., Path]
    ) -> None:
        """Installing the same package twice keeps one registry entry pointing at the newest copy."""
        times = iter([1000, 2000])
        installer = PackageInstaller(models_dir, registry, clock=lambda: next(times))
        archive = archive_file(wrapped_package())

        first, first_inserted = installer.install_file(archive)
        second, second_inserted = installer.install_file(archive)

        assert first_inserted is True
        assert second_inserted is False
        assert len(registry) == 1
        assert registry.all()[0].path == second.path
        assert Path(first.path).is_dir() and Path(second.path).is_dir()

    def test_name_collision_gets_counter(self, installer: PackageInstaller, archive_file: Callable[..., Path]) -> None:
        """An existing directory with the same name is never overwritten."""
        archive = archive_file(wrapped_package())

        first, _ = installer.install_file(archive)
        second, _ = installer.install_file(archive)

        assert Path(second.path).name == f"{Path(first.path).name}-1"

    def test_missing_descriptor(self, installer: PackageInstaller, registry: ModelRegistry, models_dir: Path) -> None:
        """An archive without model_info.json is rejected and leaves nothing behind."""
        data = build_archive({"model": None, "model/model.bin": b"weights"})

        with pytest.raises(InvalidPackageError):
            installer.install(io.BytesIO(data), "model.tar.gz")

        assert list(models_dir.iterdir()) == []
        assert len(registry) == 0

    def test_corrupt_descriptor(self, installer: PackageInstaller, models_dir: Path) -> None:
        """A broken model_info.json fails validation before anything is moved."""
        data = build_archive({"model": None, "model/model_info.json": b"{broken"})

        with pytest.raises(InvalidPackageError) as exc_info:
            installer.install(io.BytesIO(data), "model.tar.gz")

        assert exc_info.value.cause is not None
        assert list(models_dir.iterdir()) == []

    def test_empty_archive(self, installer: PackageInstaller, models_dir: Path) -> None:
        """An archive without entries is rejected."""
        with pytest.raises(EmptyArchiveError):
            installer.install(io.BytesIO(build_archive({})), "empty.tar.gz")
        assert list(models_dir.iterdir()) == []

    def test_extraction_failure(self, installer: PackageInstaller, models_dir: Path) -> None:
        """A corrupt archive is rejected and the scratch directory removed."""
        with pytest.raises(ExtractError):
            installer.install(io.BytesIO(b"not an archive"), "bad.tar.gz")
        assert list(models_dir.iterdir()) == []

    def test_ambiguous_layout(self, installer: PackageInstaller, models_dir: Path) -> None:
        """Without a common prefix the install is rejected."""
        data = build_archive(wrapped_package())

        with patch("translation_model_registry.installer.common_prefix_path", return_value=""):
            with pytest.raises(AmbiguousLayoutError):
                installer.install(io.BytesIO(data), "model.tar.gz")

        assert list(models_dir.iterdir()) == []

    def test_relocation_failure_keeps_extraction(
        self, installer: PackageInstaller, registry: ModelRegistry, models_dir: Path
    ) -> None:
        """A failed rename reports where the extracted files were left."""
        data = build_archive(wrapped_package())

        with patch("translation_model_registry.installer.os.rename", side_effect=OSError("cross-device link")):
            with pytest.raises(RelocationFailedError) as exc_info:
                installer.install(io.BytesIO(data), "model.tar.gz")

        scratch = _scratch_dirs(models_dir)
        assert len(scratch) == 1
        assert exc_info.value.source == str(scratch[0])
        assert len(registry) == 0

    def test_missing_archive_file(self, installer: PackageInstaller, tmp_path: Path) -> None:
        """A file that cannot be opened is an I/O error."""
        with pytest.raises(PackageIOError):
            installer.install_file(tmp_path / "missing.tar.gz")

    def test_managed_root_is_a_file(self, tmp_path: Path, registry: ModelRegistry) -> None:
        """A file occupying the managed root stops the install."""
        root = tmp_path / "models"
        root.write_text("not a directory")
        installer = PackageInstaller(root, registry)

        with pytest.raises(ManagedRootError):
            installer.install(io.BytesIO(build_archive(wrapped_package())), "model.tar.gz")


class TestRemove:
    """Tests for PackageInstaller.remove."""

    def _install(self, installer: PackageInstaller) -> Model:
        model, _ = installer.install(io.BytesIO(build_archive(wrapped_package())), "model.tar.gz")
        return model

    def test_remove(self, installer: PackageInstaller, registry: ModelRegistry) -> None:
        """Removing deletes the directory and the registry entry."""
        model = self._install(installer)

        assert installer.remove(model) is True
        assert not Path(model.path).exists()
        assert len(registry) == 0

    def test_refuses_models_outside_managed_root(
        self, installer: PackageInstaller, registry: ModelRegistry, tmp_path: Path
    ) -> None:
        """Models found elsewhere are never deleted."""
        package = write_package(tmp_path / "elsewhere")
        model = Model(short_name="deen.student.tiny11", path=str(package))
        registry.upsert(model)

        assert installer.is_managed(model) is False
        with pytest.raises(NotManagedError):
            installer.remove(model)
        assert (package / "model_info.json").exists()
        assert len(registry) == 1

    def test_managed_root_itself_is_not_managed(self, installer: PackageInstaller, models_dir: Path) -> None:
        """The root directory is not a removable package."""
        assert installer.is_managed(Model(path=str(models_dir))) is False
        assert installer.is_managed(Model(url="https://example.com/a.tar.gz")) is False

    def test_descriptor_removal_failure(self, installer: PackageInstaller, registry: ModelRegistry) -> None:
        """If model_info.json cannot be deleted nothing else is touched."""
        model = self._install(installer)

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            with pytest.raises(DescriptorRemovalError):
                installer.remove(model)

        assert (Path(model.path) / "model_info.json").exists()
        assert len(registry) == 1

    def test_partial_removal(self, installer: PackageInstaller, registry: ModelRegistry) -> None:
        """Leftover files are reported but the model is uninstalled."""
        model = self._install(installer)

        def failing_rmtree(path: Any, onerror: Any = None, onexc: Any = None, **kwargs: Any) -> None:
            handler = onexc or onerror
            handler(os.unlink, os.path.join(str(path), "model.bin"), PermissionError("busy"))

        with patch("translation_model_registry.installer.shutil.rmtree", side_effect=failing_rmtree):
            complete = installer.remove(model)

        assert complete is False
        assert not (Path(model.path) / "model_info.json").exists()
        assert len(registry) == 0
