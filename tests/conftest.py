"""Shared fixtures for building model packages and archives."""

import io
import json
import tarfile
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional

import pytest

from translation_model_registry.manager import ModelManager

FIXED_TIME = 1700000000


def model_info(
    short_name: str = "deen.student.tiny11",
    name: str = "German-English tiny",
    src: str = "de",
    trg: str = "en",
    type: str = "tiny",
    version: Optional[float] = 1.0,
    api: Optional[float] = 1.0,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a model_info.json dictionary."""
    info: Dict[str, Any] = {"shortName": short_name, "modelName": name, "src": src, "trg": trg, "type": type}
    if version is not None:
        info["version"] = version
    if api is not None:
        info["API"] = api
    info.update(extra)
    return info


def build_archive(entries: Dict[str, Optional[bytes]]) -> bytes:
    """Build a .tar.gz archive in memory.

    Args:
        entries: Archive path -> file content, or None for a directory entry

    Returns:
        The compressed archive
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in entries.items():
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def wrapped_package(folder: str = "deen.student.tiny11", **info: Any) -> Dict[str, Optional[bytes]]:
    """Archive entries of a package wrapped in a top-level folder."""
    return {
        folder: None,
        f"{folder}/model_info.json": json.dumps(model_info(**info)).encode("utf-8"),
        f"{folder}/model.intgemm.alphas.bin": b"weights",
        f"{folder}/vocab.deen.spm": b"vocab",
    }


def write_package(directory: Path, **info: Any) -> Path:
    """Write an installed package with a model_info.json into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "model_info.json").write_text(json.dumps(model_info(**info)), encoding="utf-8")
    (directory / "model.bin").write_bytes(b"weights")
    return directory


@pytest.fixture
def models_dir(tmp_path: Path) -> Path:
    """Managed root used by the tests (not created yet)."""
    return tmp_path / "models"


@pytest.fixture
def archive_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an archive to disk and returning its path."""
    downloads = tmp_path / "downloads"
    downloads.mkdir()

    def _make(entries: Dict[str, Optional[bytes]], filename: str = "deen.student.tiny11.tar.gz") -> Path:
        path = downloads / filename
        path.write_bytes(build_archive(entries))
        return path

    return _make


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the user's environment and the default manager out of the tests."""
    monkeypatch.delenv("TMR_MODELS_DIR", raising=False)
    monkeypatch.delenv("TMR_CATALOG_URL", raising=False)
    monkeypatch.setenv("TMR_DISABLE_CWD_SCAN", "1")
    ModelManager.cleanup()
    yield
    ModelManager.cleanup()
