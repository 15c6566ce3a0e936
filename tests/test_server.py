from __future__ import annotations

from pathlib import Path

from deploy_tracker import server as server_module
from deploy_tracker.config import DeployTrackerSettings
from deploy_tracker.deploy import ChannelDeploys
from deploy_tracker.server import create_server
from deploy_tracker.storage import ChromaUnavailableError, InMemoryDeployLog


def _settings(tmp_path: Path, backend: str) -> DeployTrackerSettings:
    settings = DeployTrackerSettings(storage_backend=backend)
    settings.chroma_persist_path = tmp_path / "chroma"
    return settings


def test_create_server_with_memory_backend(tmp_path: Path) -> None:
    server = create_server(_settings(tmp_path, "memory"))

    assert isinstance(getattr(server, "deploy_log"), InMemoryDeployLog)
    assert isinstance(getattr(server, "deploy_tracker"), ChannelDeploys)
    metadata = getattr(server, "storage_metadata")
    assert metadata["backend"] == "memory"
    assert metadata["available"] is True
    assert metadata["error"] is None


def test_create_server_uses_provided_log(tmp_path: Path) -> None:
    log = InMemoryDeployLog()
    server = create_server(_settings(tmp_path, "chroma"), deploy_log=log)

    assert getattr(server, "deploy_log") is log
    handles = getattr(server, "tool_handles")
    assert handles.start_deploy is not None


def test_create_server_falls_back_when_chroma_unavailable(tmp_path: Path, monkeypatch) -> None:
    def broken_open(_settings):
        raise ChromaUnavailableError("chromadb package is not installed")

    monkeypatch.setattr(server_module, "open_deploy_log", broken_open)

    server = create_server(_settings(tmp_path, "chroma"))

    assert isinstance(getattr(server, "deploy_log"), InMemoryDeployLog)
    metadata = getattr(server, "storage_metadata")
    assert metadata["backend"] == "memory"
    assert metadata["available"] is False
    assert "chromadb" in metadata["error"]
