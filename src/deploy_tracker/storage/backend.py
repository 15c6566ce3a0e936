"""Select the deploy log backend from settings."""

from __future__ import annotations

from ..config import DeployTrackerSettings
from .base import DeployLog
from .chroma import ChromaDeployLog
from .memory import InMemoryDeployLog


def open_deploy_log(settings: DeployTrackerSettings) -> DeployLog:
    """Construct and ping the configured backend.

    Raises ChromaUnavailableError when the Chroma backend cannot be reached.
    """

    if settings.storage_backend == "memory":
        return InMemoryDeployLog()

    log = ChromaDeployLog(
        settings.chroma_persist_path,
        collection_name=settings.chroma_collection,
    )
    log.ping()
    return log


__all__ = ["open_deploy_log"]
