"""Persistence contracts consumed by the tracker and the dashboard."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..deploy.models import Deploy


class DeployStore(Protocol):
    """Latest-record read/write access used by the tracker."""

    def get(self, channel_id: str) -> Deploy | None:
        """Return a copy of the most recently started deploy, if any."""
        ...

    def set(self, channel_id: str, deploy: Deploy) -> None:
        """Upsert ``deploy`` as the channel's most recent record."""
        ...


class DeployRepository(Protocol):
    """Ordered history reads used by the report renderer."""

    def all(self, channel_id: str) -> list[Deploy]:
        ...

    def since(self, channel_id: str, timestamp: datetime) -> list[Deploy]:
        ...


class DeployLog(DeployStore, DeployRepository, Protocol):
    """A single per-channel log exposing both the store and repository views."""


def replaces_latest(latest: Deploy | None, deploy: Deploy) -> bool:
    """Whether writing ``deploy`` should overwrite ``latest`` instead of appending.

    Only the in-progress record may be replaced, and only by a copy of itself.
    """

    return (
        latest is not None
        and latest.finished_at is None
        and latest.started_at == deploy.started_at
        and latest.user.id == deploy.user.id
    )


__all__ = ["DeployLog", "DeployRepository", "DeployStore", "replaces_latest"]
