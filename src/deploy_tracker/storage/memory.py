"""In-process deploy log."""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime

from ..deploy.models import Deploy
from .base import replaces_latest


class InMemoryDeployLog:
    """Keeps every channel's deploys in a list, oldest first.

    Records are copied on the way in and out so callers never alias stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: dict[str, list[Deploy]] = defaultdict(list)

    def ping(self) -> bool:
        return True

    def get(self, channel_id: str) -> Deploy | None:
        with self._lock:
            records = self._channels.get(channel_id)
            return replace(records[-1]) if records else None

    def set(self, channel_id: str, deploy: Deploy) -> None:
        with self._lock:
            records = self._channels[channel_id]
            if records and replaces_latest(records[-1], deploy):
                records[-1] = replace(deploy)
            else:
                records.append(replace(deploy))

    def all(self, channel_id: str) -> list[Deploy]:
        with self._lock:
            return [replace(record) for record in self._channels.get(channel_id, [])]

    def since(self, channel_id: str, timestamp: datetime) -> list[Deploy]:
        return [
            record
            for record in self.all(channel_id)
            if record.started_at is not None and record.started_at >= timestamp
        ]


__all__ = ["InMemoryDeployLog"]
