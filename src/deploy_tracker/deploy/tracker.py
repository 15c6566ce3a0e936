"""Per-channel deploy state machine."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterator

from .models import Deploy, DeployStateError

if TYPE_CHECKING:
    from ..storage.base import DeployStore

logger = logging.getLogger(__name__)


class ChannelLocks:
    """Hands out one lock per channel id.

    The registry mutex is only held while looking up a lock, so channels never
    wait on each other. A channel's lock is dropped once no caller holds or
    waits on it, so the registry only keeps channels with calls in flight.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    def active(self) -> int:
        """Number of channels with a call in flight."""

        with self._registry_lock:
            return len(self._locks)

    @contextmanager
    def hold(self, channel_id: str) -> Iterator[None]:
        with self._registry_lock:
            lock = self._locks.get(channel_id)
            if lock is None:
                lock = self._locks[channel_id] = threading.Lock()
            self._users[channel_id] = self._users.get(channel_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._registry_lock:
                self._users[channel_id] -= 1
                if not self._users[channel_id]:
                    del self._users[channel_id]
                    del self._locks[channel_id]


class ChannelDeploys:
    """Tracks the in-progress deploy of every channel on top of a store.

    No state is cached between calls: each operation re-reads the store while
    holding the channel's lock for the whole read-modify-write span.
    """

    def __init__(
        self,
        store: DeployStore,
        *,
        clock: Callable[[], datetime] | None = None,
        locks: ChannelLocks | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks = locks if locks is not None else ChannelLocks()

    def current(self, channel_id: str) -> tuple[Deploy | None, bool]:
        """Return the channel's latest deploy and whether it is still in progress."""

        deploy = self._store.get(channel_id)
        return deploy, deploy is not None and deploy.in_progress

    def start(self, channel_id: str, candidate: Deploy) -> tuple[Deploy, bool]:
        """Start ``candidate`` unless another user is already deploying.

        A deploy left running by the same user is finished first. On conflict the
        in-progress deploy is returned together with ``False``.
        """

        if candidate.started_at is not None:
            raise DeployStateError(
                f"Deploy of {candidate.subject!r} has already been started"
            )

        with self._locks.hold(channel_id):
            while True:
                current, in_progress = self.current(channel_id)
                if not in_progress:
                    break

                if current.user.id != candidate.user.id:
                    logger.info(
                        "Deploy rejected, channel is busy",
                        extra={
                            "channel_id": channel_id,
                            "user_id": candidate.user.id,
                            "owner_id": current.user.id,
                        },
                    )
                    return current, False

                self._finish_locked(channel_id, current)
                logger.info(
                    "Finished superseded deploy",
                    extra={"channel_id": channel_id, "user_id": current.user.id},
                )

            candidate.start(self._clock())
            self._store.set(channel_id, candidate)

        logger.info(
            "Deploy started",
            extra={
                "channel_id": channel_id,
                "user_id": candidate.user.id,
                "subject": candidate.subject,
            },
        )
        return candidate, True

    def finish(self, channel_id: str) -> tuple[Deploy | None, bool]:
        with self._locks.hold(channel_id):
            current, in_progress = self.current(channel_id)
            if not in_progress:
                return None, False
            self._finish_locked(channel_id, current)

        logger.info(
            "Deploy finished",
            extra={"channel_id": channel_id, "user_id": current.user.id},
        )
        return current, True

    def abort(self, channel_id: str, reason: str = "") -> tuple[Deploy | None, bool]:
        with self._locks.hold(channel_id):
            current, in_progress = self.current(channel_id)
            if not in_progress:
                return None, False
            current.abort(reason, self._clock())
            self._store.set(channel_id, current)

        logger.info(
            "Deploy aborted",
            extra={"channel_id": channel_id, "user_id": current.user.id, "reason": reason},
        )
        return current, True

    def _finish_locked(self, channel_id: str, deploy: Deploy) -> None:
        deploy.finish(self._clock())
        self._store.set(channel_id, deploy)


__all__ = ["ChannelDeploys", "ChannelLocks"]
