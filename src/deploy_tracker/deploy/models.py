"""Deploy records and their lifecycle transitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class DeployStateError(RuntimeError):
    """Raised when a deploy is asked for a transition its state does not allow."""


class DeployState(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class User:
    """Initiator of a deploy as reported by the chat integration."""

    id: str
    name: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Deploy:
    """One attempt to deploy ``subject`` in a channel."""

    user: User
    subject: str
    started_at: datetime | None = None
    finished_at: datetime | None = None
    aborted: bool = False
    abort_reason: str = ""

    @property
    def state(self) -> DeployState:
        if self.started_at is None:
            return DeployState.PENDING
        if self.finished_at is None:
            return DeployState.IN_PROGRESS
        return DeployState.ABORTED if self.aborted else DeployState.FINISHED

    @property
    def in_progress(self) -> bool:
        return self.state is DeployState.IN_PROGRESS

    def start(self, at: datetime | None = None) -> None:
        if self.started_at is not None:
            raise DeployStateError(f"Deploy of {self.subject!r} has already been started")
        self.started_at = at or _utcnow()

    def finish(self, at: datetime | None = None) -> None:
        self._ensure_in_progress("finish")
        self.finished_at = at or _utcnow()

    def abort(self, reason: str = "", at: datetime | None = None) -> None:
        self._ensure_in_progress("abort")
        self.finished_at = at or _utcnow()
        self.aborted = True
        self.abort_reason = reason

    def _ensure_in_progress(self, action: str) -> None:
        if not self.in_progress:
            raise DeployStateError(
                f"Cannot {action} deploy of {self.subject!r} in state {self.state.value}"
            )

    def to_payload(self) -> dict[str, Any]:
        """Serialize into a JSON-friendly mapping."""

        return {
            "user": {"id": self.user.id, "name": self.user.name},
            "subject": self.subject,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "aborted": self.aborted,
            "abort_reason": self.abort_reason,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Deploy":
        started_raw = payload.get("started_at")
        finished_raw = payload.get("finished_at")
        return cls(
            user=User(id=str(payload["user"]["id"]), name=payload["user"].get("name", "")),
            subject=payload.get("subject", ""),
            started_at=datetime.fromisoformat(started_raw) if started_raw else None,
            finished_at=datetime.fromisoformat(finished_raw) if finished_raw else None,
            aborted=bool(payload.get("aborted", False)),
            abort_reason=payload.get("abort_reason") or "",
        )


__all__ = ["Deploy", "DeployState", "DeployStateError", "User"]
