"""Chroma-based deploy log."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

from ..deploy.models import Deploy
from .base import replaces_latest

logger = logging.getLogger(__name__)


class ChromaUnavailableError(RuntimeError):
    """Raised when the Chroma client cannot be constructed."""


class CollectionProtocol(Protocol):
    """Protocol for the minimal Chroma collection API used for deploy logs."""

    def add(
        self,
        *,
        documents: Iterable[str],
        metadatas: Iterable[dict[str, Any]],
        ids: Iterable[str],
    ) -> None:
        ...

    def upsert(
        self,
        *,
        documents: Iterable[str],
        metadatas: Iterable[dict[str, Any]],
        ids: Iterable[str],
    ) -> None:
        ...

    def get(
        self,
        *,
        ids: Iterable[str] | None = None,
        where: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> dict[str, list[Any]]:
        ...


class ClientProtocol(Protocol):
    """Protocol for the minimal Chroma client API used for deploy logs."""

    def get_or_create_collection(self, name: str) -> CollectionProtocol:
        ...


@dataclass(slots=True)
class DeployEntry:
    """A deploy as stored in Chroma, with its position in the channel log."""

    id: str
    channel_id: str
    sequence: int
    deploy: Deploy


class ChromaDeployLog:
    """Persist channel deploy logs in a ChromaDB collection.

    Each deploy is one document keyed ``<channel>:<sequence>``; the sequence
    number orders a channel's history.
    """

    def __init__(
        self,
        path: Path,
        *,
        collection_name: str = "channel_deploys",
        client_factory: Callable[[], ClientProtocol] | None = None,
    ) -> None:
        self._path = Path(path)
        self._collection_name = collection_name
        self._client_factory = client_factory or self._default_client_factory
        self._client: ClientProtocol | None = None
        self._collection: CollectionProtocol | None = None

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def _default_client_factory(self) -> ClientProtocol:
        try:
            import chromadb
        except ImportError as exc:  # pragma: no cover - depends on environment
            raise ChromaUnavailableError(
                "chromadb package is not installed; install deploy-tracker with the chroma extra"
            ) from exc

        return chromadb.PersistentClient(path=str(self._path))

    def _ensure_collection(self) -> CollectionProtocol:
        if self._collection is None:
            client = self._client or self._client_factory()
            self._client = client
            self._collection = client.get_or_create_collection(self._collection_name)
        return self._collection

    def _entries(self, channel_id: str) -> list[DeployEntry]:
        collection = self._ensure_collection()
        result = collection.get(where={"channel_id": channel_id})
        entries: list[DeployEntry] = []
        ids = result.get("ids", [])
        documents = result.get("documents", [])
        metadatas = result.get("metadatas", [])
        for entry_id, document, metadata in zip(ids, documents, metadatas):
            entries.append(
                DeployEntry(
                    id=entry_id,
                    channel_id=channel_id,
                    sequence=int(metadata.get("sequence", 0)),
                    deploy=Deploy.from_payload(json.loads(document)),
                )
            )
        entries.sort(key=lambda entry: entry.sequence)
        return entries

    @staticmethod
    def _metadata(channel_id: str, sequence: int, deploy: Deploy) -> dict[str, Any]:
        return {
            "channel_id": channel_id,
            "sequence": sequence,
            "user_id": deploy.user.id,
            "state": deploy.state.value,
            "started_at": deploy.started_at.isoformat() if deploy.started_at else "",
        }

    def ping(self) -> bool:
        """Verify that the underlying collection can be obtained."""

        self._ensure_collection()
        return True

    def get(self, channel_id: str) -> Deploy | None:
        entries = self._entries(channel_id)
        return entries[-1].deploy if entries else None

    def set(self, channel_id: str, deploy: Deploy) -> None:
        collection = self._ensure_collection()
        entries = self._entries(channel_id)
        latest = entries[-1] if entries else None
        document = json.dumps(deploy.to_payload())

        if latest is not None and replaces_latest(latest.deploy, deploy):
            collection.upsert(
                documents=[document],
                metadatas=[self._metadata(channel_id, latest.sequence, deploy)],
                ids=[latest.id],
            )
            logger.debug(
                "Replaced deploy record",
                extra={"channel_id": channel_id, "entry_id": latest.id},
            )
            return

        sequence = latest.sequence + 1 if latest is not None else 1
        entry_id = f"{channel_id}:{sequence}"
        collection.add(
            documents=[document],
            metadatas=[self._metadata(channel_id, sequence, deploy)],
            ids=[entry_id],
        )
        logger.debug(
            "Appended deploy record",
            extra={"channel_id": channel_id, "entry_id": entry_id},
        )

    def all(self, channel_id: str) -> list[Deploy]:
        return [entry.deploy for entry in self._entries(channel_id)]

    def since(self, channel_id: str, timestamp: datetime) -> list[Deploy]:
        return [
            deploy
            for deploy in self.all(channel_id)
            if deploy.started_at is not None and deploy.started_at >= timestamp
        ]


__all__ = ["ChromaDeployLog", "ChromaUnavailableError", "DeployEntry"]
