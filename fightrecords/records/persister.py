"""Chunked full-overwrite persistence of rollup documents."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

from fightrecords.core.constants import FIRESTORE_BATCH_LIMIT

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

WriteItem = tuple[str, Mapping[str, Any]]


class ChunkedWriter(Protocol):
    """Storage backend that commits one chunk of writes atomically."""

    def commit(self, items: list[WriteItem]) -> int:
        """Write every item as a full overwrite; raise on failure."""
        ...


class FirestoreChunkedWriter:
    """Commits each chunk as one Firestore write batch."""

    def __init__(self, db: Client, collection_name: str) -> None:
        """Initialize the writer."""
        self.db = db
        self.collection_name = collection_name

    def commit(self, items: list[WriteItem]) -> int:
        """Set every document in one batch and commit it."""
        collection = self.db.collection(self.collection_name)
        batch = self.db.batch()
        for key, document in items:
            batch.set(collection.document(key), dict(document))
        batch.commit()
        return len(items)


class BatchPersister:
    """Groups writes into chunks of at most ``max_chunk_size`` operations.

    Chunks are committed in order. A failing commit propagates immediately and
    leaves earlier chunks in place; because every write overwrites its whole
    document, re-running the pipeline repairs a partial run.
    """

    def __init__(
        self,
        writer: ChunkedWriter,
        max_chunk_size: int = FIRESTORE_BATCH_LIMIT,
        reporter: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the persister."""
        if max_chunk_size <= 0:
            raise ValueError("Chunk size must be positive.")
        self.writer = writer
        self.max_chunk_size = max_chunk_size
        self.reporter = reporter

    def _report(self, message: str) -> None:
        if self.reporter is not None:
            self.reporter(message)

    def persist(self, documents: Mapping[str, Mapping[str, Any]]) -> int:
        """Write all documents keyed by id and return how many were written."""
        total = 0
        chunk: list[WriteItem] = []
        for key, document in documents.items():
            chunk.append((key, document))
            if len(chunk) >= self.max_chunk_size:
                self._report(f"Committing batch of {len(chunk)} records...")
                total += self.writer.commit(chunk)
                chunk = []

        if chunk:
            self._report(f"Committing final batch of {len(chunk)} records...")
            total += self.writer.commit(chunk)
        return total
