"""Common utilities for tests."""

import unittest.mock
from typing import Any, Optional

from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter and equality."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    def doc_ref_eq(self: Any, other: Any) -> bool:
        if not isinstance(other, DocumentReference):
            return False
        return self._path == other._path

    if not hasattr(DocumentReference, "_orig_eq"):
        DocumentReference._orig_eq = DocumentReference.__eq__
        DocumentReference.__eq__ = doc_ref_eq
        DocumentReference.__hash__ = lambda self: hash(tuple(self._path))


class MockBatch:
    """Write batch that applies its operations to a MockFirestore on commit."""

    def __init__(self, db: Any) -> None:
        self.db = db
        self.writes: list[tuple[Any, Any]] = []
        self.commit = unittest.mock.MagicMock(side_effect=self._real_commit)

    def set(self, ref: Any, data: Any, merge: bool = False) -> None:
        self.writes.append((ref, data))

    def delete(self, ref: Any) -> None:
        self.writes.append((ref, None))

    def _real_commit(self) -> None:
        for ref, data in self.writes:
            if data is None:
                ref.delete()
            else:
                ref.set(data)


def make_db() -> MockFirestore:
    """A patched MockFirestore whose ``batch()`` returns a fresh MockBatch."""
    patch_mockfirestore()
    db = MockFirestore()
    db.batch = lambda: MockBatch(db)
    return db


def add_event(
    db: Any,
    event_id: str,
    date: str,
    fighters: Optional[list[dict[str, Any]]] = None,
    legacy: Optional[list[dict[str, Any]]] = None,
    **fields: Any,
) -> None:
    """Store an event and its results on the primary or legacy path."""
    event_ref = db.collection("events").document(event_id)
    event_ref.set({"event_name": fields.pop("event_name", event_id), "date": date, **fields})
    if fighters is not None:
        event_ref.collection("resultsJson").document("fighters").set(
            {"fighters": fighters}
        )
    for index, fighter in enumerate(legacy or []):
        event_ref.collection("results2").document(f"r{index}").set(fighter)
