"""Tests for chunked persistence."""

from __future__ import annotations

import unittest
from typing import Any

from fightrecords.records.persister import BatchPersister, FirestoreChunkedWriter
from tests.conftest import make_db


class RecordingWriter:
    """ChunkedWriter that keeps committed chunks in memory."""

    def __init__(self, fail_on_chunk: int | None = None) -> None:
        self.chunks: list[list[tuple[str, Any]]] = []
        self.store: dict[str, Any] = {}
        self.fail_on_chunk = fail_on_chunk

    def commit(self, items: list[tuple[str, Any]]) -> int:
        if self.fail_on_chunk is not None and len(self.chunks) == self.fail_on_chunk:
            raise RuntimeError("commit rejected")
        self.chunks.append(list(items))
        for key, document in items:
            self.store[key] = dict(document)
        return len(items)


def _documents(count: int) -> dict[str, dict[str, Any]]:
    return {f"k{i:03d}": {"n": i} for i in range(count)}


class BatchPersisterTestCase(unittest.TestCase):
    def test_chunks_never_exceed_the_limit(self) -> None:
        writer = RecordingWriter()
        messages: list[str] = []
        persister = BatchPersister(writer, max_chunk_size=4, reporter=messages.append)

        total = persister.persist(_documents(10))

        self.assertEqual(total, 10)
        self.assertEqual([len(chunk) for chunk in writer.chunks], [4, 4, 2])
        self.assertEqual(
            messages,
            [
                "Committing batch of 4 records...",
                "Committing batch of 4 records...",
                "Committing final batch of 2 records...",
            ],
        )

    def test_exact_multiple_has_no_trailing_chunk(self) -> None:
        writer = RecordingWriter()
        BatchPersister(writer, max_chunk_size=5).persist(_documents(10))
        self.assertEqual([len(chunk) for chunk in writer.chunks], [5, 5])

    def test_nothing_to_write(self) -> None:
        writer = RecordingWriter()
        self.assertEqual(BatchPersister(writer).persist({}), 0)
        self.assertEqual(writer.chunks, [])

    def test_failure_propagates_and_keeps_earlier_chunks(self) -> None:
        writer = RecordingWriter(fail_on_chunk=1)
        persister = BatchPersister(writer, max_chunk_size=3)

        with self.assertRaises(RuntimeError):
            persister.persist(_documents(7))

        self.assertEqual(len(writer.chunks), 1)
        self.assertEqual(sorted(writer.store), ["k000", "k001", "k002"])

    def test_rerun_after_failure_converges(self) -> None:
        writer = RecordingWriter(fail_on_chunk=1)
        with self.assertRaises(RuntimeError):
            BatchPersister(writer, max_chunk_size=3).persist(_documents(7))

        writer.fail_on_chunk = None
        BatchPersister(writer, max_chunk_size=3).persist(_documents(7))
        self.assertEqual(writer.store, _documents(7))

    def test_chunk_size_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            BatchPersister(RecordingWriter(), max_chunk_size=0)


class FirestoreChunkedWriterTestCase(unittest.TestCase):
    def test_commit_overwrites_documents(self) -> None:
        db = make_db()
        db.collection("records_pmt_2024").document("p1").set(
            {"wins": 9, "stale": True}
        )

        writer = FirestoreChunkedWriter(db, "records_pmt_2024")
        written = writer.commit([("p1", {"wins": 1}), ("p2", {"wins": 2})])

        self.assertEqual(written, 2)
        self.assertEqual(
            db.collection("records_pmt_2024").document("p1").get().to_dict(),
            {"wins": 1},
        )
        self.assertEqual(
            db.collection("records_pmt_2024").document("p2").get().to_dict(),
            {"wins": 2},
        )


if __name__ == "__main__":
    unittest.main()
