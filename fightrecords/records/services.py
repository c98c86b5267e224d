"""Service layer for the records calculation pipeline."""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from fightrecords.core.constants import (
    EVENTS_COLLECTION,
    EVENTS_PAGE_SIZE,
    FIGHTER_RECORDS_PREFIX,
    FIRESTORE_BATCH_LIMIT,
    GYM_RECORDS_PREFIX,
    RECORD_KIND_ALL,
    RECORD_KIND_FIGHTERS,
    RECORD_KIND_GYMS,
    RECORD_KINDS,
    SKIPPED_SAMPLE_SIZE,
)
from fightrecords.core.types import RunSummary

from .accumulator import RecordAccumulator
from .extractor import ResultExtractor
from .persister import BatchPersister, FirestoreChunkedWriter
from .progress import ProgressReporter, ProgressSink
from .scanner import DateRange, EventScanner, FirestoreEventSource

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

logger = logging.getLogger(__name__)


def fighter_records_collection(label: str) -> str:
    """Collection holding fighter rollups for a time window."""
    return f"{FIGHTER_RECORDS_PREFIX}{label}"


def gym_records_collection(label: str) -> str:
    """Collection holding gym rollups for a time window."""
    return f"{GYM_RECORDS_PREFIX}{label}"


class RecordsService:
    """Rebuilds fighter and gym rollups from event results."""

    @staticmethod
    def run(
        label: str,
        on_progress: ProgressSink | None = None,
        *,
        db: Client | None = None,
        kind: str = RECORD_KIND_ALL,
        page_size: int = EVENTS_PAGE_SIZE,
        batch_limit: int = FIRESTORE_BATCH_LIMIT,
        now: datetime.datetime | None = None,
    ) -> RunSummary:
        """Scan every event in the window, aggregate, and overwrite the rollups.

        Query and commit failures propagate to the caller. Chunks committed
        before the failure stay written.
        """
        if kind not in RECORD_KINDS:
            raise ValueError(f"Unknown record kind: {kind!r}")
        date_range = DateRange.for_label(label)
        if db is None:
            db = firestore.client()
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)

        reporter = ProgressReporter(on_progress)
        accumulator = RecordAccumulator(
            now=now,
            track_fighters=kind in (RECORD_KIND_FIGHTERS, RECORD_KIND_ALL),
            track_gyms=kind in (RECORD_KIND_GYMS, RECORD_KIND_ALL),
        )

        try:
            RecordsService._scan(db, date_range, page_size, accumulator, reporter, now)
            RecordsService._report_skips(accumulator, reporter)

            fighters_written = 0
            if accumulator.track_fighters:
                fighters_written = BatchPersister(
                    FirestoreChunkedWriter(db, fighter_records_collection(label)),
                    batch_limit,
                    reporter,
                ).persist(accumulator.participant_documents())

            gyms_written = 0
            if accumulator.track_gyms:
                gyms_written = BatchPersister(
                    FirestoreChunkedWriter(db, gym_records_collection(label)),
                    batch_limit,
                    reporter,
                ).persist(accumulator.organization_documents())
        except Exception as e:
            logger.error(f"Error calculating {kind} records for {label}: {e}")
            raise

        message = RecordsService._summary_message(
            label, kind, fighters_written, gyms_written
        )
        reporter(message)
        return {
            "success": True,
            "totalRecords": fighters_written
            if kind != RECORD_KIND_GYMS
            else gyms_written,
            "message": message,
            "gymRecords": gyms_written,
            "eventsProcessed": len(accumulator.processed_events),
            "skippedGyms": sorted(accumulator.skipped_gyms),
            "messages": list(reporter.messages),
        }

    @staticmethod
    def calculate_fighter_records(
        label: str, on_progress: ProgressSink | None = None, **kwargs: Any
    ) -> RunSummary:
        """Rebuild only the fighter rollups for a time window."""
        return RecordsService.run(
            label, on_progress, kind=RECORD_KIND_FIGHTERS, **kwargs
        )

    @staticmethod
    def calculate_gym_records(
        label: str, on_progress: ProgressSink | None = None, **kwargs: Any
    ) -> RunSummary:
        """Rebuild only the gym rollups for a time window."""
        return RecordsService.run(label, on_progress, kind=RECORD_KIND_GYMS, **kwargs)

    @staticmethod
    def _scan(
        db: Client,
        date_range: DateRange,
        page_size: int,
        accumulator: RecordAccumulator,
        reporter: ProgressReporter,
        now: datetime.datetime,
    ) -> None:
        """Drive pagination, extraction and accumulation strictly in page order."""
        scanner = EventScanner(FirestoreEventSource(db), date_range, page_size)
        extractor = ResultExtractor(db, today=now.date())

        for page in scanner.pages():
            for event in page.records:
                name = event.get("event_name") or event.get("id")
                reporter(f"Processing event: {name}")
                accumulator.add_event(event, extractor.extract(event))
            reporter(f"Processed batch of {len(page.records)} events")

    @staticmethod
    def _report_skips(
        accumulator: RecordAccumulator, reporter: ProgressReporter
    ) -> None:
        """Surface each kind of skipped input once per run."""
        if accumulator.skipped_gyms:
            skipped = sorted(accumulator.skipped_gyms)
            sample = ", ".join(skipped[:SKIPPED_SAMPLE_SIZE])
            if len(skipped) > SKIPPED_SAMPLE_SIZE:
                sample += f" and {len(skipped) - SKIPPED_SAMPLE_SIZE} more..."
            logger.warning(
                f"Skipped {len(skipped)} problematic gym names: {', '.join(skipped)}"
            )
            reporter(
                f"Warning: Skipped {len(skipped)} gyms with invalid names: {sample}"
            )
        if accumulator.missing_identifier:
            reporter(
                f"Skipped {accumulator.missing_identifier} entries "
                "without a fighter identifier"
            )
        if accumulator.unscored:
            reporter(
                f"Skipped {accumulator.unscored} entries without a countable result"
            )

    @staticmethod
    def _summary_message(
        label: str, kind: str, fighters_written: int, gyms_written: int
    ) -> str:
        if kind == RECORD_KIND_FIGHTERS:
            return (
                f"Successfully processed {fighters_written} fighter records "
                f"for {label}"
            )
        if kind == RECORD_KIND_GYMS:
            return f"Successfully processed {gyms_written} gym records for {label}"
        return (
            f"Successfully processed {fighters_written} fighter records and "
            f"{gyms_written} gym records for {label}"
        )

    @staticmethod
    def preview_event(
        event_id: str,
        db: Client | None = None,
        now: datetime.datetime | None = None,
    ) -> dict[str, Any] | None:
        """Aggregate a single event without writing anything.

        Returns None when the event does not exist.
        """
        if db is None:
            db = firestore.client()
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)

        event_doc = cast(
            "DocumentSnapshot", db.collection(EVENTS_COLLECTION).document(event_id).get()
        )
        if not event_doc.exists:
            return None
        event = event_doc.to_dict() or {}
        event["id"] = event_doc.id

        accumulator = RecordAccumulator(now=now)
        entries = ResultExtractor(db, today=now.date()).extract(event)
        accumulator.add_event(event, entries)
        return {
            "event": {
                "eventId": event_doc.id,
                "eventName": event.get("event_name") or "",
                "date": event.get("date") or "",
            },
            "fighters": accumulator.participant_documents(),
            "gyms": accumulator.organization_documents(),
            "skippedGyms": sorted(accumulator.skipped_gyms),
        }

    @staticmethod
    def get_record(
        label: str, kind: str, record_id: str, db: Client | None = None
    ) -> dict[str, Any] | None:
        """Fetch one stored fighter or gym rollup."""
        if kind not in (RECORD_KIND_FIGHTERS, RECORD_KIND_GYMS):
            raise ValueError(f"Unknown record kind: {kind!r}")
        if db is None:
            db = firestore.client()
        collection = (
            fighter_records_collection(label)
            if kind == RECORD_KIND_FIGHTERS
            else gym_records_collection(label)
        )
        doc = cast(
            "DocumentSnapshot", db.collection(collection).document(record_id).get()
        )
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data
