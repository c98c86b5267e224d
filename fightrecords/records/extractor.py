"""Fetch an event's per-fighter result entries."""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING, Any

from fightrecords.core.constants import (
    EVENTS_COLLECTION,
    LEGACY_RESULTS_COLLECTION,
    RESULTS_JSON_COLLECTION,
    RESULTS_JSON_DOCUMENT,
)

from .identifiers import calculate_age

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

logger = logging.getLogger(__name__)


def _upper(value: Any) -> str:
    return value.strip().upper() if isinstance(value, str) else ""


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ResultExtractor:
    """Reads ``resultsJson/fighters`` for an event, or the legacy sub-collection."""

    def __init__(self, db: Client, today: datetime.date | None = None) -> None:
        """Initialize the extractor."""
        self.db = db
        self.today = today

    def extract(self, event: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the event's result entries, or [] if none can be read.

        A failure for one event is logged and the event is skipped.
        """
        event_id = event.get("id")
        if not event_id:
            logger.error(f"Event without an id skipped: {event.get('event_name')}")
            return []
        try:
            return self._fetch(event_id)
        except Exception as e:
            logger.error(f"Error fetching results for event {event_id}: {e}")
            return []

    def _fetch(self, event_id: str) -> list[dict[str, Any]]:
        event_ref = self.db.collection(EVENTS_COLLECTION).document(event_id)
        results_doc = (
            event_ref.collection(RESULTS_JSON_COLLECTION)
            .document(RESULTS_JSON_DOCUMENT)
            .get()
        )
        if results_doc.exists:
            data = results_doc.to_dict() or {}
            fighters = data.get("fighters")
            if not isinstance(fighters, list):
                return []
            return [
                self._normalize(fighter, event_id)
                for fighter in fighters
                if isinstance(fighter, dict)
            ]

        entries = []
        for fighter_doc in event_ref.collection(LEGACY_RESULTS_COLLECTION).stream():
            fighter = fighter_doc.to_dict() or {}
            fighter.setdefault("id", fighter_doc.id)
            entries.append(self._normalize(fighter, event_id))
        return entries

    def _normalize(self, fighter: dict[str, Any], event_id: str) -> dict[str, Any]:
        """Bring an entry from either path into the shape the accumulator reads."""
        entry = dict(fighter)
        entry["first"] = _upper(fighter.get("first"))
        entry["last"] = _upper(fighter.get("last"))
        entry["gym"] = _upper(fighter.get("gym"))
        entry["event_id"] = event_id

        age = _as_int(fighter.get("age"))
        if age <= 0 and fighter.get("dob"):
            age = calculate_age(fighter.get("dob"), self.today)
        entry["age"] = age
        return entry
