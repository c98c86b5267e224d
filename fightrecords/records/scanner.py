"""Cursor-paginated scan over the events collection."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

from firebase_admin import firestore

from fightrecords.core.constants import (
    ALL_TIME_LABEL,
    EVENTS_COLLECTION,
    EVENTS_PAGE_SIZE,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

_YEAR_LABEL = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class Cursor:
    """Opaque continuation token pointing just past the last record of a page."""

    token: Any


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``YYYY-MM-DD`` bounds; a None bound is open."""

    start: Optional[str] = None
    end: Optional[str] = None

    @classmethod
    def for_label(cls, label: str) -> DateRange:
        """Build the range for a time window label such as ``"2024"`` or ``"all"``."""
        if label == ALL_TIME_LABEL:
            return cls()
        if not isinstance(label, str) or not _YEAR_LABEL.match(label):
            raise ValueError(f"Invalid time window label: {label!r}")
        return cls(start=f"{label}-01-01", end=f"{label}-12-31")

    def contains(self, date: str) -> bool:
        """Lexical containment check, matching how the store compares dates."""
        if self.start is not None and date < self.start:
            return False
        if self.end is not None and date > self.end:
            return False
        return True


@dataclass
class EventPage:
    """One page of event records plus the cursor to request the next one."""

    records: list[dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[Cursor] = None


class EventSource(Protocol):
    """Paginated query service over events ordered by date descending."""

    def query(
        self, date_range: DateRange, cursor: Optional[Cursor], limit: int
    ) -> EventPage:
        """Return up to ``limit`` events after ``cursor``."""
        ...


class FirestoreEventSource:
    """EventSource backed by the Firestore ``events`` collection."""

    def __init__(self, db: Client) -> None:
        """Initialize the source."""
        self.db = db

    def query(
        self, date_range: DateRange, cursor: Optional[Cursor], limit: int
    ) -> EventPage:
        """Run one page query; errors propagate to the caller."""
        query: Any = self.db.collection(EVENTS_COLLECTION)
        if date_range.start is not None:
            query = query.where(
                filter=firestore.FieldFilter("date", ">=", date_range.start)
            )
        if date_range.end is not None:
            query = query.where(
                filter=firestore.FieldFilter("date", "<=", date_range.end)
            )
        query = query.order_by("date", direction=firestore.Query.DESCENDING)
        if cursor is not None:
            query = query.start_after(cursor.token)
        query = query.limit(limit)

        snapshots = list(query.stream())
        records = []
        for snapshot in snapshots:
            data = snapshot.to_dict() or {}
            data["id"] = snapshot.id
            records.append(data)

        next_cursor = Cursor(snapshots[-1]) if snapshots else None
        return EventPage(records=records, next_cursor=next_cursor)


class EventScanner:
    """Lazily walks every page of events in a date range."""

    def __init__(
        self,
        source: EventSource,
        date_range: DateRange,
        page_size: int = EVENTS_PAGE_SIZE,
    ) -> None:
        """Initialize the scanner."""
        if page_size <= 0:
            raise ValueError("Page size must be positive.")
        self.source = source
        self.date_range = date_range
        self.page_size = page_size

    def pages(self) -> Iterator[EventPage]:
        """Yield pages until the source returns an empty one.

        Each call starts a fresh scan from the newest event.
        """
        cursor: Optional[Cursor] = None
        while True:
            page = self.source.query(self.date_range, cursor, self.page_size)
            if not page.records:
                return
            yield page
            if page.next_cursor is None:
                return
            cursor = page.next_cursor

    def events(self) -> Iterator[dict[str, Any]]:
        """Yield every event record in page order."""
        for page in self.pages():
            yield from page.records
