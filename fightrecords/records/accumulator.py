"""Fold result entries into running fighter and gym aggregates."""

from __future__ import annotations

import bisect
import datetime
import math
from typing import Any, cast

from fightrecords.core.constants import SKILL_FIELDS

from .identifiers import compute_keywords, organization_slug, participant_key
from .models import (
    COUNTER_FIELDS,
    BoutType,
    FightResult,
    OrganizationRecord,
    ParticipantRecord,
    ProcessedEvent,
)

UNKNOWN_LOCATION = "Unknown"


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _weight_class(value: Any) -> int | float:
    """Coerce a weight class to a number; unusable values become 0."""
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(weight) or weight <= 0:
        return 0
    return int(weight) if weight.is_integer() else weight


def _skill_deltas(entry: dict[str, Any]) -> dict[str, int]:
    return {skill: _as_int(entry.get(skill)) for skill in SKILL_FIELDS}


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _zero_counts() -> dict[str, int]:
    counts = {field: 0 for field in COUNTER_FIELDS}
    counts["fights"] = 0
    return counts


class RecordAccumulator:
    """In-memory rollup of one run.

    ``participants`` is keyed by fighter key and ``organizations`` by gym slug.
    Either side can be switched off when a run only rebuilds one of them.
    """

    def __init__(
        self,
        now: datetime.datetime | None = None,
        track_fighters: bool = True,
        track_gyms: bool = True,
    ) -> None:
        """Initialize an empty accumulator."""
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)
        self.last_updated = now.isoformat()
        self.track_fighters = track_fighters
        self.track_gyms = track_gyms

        self.participants: dict[str, dict[str, Any]] = {}
        self.organizations: dict[str, dict[str, Any]] = {}
        self.processed_events: list[ProcessedEvent] = []
        self.skipped_gyms: set[str] = set()
        self.missing_identifier = 0
        self.unscored = 0
        self._rosters: dict[str, set[str]] = {}

    def add_event(self, event: dict[str, Any], entries: list[dict[str, Any]]) -> int:
        """Fold every entry of one event, in order. Returns how many counted."""
        if not entries:
            return 0
        self.processed_events.append(
            {
                "eventId": event.get("id", ""),
                "eventName": event.get("event_name") or "",
                "date": event.get("date") or "",
            }
        )
        return sum(1 for entry in entries if self.add(event, entry))

    def add(self, event: dict[str, Any], entry: dict[str, Any]) -> bool:
        """Fold a single result entry. Returns False if the entry was skipped."""
        key = participant_key(entry)
        if key is None:
            self.missing_identifier += 1
            return False

        result = FightResult.parse(entry.get("result"))
        bout_type = BoutType.parse(entry.get("bout_type"))
        counter = bout_type.counter_for(result) if result is not None else None
        if result is None or counter is None:
            self.unscored += 1
            return False

        skills = _skill_deltas(entry)
        weight = _weight_class(entry.get("weightclass"))
        fight: dict[str, Any] = {
            "eventId": event.get("id", ""),
            "eventName": event.get("event_name") or "",
            "date": event.get("date") or "",
            "result": result.value,
            "weightclass": weight,
            "opponent_id": _text(entry.get("opponent_id")),
            "bout_type": bout_type.value,
            **skills,
        }

        if self.track_fighters:
            self._fold_participant(key, entry, counter, skills, weight, fight)
        if self.track_gyms:
            self._fold_organization(key, event, entry, counter, skills, fight)
        return True

    def _fold_participant(
        self,
        key: str,
        entry: dict[str, Any],
        counter: str,
        skills: dict[str, int],
        weight: int | float,
        fight: dict[str, Any],
    ) -> None:
        record = self.participants.get(key)
        if record is None:
            record = self._new_participant(key, entry)
            self.participants[key] = record

        email = _text(entry.get("email")).lower()
        if email:
            record["email"] = email
        for field in ("gender", "dob"):
            if not record.get(field) and _text(entry.get(field)):
                record[field] = _text(entry.get(field))
        if not record.get("age") and _as_int(entry.get("age")) > 0:
            record["age"] = _as_int(entry.get("age"))

        record[counter] += 1
        for skill, delta in skills.items():
            record[skill] += delta
        record["fights"].append(dict(fight))

        weightclasses = record["weightclasses"]
        if weight > 0 and weight not in weightclasses:
            bisect.insort(weightclasses, weight)

        keywords = set(record["searchKeywords"])
        keywords.update(compute_keywords(entry))
        record["searchKeywords"] = sorted(keywords)

    def _new_participant(self, key: str, entry: dict[str, Any]) -> dict[str, Any]:
        record: dict[str, Any] = {
            "pmt_id": key,
            "first": _text(entry.get("first")).upper(),
            "last": _text(entry.get("last")).upper(),
            "gym": _text(entry.get("gym")).upper(),
            "email": "",
            "gender": "",
            "dob": "",
            "age": 0,
            "weightclasses": [],
            "fights": [],
            "searchKeywords": [],
            "lastUpdated": self.last_updated,
        }
        record.update({field: 0 for field in COUNTER_FIELDS})
        record.update({skill: 0 for skill in SKILL_FIELDS})
        return record

    def _fold_organization(
        self,
        key: str,
        event: dict[str, Any],
        entry: dict[str, Any],
        counter: str,
        skills: dict[str, int],
        fight: dict[str, Any],
    ) -> None:
        raw_gym = _text(entry.get("gym"))
        if not raw_gym:
            return
        slug = organization_slug(raw_gym)
        if slug is None:
            self.skipped_gyms.add(raw_gym)
            return

        record = self.organizations.get(slug)
        if record is None:
            record = self._new_organization(slug, raw_gym)
            self.organizations[slug] = record
            self._rosters[slug] = set()

        first = _text(entry.get("first")).upper()
        last = _text(entry.get("last")).upper()
        roster = self._rosters[slug]
        if key not in roster:
            roster.add(key)
            record["fighters"].append(
                {
                    "pmt_id": key,
                    "first": first,
                    "last": last,
                    "email": _text(entry.get("email")).lower(),
                }
            )
            record["total_fighters"] = len(roster)

        record[counter] += 1
        for skill, delta in skills.items():
            record[f"total_{skill}"] += delta
        record["fights"].append(
            {**fight, "fighter_id": key, "fighter_name": f"{first} {last}".strip()}
        )

        year = (event.get("date") or "")[:4]
        if year:
            self._bump(record["yearly_stats"].setdefault(year, _zero_counts()), counter)
        city = _text(event.get("city")) or UNKNOWN_LOCATION
        state = _text(event.get("state")) or UNKNOWN_LOCATION
        location = record["location_stats"].setdefault(f"{city}, {state}", _zero_counts())
        self._bump(location, counter)

    @staticmethod
    def _bump(counts: dict[str, int], counter: str) -> None:
        counts[counter] += 1
        counts["fights"] += 1

    def _new_organization(self, slug: str, raw_gym: str) -> dict[str, Any]:
        record: dict[str, Any] = {
            "gym_id": slug,
            "gym_name": raw_gym.upper(),
            "total_fighters": 0,
            "fighters": [],
            "fights": [],
            "yearly_stats": {},
            "location_stats": {},
            "lastUpdated": self.last_updated,
        }
        record.update({field: 0 for field in COUNTER_FIELDS})
        record.update({f"total_{skill}": 0 for skill in SKILL_FIELDS})
        return record

    def participant_documents(self) -> dict[str, ParticipantRecord]:
        """Documents to store per fighter key."""
        return cast("dict[str, ParticipantRecord]", dict(self.participants))

    def organization_documents(self) -> dict[str, OrganizationRecord]:
        """Documents to store per gym slug."""
        return cast("dict[str, OrganizationRecord]", dict(self.organizations))
