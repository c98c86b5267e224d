"""Data models for the records blueprint."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict

from fightrecords.core.constants import BOUT_TYPE_REGULAR, BOUT_TYPE_TOURNAMENT


class FightResult(Enum):
    """Outcome of one fight from the fighter's point of view."""

    WIN = "W"
    LOSS = "L"
    NO_CONTEST = "NC"
    DISQUALIFICATION = "DQ"

    @classmethod
    def parse(cls, raw: Any) -> FightResult | None:
        """Map a raw result string to a FightResult, or None if not countable."""
        if not isinstance(raw, str):
            return None
        return _RESULT_ALIASES.get(raw.strip().upper())


_RESULT_ALIASES = {
    "W": FightResult.WIN,
    "WIN": FightResult.WIN,
    "L": FightResult.LOSS,
    "LOSS": FightResult.LOSS,
    "NC": FightResult.NO_CONTEST,
    "NO CONTEST": FightResult.NO_CONTEST,
    "DQ": FightResult.DISQUALIFICATION,
    "DISQUALIFICATION": FightResult.DISQUALIFICATION,
}

# Counter field incremented for each result of a regular bout.
REGULAR_COUNTERS = {
    FightResult.WIN: "wins",
    FightResult.LOSS: "losses",
    FightResult.NO_CONTEST: "nc",
    FightResult.DISQUALIFICATION: "dq",
}

# Tournament bouts only track wins and losses.
TOURNAMENT_COUNTERS = {
    FightResult.WIN: "tournament_wins",
    FightResult.LOSS: "tournament_losses",
}

COUNTER_FIELDS = (
    "wins",
    "losses",
    "nc",
    "dq",
    "tournament_wins",
    "tournament_losses",
)


class BoutType(Enum):
    """Whether a fight was a regular bout or part of a tournament."""

    REGULAR = BOUT_TYPE_REGULAR
    TOURNAMENT = BOUT_TYPE_TOURNAMENT

    @classmethod
    def parse(cls, raw: Any) -> BoutType:
        """Anything not explicitly a tournament bout counts as regular."""
        if isinstance(raw, str) and raw.strip().lower() == BOUT_TYPE_TOURNAMENT:
            return cls.TOURNAMENT
        return cls.REGULAR

    def counter_for(self, result: FightResult) -> str | None:
        """Return the counter field this result increments, if any."""
        if self is BoutType.TOURNAMENT:
            return TOURNAMENT_COUNTERS.get(result)
        return REGULAR_COUNTERS[result]


class FightEntry(TypedDict, total=False):
    """A single fight appended to a fighter or gym record."""

    eventId: str
    eventName: str
    date: str
    result: str
    weightclass: int | float
    opponent_id: str
    bout_type: str
    fighter_id: str
    fighter_name: str


class RosterEntry(TypedDict):
    """A fighter listed on a gym record."""

    pmt_id: str
    first: str
    last: str
    email: str


class ParticipantRecord(TypedDict, total=False):
    """A fighter's rollup document."""

    pmt_id: str
    first: str
    last: str
    gym: str
    email: str
    gender: str
    dob: str
    age: int
    weightclasses: list[int | float]
    wins: int
    losses: int
    nc: int
    dq: int
    tournament_wins: int
    tournament_losses: int
    fights: list[FightEntry]
    searchKeywords: list[str]
    lastUpdated: str


class OrganizationRecord(TypedDict, total=False):
    """A gym's rollup document."""

    gym_id: str
    gym_name: str
    wins: int
    losses: int
    nc: int
    dq: int
    tournament_wins: int
    tournament_losses: int
    total_fighters: int
    fighters: list[RosterEntry]
    fights: list[FightEntry]
    yearly_stats: dict[str, dict[str, int]]
    location_stats: dict[str, dict[str, int]]
    lastUpdated: str


class ProcessedEvent(TypedDict):
    """An event that contributed entries to a run."""

    eventId: str
    eventName: str
    date: str
