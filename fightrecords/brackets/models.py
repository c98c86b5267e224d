"""Data models for the brackets blueprint."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict, Union


class BracketRole(Enum):
    """Where a bout sits in an elimination bracket."""

    SEMIFINAL = "semifinal"
    FINAL = "final"
    QUARTERFINAL = "quarterfinal"


class Corner(TypedDict, total=False):
    """A fighter assigned to the red or blue corner of a bout."""

    fighter_id: str
    first: str
    last: str
    gym: str
    result: str


class Bout(TypedDict, total=False):
    """A bout record of an event."""

    boutNum: Union[int, str]
    red: Corner | None
    blue: Corner | None
    weightclass: Any
    bracket_bout_type: str
    bracket_bout_fighters: list[Any]


# A bracket slot holds a fighter id, a corner-shaped dict, or nothing yet.
Slot = Union[str, Corner, None]
