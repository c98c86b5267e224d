"""Positional lookups over bracket slots and an event's bouts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Optional

from fightrecords.core.constants import BOUT_NUMBER_UNKNOWN

from .models import BracketRole, Bout, Slot

# Slot pairs that make up the opening round of each supported bracket size.
OPENING_ROUND_PAIRS = {
    4: ((0, 1), (2, 3)),
    8: ((0, 1), (2, 3), (4, 5), (6, 7)),
}

_BRACKET_ROLES = {role.value for role in BracketRole}


def slot_fighter_id(slot: Any) -> Optional[str]:
    """Return the fighter id held by a slot, or None if it is unassigned."""
    if isinstance(slot, dict):
        slot = slot.get("fighter_id")
    if slot is None:
        return None
    fighter_id = str(slot).strip()
    return fighter_id or None


def _slot_at(slots: Sequence[Slot], position: int) -> Optional[str]:
    if position < 0 or position >= len(slots):
        return None
    return slot_fighter_id(slots[position])


def _corner_ids(bout: Bout) -> tuple[Optional[str], Optional[str]]:
    red = bout.get("red")
    blue = bout.get("blue")
    if not red or not blue:
        return None, None
    return slot_fighter_id(red), slot_fighter_id(blue)


def find_bout(
    bouts: Iterable[Bout], fighter_a: str, fighter_b: str
) -> Optional[Bout]:
    """First bout pairing the two fighters, in either corner order."""
    wanted = {fighter_a, fighter_b}
    for bout in bouts:
        red_id, blue_id = _corner_ids(bout)
        if red_id is None or blue_id is None:
            continue
        if {red_id, blue_id} == wanted and red_id != blue_id:
            return bout
    return None


def resolve_bout_number(
    slots: Sequence[Slot],
    bouts: Iterable[Bout],
    position_a: int,
    position_b: int,
) -> str:
    """Return the number of the bout pairing two slot positions, or ``"TBD"``.

    An unassigned or out-of-range slot short-circuits to ``"TBD"`` without
    scanning the bouts.
    """
    if not slots or bouts is None:
        return BOUT_NUMBER_UNKNOWN
    fighter_a = _slot_at(slots, position_a)
    fighter_b = _slot_at(slots, position_b)
    if fighter_a is None or fighter_b is None:
        return BOUT_NUMBER_UNKNOWN

    bout = find_bout(bouts, fighter_a, fighter_b)
    if bout is None or not bout.get("boutNum"):
        return BOUT_NUMBER_UNKNOWN
    return str(bout["boutNum"])


def find_bracket_bout_number(
    slots: Sequence[Slot], bouts: Iterable[Bout], position: int
) -> Optional[str]:
    """Bout number of the n-th opening-round bout (1-based), or None.

    Only 4-entrant (two semifinals) and 8-entrant (four quarterfinals)
    brackets have an opening round to look up.
    """
    pairs = OPENING_ROUND_PAIRS.get(len(slots))
    if pairs is None or not 1 <= position <= len(pairs):
        return None
    position_a, position_b = pairs[position - 1]
    bout_num = resolve_bout_number(slots, bouts, position_a, position_b)
    return None if bout_num == BOUT_NUMBER_UNKNOWN else bout_num


def final_red_corner_bout(slots: Sequence[Slot], bouts: Iterable[Bout]) -> str:
    """Bout whose winner takes the red corner of the final."""
    return resolve_bout_number(slots, bouts, 0, 1)


def final_blue_corner_bout(
    slots: Sequence[Slot], bouts: Iterable[Bout]
) -> Optional[str]:
    """Bout whose winner takes the blue corner of the final.

    Returns None for a 3-entrant bracket: the bye entrant goes straight
    through, so there is no bout to look up.
    """
    if len(slots) == 3:
        return None
    return resolve_bout_number(slots, bouts, 2, 3)


def bye_entrant(slots: Sequence[Slot]) -> Optional[str]:
    """Fighter id of the entrant with a bye, if the bracket has one."""
    if len(slots) != 3:
        return None
    return slot_fighter_id(slots[2])


def semifinal_winner_text(
    slots: Sequence[Slot], bouts: Iterable[Bout], semifinal: int
) -> str:
    """Placeholder label for a final corner: ``"Bout 3"`` or ``"SF1"``."""
    bout_num = find_bracket_bout_number(slots, bouts, semifinal)
    if not bout_num:
        return f"SF{semifinal}"
    return f"Bout {bout_num}"


def is_bout_finished(bout: Bout) -> bool:
    """A bout is finished once both corners are filled and either has a result."""
    red = bout.get("red")
    blue = bout.get("blue")
    if not red or not blue:
        return False
    return bool(red.get("result") or blue.get("result"))


def is_bracket_bout(bout: Bout) -> bool:
    return bout.get("bracket_bout_type") in _BRACKET_ROLES


def has_final_bout(bouts: Iterable[Bout]) -> bool:
    return any(
        bout.get("bracket_bout_type") == BracketRole.FINAL.value for bout in bouts
    )
