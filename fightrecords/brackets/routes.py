from __future__ import annotations

from typing import Any

from flask import jsonify, request

from fightrecords.errors import ValidationError

from . import bp
from .utils import bye_entrant, resolve_bout_number, semifinal_winner_text


def _position(payload: dict[str, Any], field: str) -> int:
    value = payload.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer.")
    return value


@bp.route("/resolve", methods=["POST"])
def resolve() -> Any:
    """Look up the bout pairing two bracket slots."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Expected a JSON object.")

    slots = payload.get("slots")
    bouts = payload.get("bouts") or []
    if not isinstance(slots, list) or not isinstance(bouts, list):
        raise ValidationError("slots and bouts must be lists.")

    position_a = _position(payload, "positionA")
    position_b = _position(payload, "positionB")
    bouts = [bout for bout in bouts if isinstance(bout, dict)]

    response: dict[str, Any] = {
        "boutNumber": resolve_bout_number(slots, bouts, position_a, position_b),
        "bye": bye_entrant(slots),
    }
    if len(slots) >= 4:
        response["finalCorners"] = [
            semifinal_winner_text(slots, bouts, 1),
            semifinal_winner_text(slots, bouts, 2),
        ]
    return jsonify(response)
