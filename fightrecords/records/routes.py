from __future__ import annotations

import json
import threading
from typing import Any

from firebase_admin import firestore
from flask import Response, current_app, jsonify, request, stream_with_context
from flask_wtf.csrf import generate_csrf

from fightrecords.core.constants import (
    RECORD_KIND_ALL,
    RECORD_KIND_FIGHTERS,
    RECORD_KIND_GYMS,
    RECORD_KINDS,
)
from fightrecords.errors import NotFoundError, RecordsPipelineError, ValidationError

from . import bp
from .progress import ProgressChannel
from .scanner import DateRange
from .services import RecordsService


def _check_label(label: str) -> None:
    try:
        DateRange.for_label(label)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _requested_kind() -> str:
    kind = request.args.get("kind", RECORD_KIND_ALL)
    if kind not in RECORD_KINDS:
        raise ValidationError(
            f"kind must be one of: {', '.join(RECORD_KINDS)}."
        )
    return kind


def _run_options() -> dict[str, Any]:
    return {
        "page_size": current_app.config["RECORDS_PAGE_SIZE"],
        "batch_limit": current_app.config["RECORDS_BATCH_LIMIT"],
    }


@bp.route("/<label>/calculate", methods=["POST"])
def calculate(label: str) -> Any:
    """Rebuild the rollups for a time window and return the run summary."""
    _check_label(label)
    kind = _requested_kind()
    db = firestore.client()
    try:
        summary = RecordsService.run(label, db=db, kind=kind, **_run_options())
    except Exception as e:
        raise RecordsPipelineError(f"Error calculating records: {e}") from e
    return jsonify(summary)


@bp.route("/<label>/calculate/stream", methods=["POST"])
def calculate_stream(label: str) -> Any:
    """Rebuild the rollups while streaming progress as NDJSON lines."""
    _check_label(label)
    kind = _requested_kind()
    options = _run_options()
    db = firestore.client()
    channel = ProgressChannel()
    outcome: dict[str, Any] = {}

    def work() -> None:
        try:
            outcome["summary"] = RecordsService.run(
                label, channel, db=db, kind=kind, **options
            )
        except Exception as e:
            outcome["error"] = str(e)
        finally:
            channel.close()

    worker = threading.Thread(target=work, daemon=True)
    worker.start()

    def generate() -> Any:
        try:
            for message in channel.iter_messages():
                yield json.dumps({"type": "progress", "message": message}) + "\n"
        finally:
            # Unblocks the worker when the client goes away mid-stream.
            channel.detach()
        worker.join()
        if "error" in outcome:
            current_app.logger.error(
                f"Records stream for {label} failed: {outcome['error']}"
            )
            yield json.dumps({"type": "error", "message": outcome["error"]}) + "\n"
        else:
            yield json.dumps({"type": "complete", **outcome["summary"]}) + "\n"

    return Response(stream_with_context(generate()), mimetype="application/x-ndjson")


@bp.route("/events/<string:event_id>/preview", methods=["GET"])
def preview_event(event_id: str) -> Any:
    """Aggregate one event without writing anything."""
    db = firestore.client()
    preview = RecordsService.preview_event(event_id, db=db)
    if preview is None:
        raise NotFoundError("Event not found.")
    return jsonify(preview)


@bp.route("/<label>/fighters/<string:fighter_id>", methods=["GET"])
def view_fighter(label: str, fighter_id: str) -> Any:
    """Return one stored fighter rollup."""
    _check_label(label)
    db = firestore.client()
    record = RecordsService.get_record(label, RECORD_KIND_FIGHTERS, fighter_id, db=db)
    if record is None:
        raise NotFoundError("Fighter record not found.")
    return jsonify(record)


@bp.route("/<label>/gyms/<string:gym_id>", methods=["GET"])
def view_gym(label: str, gym_id: str) -> Any:
    """Return one stored gym rollup."""
    _check_label(label)
    db = firestore.client()
    record = RecordsService.get_record(label, RECORD_KIND_GYMS, gym_id, db=db)
    if record is None:
        raise NotFoundError("Gym record not found.")
    return jsonify(record)


@bp.route("/csrf-token", methods=["GET"])
def csrf_token() -> Any:
    """Token to send as ``X-CSRFToken`` when triggering a run."""
    return jsonify({"csrfToken": generate_csrf()})
