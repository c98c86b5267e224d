"""Brackets blueprint for tournament bout lookups."""

from flask import Blueprint

bp = Blueprint("brackets", __name__, url_prefix="/brackets")

from . import routes  # noqa: E402, F401
