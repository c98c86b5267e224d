"""Stable keys for fighters and gyms derived from free-text result data."""

from __future__ import annotations

import datetime
import re
from typing import Any

from fightrecords.core.constants import FIRESTORE_MAX_DOC_ID_LENGTH

_DATE_SEPARATORS = re.compile(r"[-/.]")
_NON_ALNUM_UPPER = re.compile(r"[^A-Z0-9]")
_COMPACT_DOB = re.compile(r"^\d{8}$")

_GYM_SPECIAL_CHARS = re.compile(r"[&/\\#,+()$~%.'\":*?<>{}]")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_UNDERSCORES = re.compile(r"_+")
_NON_SLUG_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_HAS_ALNUM = re.compile(r"[A-Z0-9]")

MONTHS_IN_YEAR = 12


def split_dob(dob: Any) -> tuple[str, str, str] | None:
    """Split a free-text birth date into zero-padded (day, month, year).

    Accepts ``YYYY-MM-DD``, compact ``YYYYMMDD``, ``MM/DD/YYYY`` and
    ``DD/MM/YYYY``. For the slash forms the order is inferred: day-first when
    the first group is greater than 12, month-first otherwise. The year must
    have four digits.
    """
    if not isinstance(dob, str):
        return None
    dob = dob.strip()
    if _COMPACT_DOB.match(dob):
        return dob[6:8], dob[4:6], dob[:4]

    parts = [p.strip() for p in _DATE_SEPARATORS.split(dob)]
    if len(parts) != 3 or not all(p.isdigit() for p in parts):  # noqa: PLR2004
        return None

    if len(parts[0]) == 4:  # noqa: PLR2004
        year, month, day = parts
    elif int(parts[0]) > MONTHS_IN_YEAR:
        day, month, year = parts
    else:
        month, day, year = parts
    if len(year) != 4:  # noqa: PLR2004
        return None
    return day.zfill(2), month.zfill(2), year


def parse_dob(dob: Any) -> datetime.date | None:
    """Parse a free-text birth date into a date, or None if it is not a real date."""
    parts = split_dob(dob)
    if parts is None:
        return None
    day, month, year = parts
    try:
        return datetime.date(int(year), int(month), int(day))
    except ValueError:
        return None


def calculate_age(dob: Any, today: datetime.date | None = None) -> int:
    """Return the age in whole years on ``today``, or 0 when dob is unusable."""
    born = parse_dob(dob)
    if born is None:
        return 0
    if today is None:
        today = datetime.date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return max(age, 0)


def _alnum_upper(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return _NON_ALNUM_UPPER.sub("", value.upper())


def participant_key(entry: dict[str, Any]) -> str | None:
    """Return the stable key for the fighter in a result entry.

    The external ``pmt_id`` wins when present. Otherwise a key is synthesized from
    the upper-cased alphanumeric first and last names followed by the birth date
    as ``DDMMYYYY``, so every accepted spelling of one birth date gives the same
    key. Returns None when neither route yields a key, including when the birth
    date is not a real calendar date.
    """
    external = entry.get("pmt_id")
    if isinstance(external, int) and not isinstance(external, bool):
        external = str(external)
    if isinstance(external, str) and external.strip():
        return external.strip()

    name = _alnum_upper(entry.get("first")) + _alnum_upper(entry.get("last"))
    if not name:
        return None

    born = parse_dob(entry.get("dob"))
    if born is None:
        return None
    return f"{name}{born.day:02}{born.month:02}{born.year:04}"


def organization_slug(gym_name: Any) -> str | None:
    """Normalize a gym name into a document-safe id, or None to reject it.

    Special characters and whitespace fold to underscores, runs of underscores
    collapse, anything else outside ``[A-Za-z0-9_]`` is dropped and the result is
    upper-cased. Empty, over-long and letter-less results are rejected so that
    unrelated names never share a bucket.
    """
    if not isinstance(gym_name, str):
        return None

    slug = _GYM_SPECIAL_CHARS.sub("_", gym_name.strip())
    slug = _WHITESPACE.sub("_", slug)
    slug = _REPEATED_UNDERSCORES.sub("_", slug)
    slug = _NON_SLUG_CHARS.sub("", slug).upper()

    if not slug or len(slug) > FIRESTORE_MAX_DOC_ID_LENGTH:
        return None
    if not _HAS_ALNUM.search(slug):
        return None
    return slug


def compute_keywords(entry: dict[str, Any]) -> list[str]:
    """Build lower-cased search keywords from a fighter's name, gym and gender."""
    keywords: set[str] = set()
    for field in ("first", "last", "gym", "gender"):
        value = entry.get(field)
        if not isinstance(value, str) or not value.strip():
            continue
        lower = value.strip().lower()
        keywords.add(lower)
        keywords.update(word for word in lower.split() if word)
    return sorted(keywords)
