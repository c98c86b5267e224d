"""Core data types for the fightrecords application."""

from typing import List, TypedDict  # noqa: UP035


class _RunSummaryBase(TypedDict):
    success: bool
    totalRecords: int
    message: str


class RunSummary(_RunSummaryBase, total=False):
    """Outcome of one records calculation run."""

    gymRecords: int
    eventsProcessed: int
    skippedGyms: List[str]  # noqa: UP006
    messages: List[str]  # noqa: UP006
