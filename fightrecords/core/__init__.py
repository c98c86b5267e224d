"""Core module for the fightrecords application."""

from .types import RunSummary

__all__ = ["RunSummary"]
