"""Exceptions raised by the cascade engine and its storage collaborator."""
from __future__ import annotations


class CascadeError(Exception):
    """Base class for forecast calculation failures."""


class ForecastInputError(CascadeError, ValueError):
    """Input rejected as a whole (negative volume, bad multiplier, duplicate key)."""


class ForecastPersistenceError(CascadeError):
    """Replacing the stored forecast rows failed; prior rows are untouched."""
