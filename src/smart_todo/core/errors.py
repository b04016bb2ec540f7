# src/smart_todo/core/errors.py

"""
Error taxonomy.

None of these are fatal to the process. The worst outcome of any of them is
lost durability (PersistenceError) or stale derived data (ExternalDataError);
in-memory invariants are never left half-applied.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base class for all smart_todo errors."""


class ValidationError(TodoError, ValueError):
    """Rejected input (empty text, unknown priority, malformed date key, ...)."""


class NotFoundError(TodoError, LookupError):
    """A date or task id that the store does not know (usually a stale UI reference)."""


class PersistenceError(TodoError):
    """Storage unavailable, quota exceeded or blob could not be (de)serialized."""


class ExternalDataError(TodoError):
    """The external data source (weather) failed to produce a record."""
