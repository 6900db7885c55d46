"""Error types raised by the reconciliation subsystem."""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for reconciliation failures."""


class SourceReadError(ReconciliationError):
    """A signal source could not be read."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class SourceTimeoutError(SourceReadError):
    """A signal source did not answer within its deadline."""


class ReconciliationFailedError(ReconciliationError):
    """One (email, event) pass failed; the stored record was left untouched.

    The underlying cause is chained as ``__cause__``.
    """

    def __init__(self, email: str, event_id: str, message: str) -> None:
        super().__init__(f"Reconciliation failed for {email} @ {event_id}: {message}")
        self.email = email
        self.event_id = event_id


class RecordNotFoundError(ReconciliationError, LookupError):
    """No participation record exists for the requested pair."""

    def __init__(self, email: str, event_id: str) -> None:
        super().__init__(f"Participation record not found for {email} @ {event_id}")
        self.email = email
        self.event_id = event_id


class OverrideValidationError(ReconciliationError, ValueError):
    """An override request was rejected before any state changed."""


class PermissionDeniedError(ReconciliationError, PermissionError):
    """The actor is not allowed to perform the requested operation."""


class ConcurrentUpdateError(ReconciliationError):
    """The record changed underneath the current write."""
