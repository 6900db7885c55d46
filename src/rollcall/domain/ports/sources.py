"""Ports for reading participation evidence from the external signal sources.

Each source answers "latest record for (subject, event)". ``None`` means the source
holds no record, which is absence of evidence rather than an error. Adapters raise
``SourceTimeoutError`` when a read exceeded its deadline and ``SourceReadError`` for
any other I/O failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

ABSENT_HINT = "ABSENT"
REVOKED_CERTIFICATE_STATUS = "REVOKED"


@dataclass(frozen=True, slots=True, kw_only=True)
class RegistrationRecord:
    subject_id: str
    email: str
    event_id: str
    valid: bool = True
    created_by: str | None = None
    created_at: datetime | None = None
    attendance_status_hint: str | None = None
    registration_status: str | None = None
    registration_type: str | None = None
    invalidated_at: datetime | None = None
    invalidated_by: str | None = None
    invalidation_reason: str | None = None

    @property
    def marked_absent(self) -> bool:
        return (self.attendance_status_hint or "").upper() == ABSENT_HINT


@dataclass(frozen=True, slots=True, kw_only=True)
class AttendanceRecord:
    record_id: str
    subject_id: str
    event_id: str
    valid: bool = True
    marked_by: str | None = None
    scanned_at: datetime | None = None
    status: str = "PRESENT"
    session_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CertificateRecord:
    record_id: str
    subject_id: str
    event_id: str
    certificate_id: str | None = None
    valid: bool = True
    status: str = "GENERATED"
    issued_by: str | None = None
    issued_at: datetime | None = None
    revoked_by: str | None = None
    revoked_at: datetime | None = None
    revocation_reason: str | None = None
    updated_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.status.upper() == REVOKED_CERTIFICATE_STATUS or not self.valid


@runtime_checkable
class RegistrationSource(Protocol):
    def get_registration(self, email: str, event_id: str) -> RegistrationRecord | None: ...

    def list_registrants(self, event_id: str) -> Sequence[str]: ...


@runtime_checkable
class AttendanceSource(Protocol):
    def get_attendance(self, subject_id: str, event_id: str) -> AttendanceRecord | None: ...


@runtime_checkable
class CertificateSource(Protocol):
    def get_certificate(self, subject_id: str, event_id: str) -> CertificateRecord | None: ...


@dataclass(slots=True)
class SignalSources:
    """The set of sources consulted for one reconciliation pass."""

    registrations: RegistrationSource
    attendance: AttendanceSource
    certificates: CertificateSource
