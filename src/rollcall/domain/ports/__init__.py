"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    AuditRepository,
    ParticipationRecordRepository,
    RecordFilters,
    Repository,
)
from .sources import (
    AttendanceRecord,
    AttendanceSource,
    CertificateRecord,
    CertificateSource,
    RegistrationRecord,
    RegistrationSource,
    SignalSources,
)
from .unit_of_work import ReconciliationRepositories, ReconciliationUnitOfWork

__all__ = [
    "AttendanceRecord",
    "AttendanceSource",
    "AuditRepository",
    "CertificateRecord",
    "CertificateSource",
    "ParticipationRecordRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RecordFilters",
    "RegistrationRecord",
    "RegistrationSource",
    "Repository",
    "SignalSources",
]
