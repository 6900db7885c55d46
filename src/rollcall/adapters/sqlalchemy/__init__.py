"""SQLAlchemy adapter package for participation records."""

from __future__ import annotations

from .mappings import (
    mapper_registry,
    participation_audit_table,
    participation_record_table,
    start_mappers,
)
from .repositories import (
    SqlAlchemyAuditRepository,
    SqlAlchemyParticipationRecordRepository,
)
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAuditRepository",
    "SqlAlchemyParticipationRecordRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "StartupError",
    "mapper_registry",
    "participation_audit_table",
    "participation_record_table",
    "shutdown",
    "start_mappers",
    "startup",
]
