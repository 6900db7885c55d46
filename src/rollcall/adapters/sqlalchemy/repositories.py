"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import case, func, or_, select

from rollcall.adapters.sqlalchemy.mappings import (
    participation_audit_table,
    participation_record_table,
)
from rollcall.domain.model import AuditEntry, CanonicalStatus, ParticipationRecord, normalize_email

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.orm import Session

    from rollcall.domain.ports.persistence import RecordFilters


class SqlAlchemyParticipationRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ParticipationRecord) -> None:
        self.session.add(entity)

    def get(self, email: str, event_id: str) -> ParticipationRecord | None:
        table = participation_record_table
        stmt = (
            select(ParticipationRecord)
            .where(table.c.email == normalize_email(email))
            .where(table.c.event_id == event_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_event(
        self,
        event_id: str,
        filters: RecordFilters | None = None,
    ) -> list[ParticipationRecord]:
        table = participation_record_table
        stmt = select(ParticipationRecord).where(table.c.event_id == event_id)
        if filters is not None:
            stmt = _apply_filters(stmt, filters)
        stmt = stmt.order_by(table.c.last_reconciled_at.desc(), table.c.email)
        return list(self.session.execute(stmt).scalars())

    def needing_review(
        self,
        event_id: str | None = None,
        *,
        confidence_below: int = 50,
    ) -> list[ParticipationRecord]:
        table = participation_record_table
        stmt = select(ParticipationRecord).where(
            or_(
                table.c.requires_manual_review.is_(True),
                table.c.has_conflicts.is_(True),
                table.c.confidence_score < confidence_below,
            )
        )
        if event_id is not None:
            stmt = stmt.where(table.c.event_id == event_id)
        stmt = stmt.order_by(table.c.last_reconciled_at.desc(), table.c.email)
        return list(self.session.execute(stmt).scalars())

    def count_by_status(self, event_id: str) -> dict[CanonicalStatus, int]:
        table = participation_record_table
        stmt = (
            select(table.c.canonical_status, func.count())
            .where(table.c.event_id == event_id)
            .group_by(table.c.canonical_status)
        )
        return {CanonicalStatus(status): count for status, count in self.session.execute(stmt)}

    def count_flagged(self, event_id: str) -> dict[str, int]:
        table = participation_record_table
        columns = {
            "conflicts": table.c.has_conflicts,
            "requires_review": table.c.requires_manual_review,
            "suspicious": table.c.is_suspicious,
            "verified": table.c.is_verified,
        }
        stmt = select(
            *(
                func.coalesce(func.sum(case((column.is_(True), 1), else_=0)), 0).label(name)
                for name, column in columns.items()
            )
        ).where(table.c.event_id == event_id)
        row = self.session.execute(stmt).one()
        return {name: int(row._mapping[name]) for name in columns}  # noqa: SLF001


def _apply_filters(
    stmt: Select[tuple[ParticipationRecord]],
    filters: RecordFilters,
) -> Select[tuple[ParticipationRecord]]:
    table = participation_record_table
    if filters.status is not None:
        stmt = stmt.where(table.c.canonical_status == filters.status)
    if filters.requires_review is not None:
        stmt = stmt.where(table.c.requires_manual_review.is_(filters.requires_review))
    if filters.suspicious is not None:
        stmt = stmt.where(table.c.is_suspicious.is_(filters.suspicious))
    if filters.verified is not None:
        stmt = stmt.where(table.c.is_verified.is_(filters.verified))
    return stmt


class SqlAlchemyAuditRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AuditEntry) -> None:
        self.session.add(entity)

    def history(self, email: str, event_id: str) -> list[AuditEntry]:
        table = participation_audit_table
        stmt = (
            select(AuditEntry)
            .where(table.c.email == normalize_email(email))
            .where(table.c.event_id == event_id)
            .order_by(table.c.recorded_at, table.c.version)
        )
        return list(self.session.execute(stmt).scalars())
