"""Ports for persisting domain aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rollcall.domain.model import AuditEntry, ParticipationRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rollcall.domain.model import CanonicalStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordFilters:
    """Optional filters for listing records; ``None`` means "don't filter"."""

    status: CanonicalStatus | None = None
    requires_review: bool | None = None
    suspicious: bool | None = None
    verified: bool | None = None


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ParticipationRecordRepository(Repository[ParticipationRecord], Protocol):
    """Persistence contract for participation records."""

    def get(self, email: str, event_id: str) -> ParticipationRecord | None: ...

    def list_for_event(
        self,
        event_id: str,
        filters: RecordFilters | None = None,
    ) -> Sequence[ParticipationRecord]: ...

    def needing_review(
        self,
        event_id: str | None = None,
        *,
        confidence_below: int = 50,
    ) -> Sequence[ParticipationRecord]: ...

    def count_by_status(self, event_id: str) -> dict[CanonicalStatus, int]: ...

    def count_flagged(self, event_id: str) -> dict[str, int]: ...


@runtime_checkable
class AuditRepository(Repository[AuditEntry], Protocol):
    """Persistence contract for the append-only reconciliation history."""

    def history(self, email: str, event_id: str) -> Sequence[AuditEntry]: ...
