"""Transaction boundary for a reconciliation pass or an override."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from rollcall.domain.ports.persistence import (
        AuditRepository,
        ParticipationRecordRepository,
    )


@dataclass(frozen=True, slots=True)
class ReconciliationRepositories:
    records: ParticipationRecordRepository
    audit: AuditRepository


@runtime_checkable
class ReconciliationUnitOfWork(Protocol):
    """Record and audit writes inside one of these land together or not at all.

    Leaving the block with an exception rolls back. ``commit`` raises
    ``ConcurrentUpdateError`` when another writer bumped the record version first.
    """

    @property
    def repositories(self) -> ReconciliationRepositories: ...

    def __enter__(self) -> ReconciliationUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
