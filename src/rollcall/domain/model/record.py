"""The participation record aggregate and its value groups.

Nested groups are immutable; the aggregate replaces a whole group when any field
of it changes. This keeps the persisted columns in step with the in-memory state
(the SQLAlchemy adapter maps each group as a composite).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import Entity, utcnow
from .enums import CanonicalStatus, ResolutionStrategy
from .signals import active_signals

if TYPE_CHECKING:
    from datetime import datetime

    from .signals import Conflict, Signal


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class ReconciliationInfo:
    last_reconciled_at: datetime | None = None
    reconciliation_version: int = 0
    confidence_score: int = 0
    conflicts: tuple[Conflict, ...] = ()
    resolution_strategy: ResolutionStrategy = ResolutionStrategy.TRUST_SCORE
    notes: str = ""

    def __composite_values__(
        self,
    ) -> tuple[datetime | None, int, int, tuple[Conflict, ...], ResolutionStrategy, str]:
        return (
            self.last_reconciled_at,
            self.reconciliation_version,
            self.confidence_score,
            self.conflicts,
            self.resolution_strategy,
            self.notes,
        )


@dataclass(frozen=True)
class Flags:
    """Derived booleans; never set directly by a client."""

    has_conflicts: bool = False
    requires_manual_review: bool = False
    is_suspicious: bool = False
    is_verified: bool = False

    def __composite_values__(self) -> tuple[bool, bool, bool, bool]:
        return (
            self.has_conflicts,
            self.requires_manual_review,
            self.is_suspicious,
            self.is_verified,
        )


@dataclass(frozen=True)
class StatusBreakdown:
    is_registered: bool = False
    has_attendance: bool = False
    has_certificate: bool = False
    is_revoked: bool = False

    def __composite_values__(self) -> tuple[bool, bool, bool, bool]:
        return (self.is_registered, self.has_attendance, self.has_certificate, self.is_revoked)


@dataclass(frozen=True)
class ManualOverride:
    is_overridden: bool = False
    overridden_by: str | None = None
    overridden_at: datetime | None = None
    override_reason: str = ""
    previous_status: CanonicalStatus | None = None

    def __composite_values__(
        self,
    ) -> tuple[bool, str | None, datetime | None, str, CanonicalStatus | None]:
        return (
            self.is_overridden,
            self.overridden_by,
            self.overridden_at,
            self.override_reason,
            self.previous_status,
        )


@dataclass(eq=False, kw_only=True)
class ParticipationRecord(Entity):
    """Reconciled, canonical participation state for one (email, event) pair."""

    email: str
    event_id: str
    subject_id: str | None = None
    signals: list[Signal] = field(default_factory=list["Signal"])
    canonical_status: CanonicalStatus = CanonicalStatus.REGISTERED_ONLY
    reconciliation: ReconciliationInfo = field(default_factory=ReconciliationInfo)
    flags: Flags = field(default_factory=Flags)
    status_breakdown: StatusBreakdown = field(default_factory=StatusBreakdown)
    manual_override: ManualOverride = field(default_factory=ManualOverride)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.email = normalize_email(self.email)

    @property
    def key(self) -> tuple[str, str]:
        return (self.email, self.event_id)

    @property
    def version(self) -> int:
        return self.reconciliation.reconciliation_version

    @property
    def confidence_score(self) -> int:
        return self.reconciliation.confidence_score

    @property
    def conflicts(self) -> tuple[Conflict, ...]:
        return self.reconciliation.conflicts

    @property
    def active_signals(self) -> tuple[Signal, ...]:
        return active_signals(self.signals)

    @property
    def is_overridden(self) -> bool:
        return self.manual_override.is_overridden


@dataclass(eq=False, kw_only=True)
class AuditEntry(Entity):
    """Append-only history row written alongside every record update."""

    email: str
    event_id: str
    version: int
    strategy: ResolutionStrategy
    status: CanonicalStatus
    previous_status: CanonicalStatus | None = None
    confidence_score: int = 0
    actor: str | None = None
    reason: str = ""
    signals: list[Signal] = field(default_factory=list["Signal"])
    recorded_at: datetime = field(default_factory=utcnow)
