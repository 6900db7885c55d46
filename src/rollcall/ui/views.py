"""JSON view models for CLI output."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from rollcall.domain.model import (  # noqa: TC001
    CanonicalStatus,
    ConflictType,
    ResolutionStrategy,
    SignalSource,
    SignalType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rollcall.domain.model import (
        AuditEntry,
        Conflict,
        ParticipationRecord,
        Signal,
        StatusBreakdown,
    )
    from rollcall.domain.reconciliation import (
        BatchResult,
        EventStats,
        ReconciliationSummary,
        StatusView,
    )


class ViewModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def render(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class SourceRefView(ViewModel):
    model: str | None = None
    id: str | None = None


class SignalView(ViewModel):
    source: SignalSource
    signal_type: SignalType = Field(alias="signalType")
    trust_score: int = Field(alias="trustScore")
    timestamp: datetime
    recorded_by: str | None = Field(default=None, alias="recordedBy")
    source_ref: SourceRefView = Field(alias="sourceRef")
    metadata: dict[str, Any] = Field(default_factory=dict[str, Any])
    is_active: bool = Field(default=True, alias="isActive")

    @classmethod
    def from_signal(cls, signal: Signal) -> SignalView:
        return cls(
            source=signal.source,
            signal_type=signal.signal_type,
            trust_score=signal.trust_score,
            timestamp=signal.timestamp,
            recorded_by=signal.recorded_by,
            source_ref=SourceRefView(
                model=signal.source_ref.model.value if signal.source_ref.model else None,
                id=signal.source_ref.id,
            ),
            metadata=dict(signal.metadata),
            is_active=signal.is_active,
        )


class ConflictView(ViewModel):
    type: ConflictType
    description: str
    detected_at: datetime = Field(alias="detectedAt")

    @classmethod
    def from_conflict(cls, conflict: Conflict) -> ConflictView:
        return cls(
            type=conflict.conflict_type,
            description=conflict.description,
            detected_at=conflict.detected_at,
        )


class StatusBreakdownView(ViewModel):
    is_registered: bool = Field(alias="isRegistered")
    has_attendance: bool = Field(alias="hasAttendance")
    has_certificate: bool = Field(alias="hasCertificate")
    is_revoked: bool = Field(alias="isRevoked")

    @classmethod
    def from_breakdown(cls, breakdown: StatusBreakdown) -> StatusBreakdownView:
        return cls(
            is_registered=breakdown.is_registered,
            has_attendance=breakdown.has_attendance,
            has_certificate=breakdown.has_certificate,
            is_revoked=breakdown.is_revoked,
        )


class SummaryView(ViewModel):
    canonical_status: CanonicalStatus = Field(alias="canonicalStatus")
    confidence_score: int = Field(alias="confidenceScore")
    conflict_count: int = Field(alias="conflictCount")
    signal_count: int = Field(alias="signalCount")
    requires_manual_review: bool = Field(alias="requiresManualReview")
    reconciliation_version: int = Field(alias="reconciliationVersion")

    @classmethod
    def from_summary(cls, summary: ReconciliationSummary) -> SummaryView:
        return cls(
            canonical_status=summary.canonical_status,
            confidence_score=summary.confidence_score,
            conflict_count=summary.conflict_count,
            signal_count=summary.signal_count,
            requires_manual_review=summary.requires_manual_review,
            reconciliation_version=summary.reconciliation_version,
        )


class StatusViewModel(ViewModel):
    email: str
    event_id: str = Field(alias="eventId")
    canonical_status: CanonicalStatus = Field(alias="canonicalStatus")
    confidence_score: int = Field(alias="confidenceScore")
    has_conflicts: bool = Field(alias="hasConflicts")
    requires_manual_review: bool = Field(alias="requiresManualReview")
    is_suspicious: bool = Field(alias="isSuspicious")
    is_verified: bool = Field(alias="isVerified")
    last_reconciled_at: datetime | None = Field(alias="lastReconciledAt")
    status_breakdown: StatusBreakdownView = Field(alias="statusBreakdown")
    is_overridden: bool = Field(alias="isOverridden")

    @classmethod
    def from_view(cls, view: StatusView) -> StatusViewModel:
        return cls(
            email=view.email,
            event_id=view.event_id,
            canonical_status=view.canonical_status,
            confidence_score=view.confidence_score,
            has_conflicts=view.has_conflicts,
            requires_manual_review=view.requires_manual_review,
            is_suspicious=view.is_suspicious,
            is_verified=view.is_verified,
            last_reconciled_at=view.last_reconciled_at,
            status_breakdown=StatusBreakdownView.from_breakdown(view.status_breakdown),
            is_overridden=view.is_overridden,
        )


class RecordView(ViewModel):
    email: str
    event_id: str = Field(alias="eventId")
    subject_id: str | None = Field(alias="subjectId")
    canonical_status: CanonicalStatus = Field(alias="canonicalStatus")
    confidence_score: int = Field(alias="confidenceScore")
    reconciliation_version: int = Field(alias="reconciliationVersion")
    resolution_strategy: ResolutionStrategy = Field(alias="resolutionStrategy")
    last_reconciled_at: datetime | None = Field(alias="lastReconciledAt")
    notes: str
    has_conflicts: bool = Field(alias="hasConflicts")
    requires_manual_review: bool = Field(alias="requiresManualReview")
    is_suspicious: bool = Field(alias="isSuspicious")
    is_verified: bool = Field(alias="isVerified")
    is_overridden: bool = Field(alias="isOverridden")
    overridden_by: str | None = Field(alias="overriddenBy")
    override_reason: str = Field(alias="overrideReason")
    previous_status: CanonicalStatus | None = Field(alias="previousStatus")
    conflicts: list[ConflictView]
    signals: list[SignalView]

    @classmethod
    def from_record(cls, record: ParticipationRecord) -> RecordView:
        info = record.reconciliation
        override = record.manual_override
        return cls(
            email=record.email,
            event_id=record.event_id,
            subject_id=record.subject_id,
            canonical_status=record.canonical_status,
            confidence_score=info.confidence_score,
            reconciliation_version=info.reconciliation_version,
            resolution_strategy=info.resolution_strategy,
            last_reconciled_at=info.last_reconciled_at,
            notes=info.notes,
            has_conflicts=record.flags.has_conflicts,
            requires_manual_review=record.flags.requires_manual_review,
            is_suspicious=record.flags.is_suspicious,
            is_verified=record.flags.is_verified,
            is_overridden=override.is_overridden,
            overridden_by=override.overridden_by,
            override_reason=override.override_reason,
            previous_status=override.previous_status,
            conflicts=[ConflictView.from_conflict(conflict) for conflict in info.conflicts],
            signals=[SignalView.from_signal(signal) for signal in record.signals],
        )


class RecordListView(ViewModel):
    event_id: str | None = Field(alias="eventId")
    count: int
    records: list[RecordView]

    @classmethod
    def from_records(
        cls,
        records: Iterable[ParticipationRecord],
        *,
        event_id: str | None,
    ) -> RecordListView:
        views = [RecordView.from_record(record) for record in records]
        return cls(event_id=event_id, count=len(views), records=views)


class BatchResultView(ViewModel):
    event_id: str = Field(alias="eventId")
    total: int
    reconciled: int
    failed: int
    conflicts: int
    requires_review: int = Field(alias="requiresReview")
    failures: list[str]

    @classmethod
    def from_result(cls, result: BatchResult) -> BatchResultView:
        return cls(
            event_id=result.event_id,
            total=result.total,
            reconciled=result.reconciled,
            failed=result.failed,
            conflicts=result.conflicts,
            requires_review=result.requires_review,
            failures=list(result.failures),
        )


class EventStatsView(ViewModel):
    event_id: str = Field(alias="eventId")
    by_status: dict[CanonicalStatus, int] = Field(alias="byStatus")
    total: int
    conflicts_count: int = Field(alias="conflictsCount")
    requires_review_count: int = Field(alias="requiresReviewCount")
    suspicious_count: int = Field(alias="suspiciousCount")
    verified_count: int = Field(alias="verifiedCount")

    @classmethod
    def from_stats(cls, stats: EventStats) -> EventStatsView:
        return cls(
            event_id=stats.event_id,
            by_status=dict(stats.by_status),
            total=stats.total,
            conflicts_count=stats.conflicts,
            requires_review_count=stats.requires_review,
            suspicious_count=stats.suspicious,
            verified_count=stats.verified,
        )


class AuditEntryView(ViewModel):
    version: int
    strategy: ResolutionStrategy
    status: CanonicalStatus
    previous_status: CanonicalStatus | None = Field(alias="previousStatus")
    confidence_score: int = Field(alias="confidenceScore")
    actor: str | None
    reason: str
    signal_count: int = Field(alias="signalCount")
    recorded_at: datetime = Field(alias="recordedAt")

    @classmethod
    def from_entry(cls, entry: AuditEntry) -> AuditEntryView:
        return cls(
            version=entry.version,
            strategy=entry.strategy,
            status=entry.status,
            previous_status=entry.previous_status,
            confidence_score=entry.confidence_score,
            actor=entry.actor,
            reason=entry.reason,
            signal_count=len(entry.signals),
            recorded_at=entry.recorded_at,
        )


class HistoryView(ViewModel):
    email: str
    event_id: str = Field(alias="eventId")
    entries: list[AuditEntryView]

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[AuditEntry],
        *,
        email: str,
        event_id: str,
    ) -> HistoryView:
        return cls(
            email=email,
            event_id=event_id,
            entries=[AuditEntryView.from_entry(entry) for entry in entries],
        )
