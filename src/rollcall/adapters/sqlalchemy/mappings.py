"""SQLAlchemy mapping metadata for the participation domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from types import MappingProxyType
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import composite, configure_mappers

from rollcall.domain.model import (
    AuditEntry,
    CanonicalStatus,
    Conflict,
    ConflictType,
    Flags,
    ManualOverride,
    ParticipationRecord,
    ReconciliationInfo,
    ResolutionStrategy,
    Signal,
    SignalSource,
    SignalType,
    SourceModel,
    SourceRef,
    StatusBreakdown,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _parse_datetime(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def signal_to_json(signal: Signal) -> dict[str, Any]:
    return {
        "source": signal.source.value,
        "signalType": signal.signal_type.value,
        "trustScore": signal.trust_score,
        "timestamp": _isoformat(signal.timestamp),
        "recordedBy": signal.recorded_by,
        "sourceRef": {
            "model": signal.source_ref.model.value if signal.source_ref.model else None,
            "id": signal.source_ref.id,
        },
        "metadata": dict(signal.metadata),
        "isActive": signal.is_active,
    }


def signal_from_json(payload: dict[str, Any]) -> Signal:
    ref = cast(dict[str, Any], payload.get("sourceRef") or {})
    model = ref.get("model")
    return Signal(
        source=SignalSource(payload["source"]),
        signal_type=SignalType(payload["signalType"]),
        trust_score=int(payload["trustScore"]),
        timestamp=_parse_datetime(payload.get("timestamp")) or datetime.now(tz=UTC),
        recorded_by=payload.get("recordedBy"),
        source_ref=SourceRef(SourceModel(model) if model else None, ref.get("id")),
        metadata=MappingProxyType(dict(payload.get("metadata") or {})),
        is_active=bool(payload.get("isActive", True)),
    )


class SignalListType(TypeDecorator[list[Signal]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[Signal] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([signal_to_json(signal) for signal in value], default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[Signal]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [signal_from_json(item) for item in items if isinstance(item, dict)]


class ConflictListType(TypeDecorator[tuple[Conflict, ...]]):
    impl = Text
    cache_ok = True

    def process_bind_param(
        self,
        value: tuple[Conflict, ...] | None,
        dialect: Dialect,
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = [
            {
                "type": conflict.conflict_type.value,
                "description": conflict.description,
                "detectedAt": _isoformat(conflict.detected_at),
            }
            for conflict in value
        ]
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[Conflict, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[dict[str, Any]], loaded)
        return tuple(
            Conflict(
                conflict_type=ConflictType(item["type"]),
                description=item.get("description", ""),
                detected_at=_parse_datetime(item.get("detectedAt")) or datetime.now(tz=UTC),
            )
            for item in items
        )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

CanonicalStatusType = Enum(CanonicalStatus, native_enum=False, length=32)
StrategyType = Enum(ResolutionStrategy, native_enum=False, length=32)

participation_record_table = Table(
    "participation_record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String(320), nullable=False),
    Column("event_id", String(64), nullable=False),
    Column("subject_id", String(64), nullable=True),
    Column("signals", SignalListType, nullable=False),
    Column("canonical_status", CanonicalStatusType, nullable=False),
    # reconciliation
    Column("last_reconciled_at", UTCDateTime, nullable=True),
    Column("reconciliation_version", Integer, nullable=False),
    Column("confidence_score", Integer, nullable=False),
    Column("conflicts", ConflictListType, nullable=False),
    Column("resolution_strategy", StrategyType, nullable=False),
    Column("notes", Text, nullable=False, default=""),
    # flags
    Column("has_conflicts", Boolean, nullable=False),
    Column("requires_manual_review", Boolean, nullable=False),
    Column("is_suspicious", Boolean, nullable=False),
    Column("is_verified", Boolean, nullable=False),
    # status breakdown
    Column("is_registered", Boolean, nullable=False),
    Column("has_attendance", Boolean, nullable=False),
    Column("has_certificate", Boolean, nullable=False),
    Column("is_revoked", Boolean, nullable=False),
    # manual override
    Column("is_overridden", Boolean, nullable=False),
    Column("overridden_by", String(64), nullable=True),
    Column("overridden_at", UTCDateTime, nullable=True),
    Column("override_reason", Text, nullable=False, default=""),
    Column("previous_status", CanonicalStatusType, nullable=True),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
    UniqueConstraint("email", "event_id"),
    Index("ix_participation_record_canonical_status", "canonical_status"),
    Index("ix_participation_record_requires_manual_review", "requires_manual_review"),
    Index("ix_participation_record_is_suspicious", "is_suspicious"),
    Index("ix_participation_record_event_id_canonical_status", "event_id", "canonical_status"),
)

participation_audit_table = Table(
    "participation_audit",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String(320), nullable=False),
    Column("event_id", String(64), nullable=False),
    Column("version", Integer, nullable=False),
    Column("strategy", StrategyType, nullable=False),
    Column("status", CanonicalStatusType, nullable=False),
    Column("previous_status", CanonicalStatusType, nullable=True),
    Column("confidence_score", Integer, nullable=False),
    Column("actor", String(64), nullable=True),
    Column("reason", Text, nullable=False, default=""),
    Column("signals", SignalListType, nullable=False),
    Column("recorded_at", UTCDateTime, nullable=False),
    Index("ix_participation_audit_email_event_id", "email", "event_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure imperative mappings between domain entities and tables."""

    log.info("Starting mappers")

    table = participation_record_table
    mapper_registry.map_imperatively(
        ParticipationRecord,
        table,
        properties={
            # the record exposes read-only properties under these column names
            "_confidence_score": table.c.confidence_score,
            "_conflicts": table.c.conflicts,
            "_is_overridden": table.c.is_overridden,
            "reconciliation": composite(
                ReconciliationInfo,
                table.c.last_reconciled_at,
                table.c.reconciliation_version,
                table.c.confidence_score,
                table.c.conflicts,
                table.c.resolution_strategy,
                table.c.notes,
            ),
            "flags": composite(
                Flags,
                table.c.has_conflicts,
                table.c.requires_manual_review,
                table.c.is_suspicious,
                table.c.is_verified,
            ),
            "status_breakdown": composite(
                StatusBreakdown,
                table.c.is_registered,
                table.c.has_attendance,
                table.c.has_certificate,
                table.c.is_revoked,
            ),
            "manual_override": composite(
                ManualOverride,
                table.c.is_overridden,
                table.c.overridden_by,
                table.c.overridden_at,
                table.c.override_reason,
                table.c.previous_status,
            ),
        },
        # the domain bumps the version; stale writers fail the UPDATE ... WHERE
        version_id_col=table.c.reconciliation_version,
        version_id_generator=False,
    )

    mapper_registry.map_imperatively(
        AuditEntry,
        participation_audit_table,
    )

    configure_mappers()
    return mapper_registry
