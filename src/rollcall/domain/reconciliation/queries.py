"""Read-side helpers over the record repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import EventStats, zero_filled

if TYPE_CHECKING:
    from rollcall.domain.ports.persistence import ParticipationRecordRepository


def event_stats(records: ParticipationRecordRepository, event_id: str) -> EventStats:
    flagged = records.count_flagged(event_id)
    return EventStats(
        event_id=event_id,
        by_status=zero_filled(records.count_by_status(event_id)),
        conflicts=flagged.get("conflicts", 0),
        requires_review=flagged.get("requires_review", 0),
        suspicious=flagged.get("suspicious", 0),
        verified=flagged.get("verified", 0),
    )
