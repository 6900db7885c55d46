from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from rollcall.adapters.sqlalchemy.repositories import (
    SqlAlchemyAuditRepository,
    SqlAlchemyParticipationRecordRepository,
)
from rollcall.domain.model import Actor, ActorRole, CanonicalStatus
from rollcall.domain.ports.persistence import RecordFilters
from rollcall.domain.reconciliation.apply import apply_override
from tests.helpers.records import reconciled_record
from tests.helpers.signals import certificate, manual_presence, registered
from tests.helpers.sources import EVENT_ID, NOW

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


@pytest.fixture
def populated(sqlite_session: Session) -> Session:
    records = SqlAlchemyParticipationRecordRepository(sqlite_session)
    audit = SqlAlchemyAuditRepository(sqlite_session)
    fixtures = [
        ("ada@example.com", [registered(), manual_presence(), certificate()], NOW),
        ("bob@example.com", [registered()], NOW + timedelta(minutes=1)),
        ("cy@example.com", [registered(), certificate()], NOW + timedelta(minutes=2)),
        ("dee@example.com", [registered(), manual_presence()], NOW - timedelta(minutes=1)),
    ]
    for email, signals, when in fixtures:
        record, entry = reconciled_record(email, signals, now=when)
        records.add(record)
        audit.add(entry)
    other, other_entry = reconciled_record("ada@example.com", [], event_id="evt-other")
    records.add(other)
    audit.add(other_entry)
    sqlite_session.commit()
    return sqlite_session


def test_get_normalizes_email(populated: Session) -> None:
    repo = SqlAlchemyParticipationRecordRepository(populated)

    record = repo.get(" ADA@example.com", EVENT_ID)

    assert record is not None
    assert record.canonical_status is CanonicalStatus.CERTIFIED
    assert repo.get("nobody@example.com", EVENT_ID) is None


def test_list_for_event_orders_by_latest_reconciliation(populated: Session) -> None:
    repo = SqlAlchemyParticipationRecordRepository(populated)

    emails = [record.email for record in repo.list_for_event(EVENT_ID)]

    assert emails == ["cy@example.com", "bob@example.com", "ada@example.com", "dee@example.com"]


@pytest.mark.parametrize(
    ("filters", "expected"),
    [
        (RecordFilters(status=CanonicalStatus.ATTENDED_NO_CERTIFICATE), ["dee@example.com"]),
        (RecordFilters(requires_review=True), ["cy@example.com"]),
        (RecordFilters(suspicious=True), ["cy@example.com"]),
        (RecordFilters(verified=True), ["ada@example.com"]),
        (
            RecordFilters(verified=False, suspicious=False),
            ["bob@example.com", "dee@example.com"],
        ),
    ],
)
def test_list_for_event_filters(
    populated: Session,
    filters: RecordFilters,
    expected: list[str],
) -> None:
    repo = SqlAlchemyParticipationRecordRepository(populated)

    assert [record.email for record in repo.list_for_event(EVENT_ID, filters)] == expected


def test_needing_review_across_events(populated: Session) -> None:
    repo = SqlAlchemyParticipationRecordRepository(populated)

    everywhere = [(r.email, r.event_id) for r in repo.needing_review()]
    scoped = [r.email for r in repo.needing_review(EVENT_ID)]
    strict = [r.email for r in repo.needing_review(EVENT_ID, confidence_below=65)]

    assert everywhere == [("cy@example.com", EVENT_ID), ("ada@example.com", "evt-other")]
    assert scoped == ["cy@example.com"]
    assert strict == ["cy@example.com", "bob@example.com"]


def test_count_by_status_and_flags(populated: Session) -> None:
    repo = SqlAlchemyParticipationRecordRepository(populated)

    assert repo.count_by_status(EVENT_ID) == {
        CanonicalStatus.CERTIFIED: 1,
        CanonicalStatus.REGISTERED_ONLY: 1,
        CanonicalStatus.INVALIDATED: 1,
        CanonicalStatus.ATTENDED_NO_CERTIFICATE: 1,
    }
    assert repo.count_flagged(EVENT_ID) == {
        "conflicts": 1,
        "requires_review": 1,
        "suspicious": 1,
        "verified": 1,
    }


def test_counts_for_unknown_event_are_zero(populated: Session) -> None:
    repo = SqlAlchemyParticipationRecordRepository(populated)

    assert repo.count_by_status("missing") == {}
    assert repo.count_flagged("missing") == {
        "conflicts": 0,
        "requires_review": 0,
        "suspicious": 0,
        "verified": 0,
    }


def test_audit_history_is_ordered(populated: Session) -> None:
    records = SqlAlchemyParticipationRecordRepository(populated)
    audit = SqlAlchemyAuditRepository(populated)
    record = records.get("cy@example.com", EVENT_ID)
    assert record is not None
    audit.add(
        apply_override(
            record,
            CanonicalStatus.CERTIFIED,
            actor=Actor("admin-1", ActorRole.ADMIN),
            reason="Paper sheet",
            now=NOW + timedelta(hours=1),
        )
    )
    populated.commit()

    history = audit.history("CY@example.com", EVENT_ID)

    assert [(entry.version, entry.status) for entry in history] == [
        (1, CanonicalStatus.INVALIDATED),
        (2, CanonicalStatus.CERTIFIED),
    ]
    assert history[1].actor == "admin-1"
    assert audit.history("cy@example.com", "evt-other") == []
