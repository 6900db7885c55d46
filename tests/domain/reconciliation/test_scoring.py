from __future__ import annotations

import pytest

from rollcall.domain.model import CanonicalStatus, ConflictType, Signal, SignalType
from rollcall.domain.reconciliation import (
    TrustPolicy,
    assess,
    detect_conflicts,
    evaluate_flags,
    score_confidence,
    status_breakdown,
)
from tests.helpers.signals import (
    certificate,
    make_signal,
    manual_presence,
    registered,
    scanned_presence,
)
from tests.helpers.sources import NOW

POLICY = TrustPolicy()
ATTENDED = CanonicalStatus.ATTENDED_NO_CERTIFICATE


@pytest.mark.parametrize(
    ("signals", "status", "confidence"),
    [
        ([registered()], CanonicalStatus.REGISTERED_ONLY, 60),
        ([registered(), manual_presence()], CanonicalStatus.ATTENDED_NO_CERTIFICATE, 70),
        ([registered(), manual_presence(), certificate()], CanonicalStatus.CERTIFIED, 80),
        ([registered(), certificate()], CanonicalStatus.INVALIDATED, 35),
    ],
    ids=["registered", "attended", "certified", "certificate-without-attendance"],
)
def test_assessment_of_typical_signal_sets(
    signals: list[Signal],
    status: CanonicalStatus,
    confidence: int,
) -> None:
    assessment = assess(signals, policy=POLICY, now=NOW)

    assert assessment.canonical_status is status
    assert assessment.confidence_score == confidence


def test_certified_with_three_consistent_signals_is_verified() -> None:
    assessment = assess(
        [registered(), manual_presence(), certificate()],
        policy=POLICY,
        now=NOW,
    )

    assert assessment.flags.is_verified
    assert not assessment.flags.requires_manual_review
    assert not assessment.flags.is_suspicious
    assert assessment.active_count == 3


def test_certificate_without_attendance_is_flagged() -> None:
    assessment = assess([registered(), certificate()], policy=POLICY, now=NOW)

    assert [c.conflict_type for c in assessment.conflicts] == [
        ConflictType.CERTIFICATE_WITHOUT_ATTENDANCE
    ]
    assert assessment.flags.has_conflicts
    assert assessment.flags.requires_manual_review
    assert assessment.flags.is_suspicious
    assert not assessment.flags.is_verified


def test_two_conflicts_mark_suspicious() -> None:
    signals = [registered(), scanned_presence(), make_signal(SignalType.ABSENT)]

    assessment = assess(signals, policy=POLICY, now=NOW)

    # (50 + 95 + 80) / 3 = 75, minus two conflict penalties
    assert assessment.confidence_score == 45
    assert assessment.canonical_status is ATTENDED
    assert assessment.flags.is_suspicious
    assert assessment.flags.requires_manual_review


def test_confidence_rounds_half_up() -> None:
    signals = [registered(), make_signal(SignalType.PRESENT, trust=51)]

    # (50 + 51) / 2 + 10 = 60.5
    assert score_confidence(signals, (), ATTENDED, policy=POLICY) == 61


def test_confidence_rounds_to_nearest() -> None:
    signals = [registered(), manual_presence(), make_signal(SignalType.ABSENT)]
    conflicts = detect_conflicts(signals, policy=POLICY, detected_at=NOW)

    # 200 / 3 - 15 = 51.67
    status = CanonicalStatus.REGISTERED_ONLY
    assert score_confidence(signals, conflicts, status, policy=POLICY) == 52


def test_confidence_is_clamped_to_100() -> None:
    signals = [
        make_signal(SignalType.PRESENT, trust=100),
        make_signal(SignalType.REGISTERED, trust=100),
    ]

    assert score_confidence(signals, (), ATTENDED, policy=POLICY) == 100


def test_confidence_is_clamped_to_zero() -> None:
    signals = [make_signal(SignalType.CERTIFICATE_ISSUED, trust=5)]
    conflicts = detect_conflicts(signals, policy=POLICY, detected_at=NOW)

    assert score_confidence(signals, conflicts, CanonicalStatus.INVALIDATED, policy=POLICY) == 0


def test_no_active_signals_score_zero_and_need_review() -> None:
    signals = [make_signal(SignalType.REGISTERED, active=False)]

    assessment = assess(signals, policy=POLICY, now=NOW)

    assert assessment.confidence_score == 0
    assert assessment.flags.requires_manual_review
    assert not assessment.flags.is_verified
    assert assessment.active_count == 0


def test_invalidated_registration() -> None:
    signals = [
        make_signal(SignalType.REGISTERED, active=False),
        make_signal(SignalType.INVALIDATED),
    ]

    assessment = assess(signals, policy=POLICY, now=NOW)

    # 85 + 10 - 20
    assert assessment.confidence_score == 75
    assert assessment.canonical_status is CanonicalStatus.INVALIDATED
    assert assessment.status_breakdown.is_revoked
    assert not assessment.status_breakdown.is_registered


def test_verification_needs_enough_signals() -> None:
    flags = evaluate_flags([make_signal(SignalType.PRESENT)], (), 95, policy=POLICY)

    assert not flags.is_verified


def test_review_threshold_comes_from_policy() -> None:
    signals = [registered()]

    strict = evaluate_flags(signals, (), 60, policy=TrustPolicy(review_threshold=70))
    default = evaluate_flags(signals, (), 60, policy=POLICY)

    assert strict.requires_manual_review
    assert not default.requires_manual_review


def test_status_breakdown_reflects_active_signals() -> None:
    breakdown = status_breakdown(
        [
            registered(),
            scanned_presence(),
            make_signal(SignalType.CERTIFICATE_ISSUED, active=False),
            make_signal(SignalType.CERTIFICATE_REVOKED),
        ]
    )

    assert breakdown.is_registered
    assert breakdown.has_attendance
    assert not breakdown.has_certificate
    assert breakdown.is_revoked
