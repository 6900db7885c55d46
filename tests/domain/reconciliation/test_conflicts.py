from __future__ import annotations

from rollcall.domain.model import ConflictType, Signal, SignalType
from rollcall.domain.reconciliation import TrustPolicy, detect_conflicts
from tests.helpers.signals import certificate, make_signal, registered, scanned_presence
from tests.helpers.sources import NOW


def _conflict_types(*signals: Signal) -> list[ConflictType]:
    conflicts = detect_conflicts(signals, policy=TrustPolicy(), detected_at=NOW)
    return [conflict.conflict_type for conflict in conflicts]


def test_consistent_signals_have_no_conflicts() -> None:
    assert _conflict_types(registered(), scanned_presence(), certificate()) == []


def test_certificate_without_attendance() -> None:
    conflicts = detect_conflicts(
        [registered(), certificate()],
        policy=TrustPolicy(),
        detected_at=NOW,
    )

    assert len(conflicts) == 1
    assert conflicts[0].conflict_type is ConflictType.CERTIFICATE_WITHOUT_ATTENDANCE
    assert conflicts[0].description == "Certificate issued but no attendance record found"
    assert conflicts[0].detected_at == NOW


def test_present_and_absent_with_high_trust_fire_two_conflicts() -> None:
    assert _conflict_types(
        registered(),
        scanned_presence(),
        make_signal(SignalType.ABSENT),
    ) == [ConflictType.ATTENDANCE_CONTRADICTION, ConflictType.HIGH_TRUST_DISAGREEMENT]


def test_low_trust_contradiction_is_not_a_high_trust_disagreement() -> None:
    assert _conflict_types(
        make_signal(SignalType.PRESENT, trust=70),
        make_signal(SignalType.ABSENT),
    ) == [ConflictType.ATTENDANCE_CONTRADICTION]


def test_revoked_certificate_with_attendance() -> None:
    assert _conflict_types(
        scanned_presence(),
        make_signal(SignalType.CERTIFICATE_REVOKED),
    ) == [ConflictType.REVOKED_WITH_ATTENDANCE]


def test_issued_and_revoked_certificates_disagree() -> None:
    assert _conflict_types(
        certificate(),
        make_signal(SignalType.CERTIFICATE_REVOKED),
    ) == [ConflictType.CERTIFICATE_WITHOUT_ATTENDANCE, ConflictType.HIGH_TRUST_DISAGREEMENT]


def test_inactive_signals_are_ignored() -> None:
    assert _conflict_types(
        registered(),
        make_signal(SignalType.PRESENT, active=False),
        certificate(),
    ) == [ConflictType.CERTIFICATE_WITHOUT_ATTENDANCE]


def test_high_trust_threshold_comes_from_policy() -> None:
    conflicts = detect_conflicts(
        [make_signal(SignalType.PRESENT, trust=70), make_signal(SignalType.ABSENT, trust=70)],
        policy=TrustPolicy(high_trust_threshold=60),
        detected_at=NOW,
    )

    assert ConflictType.HIGH_TRUST_DISAGREEMENT in {c.conflict_type for c in conflicts}
