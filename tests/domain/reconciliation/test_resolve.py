from __future__ import annotations

from datetime import timedelta

from rollcall.domain.model import CanonicalStatus, SignalSource, SignalType
from rollcall.domain.reconciliation import resolve_canonical_status
from rollcall.domain.reconciliation.resolve import highest_trust_signal
from tests.helpers.signals import (
    certificate,
    make_signal,
    manual_presence,
    registered,
    scanned_presence,
)
from tests.helpers.sources import NOW


def test_no_signals_resolve_to_registered_only() -> None:
    resolution = resolve_canonical_status([])

    assert resolution.status is CanonicalStatus.REGISTERED_ONLY
    assert not resolution.is_registered


def test_registration_only() -> None:
    resolution = resolve_canonical_status([registered()])

    assert resolution.status is CanonicalStatus.REGISTERED_ONLY
    assert resolution.is_registered


def test_attendance_without_certificate() -> None:
    resolution = resolve_canonical_status([registered(), manual_presence()])

    assert resolution.status is CanonicalStatus.ATTENDED_NO_CERTIFICATE
    assert resolution.is_present
    assert not resolution.has_certificate


def test_certificate_and_attendance_certify() -> None:
    resolution = resolve_canonical_status([registered(), manual_presence(), certificate()])

    assert resolution.status is CanonicalStatus.CERTIFIED


def test_certificate_without_attendance_invalidates() -> None:
    resolution = resolve_canonical_status([registered(), certificate()])

    assert resolution.status is CanonicalStatus.INVALIDATED
    assert resolution.has_certificate


def test_invalidation_wins_over_everything() -> None:
    signals = [
        registered(),
        scanned_presence(),
        certificate(),
        make_signal(SignalType.INVALIDATED),
    ]

    assert resolve_canonical_status(signals).status is CanonicalStatus.INVALIDATED


def test_inactive_invalidation_is_ignored() -> None:
    signals = [registered(), make_signal(SignalType.INVALIDATED, active=False)]

    assert resolve_canonical_status(signals).status is CanonicalStatus.REGISTERED_ONLY


def test_higher_trust_absence_beats_manual_presence() -> None:
    signals = [registered(), manual_presence(), make_signal(SignalType.ABSENT)]

    resolution = resolve_canonical_status(signals)

    assert resolution.status is CanonicalStatus.REGISTERED_ONLY
    assert not resolution.is_present


def test_revoked_certificate_is_not_a_certificate() -> None:
    signals = [registered(), scanned_presence(), make_signal(SignalType.CERTIFICATE_REVOKED)]

    assert resolve_canonical_status(signals).status is CanonicalStatus.ATTENDED_NO_CERTIFICATE


def test_trust_ties_break_on_latest_timestamp() -> None:
    earlier = make_signal(SignalType.CERTIFICATE_ISSUED, timestamp=NOW - timedelta(hours=1))
    later = make_signal(SignalType.CERTIFICATE_REVOKED, timestamp=NOW)

    winner = highest_trust_signal(
        [earlier, later],
        {SignalType.CERTIFICATE_ISSUED, SignalType.CERTIFICATE_REVOKED},
    )

    assert winner is later
    assert (
        resolve_canonical_status([scanned_presence(), earlier, later]).status
        is CanonicalStatus.ATTENDED_NO_CERTIFICATE
    )


def test_highest_trust_signal_filters_by_type() -> None:
    scan = make_signal(SignalType.PRESENT, source=SignalSource.ATTENDANCE_SCANNER)

    assert highest_trust_signal([registered(), scan], {SignalType.PRESENT}) is scan
    assert highest_trust_signal([registered()], {SignalType.PRESENT}) is None
