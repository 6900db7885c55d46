"""Signal ingestion: read every source for a pair and normalize into signals.

Responsibilities of this stage:
- query the registration, attendance and certificate sources
- emit zero or one signal per source finding, with the policy's trust score
- keep superseded evidence as inactive signals for the audit trail

Missing records contribute nothing. A timed-out attendance or certificate source is
treated the same way and logged. A registration timeout leaves nothing to key the
other reads on, so it propagates as a ``SourceReadError`` with every other source
failure and the caller aborts the pair.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from rollcall.domain.model import (
    Signal,
    SignalSource,
    SignalType,
    SourceModel,
    SourceRef,
    normalize_email,
    utcnow,
)

from .errors import SourceReadError, SourceTimeoutError

if TYPE_CHECKING:
    from datetime import datetime

    from rollcall.domain.ports.sources import (
        AttendanceRecord,
        CertificateRecord,
        RegistrationRecord,
        SignalSources,
    )

    from .policy import TrustPolicy

log = getLogger(__name__)

type Clock = Callable[[], datetime]


@dataclass(slots=True)
class SignalIngestor:
    sources: SignalSources
    policy: TrustPolicy
    clock: Clock = field(default=utcnow)

    def __call__(self, email: str, event_id: str) -> list[Signal]:
        email = normalize_email(email)
        try:
            registration = self.sources.registrations.get_registration(email, event_id)
        except SourceTimeoutError as exc:
            # the other sources are keyed by the registration's subject id
            raise SourceReadError("registration", f"timed out for {email} @ {event_id}") from exc
        if registration is None:
            return []

        subject_id = registration.subject_id
        attendance = self._read(
            "attendance",
            lambda: self.sources.attendance.get_attendance(subject_id, event_id),
        )
        certificate = self._read(
            "certificate",
            lambda: self.sources.certificates.get_certificate(subject_id, event_id),
        )
        return build_signals(
            registration,
            attendance,
            certificate,
            policy=self.policy,
            now=self.clock(),
        )

    def _read[T](self, name: str, read: Callable[[], T | None]) -> T | None:
        try:
            return read()
        except SourceTimeoutError:
            log.warning("Source %s timed out; treating as no signal", name)
            return None


def build_signals(
    registration: RegistrationRecord,
    attendance: AttendanceRecord | None,
    certificate: CertificateRecord | None,
    *,
    policy: TrustPolicy,
    now: datetime,
) -> list[Signal]:
    """Normalize source records into the ordered signal list."""

    signals = [_registration_signal(registration, policy, now)]

    if attendance is not None:
        signals.append(_attendance_signal(attendance, policy, now))
    if (attendance is None or not attendance.valid) and registration.marked_absent:
        signals.append(_absence_signal(registration, policy, now))

    if certificate is not None:
        signals.append(_certificate_signal(certificate, policy, now))

    if not registration.valid:
        signals.append(_invalidation_signal(registration, policy, now))

    return signals


def _registration_signal(
    registration: RegistrationRecord,
    policy: TrustPolicy,
    now: datetime,
) -> Signal:
    return Signal(
        source=SignalSource.REGISTRATION,
        signal_type=SignalType.REGISTERED,
        trust_score=policy.trust_for(SignalSource.REGISTRATION),
        timestamp=registration.created_at or now,
        recorded_by=registration.created_by,
        source_ref=SourceRef(SourceModel.PARTICIPANT, registration.subject_id),
        metadata=_metadata(
            registrationStatus=registration.registration_status,
            registrationType=registration.registration_type,
        ),
        is_active=registration.valid,
    )


def _attendance_signal(attendance: AttendanceRecord, policy: TrustPolicy, now: datetime) -> Signal:
    source = (
        SignalSource.ATTENDANCE_MANUAL
        if attendance.marked_by
        else SignalSource.ATTENDANCE_SCANNER
    )
    return Signal(
        source=source,
        signal_type=SignalType.PRESENT,
        trust_score=policy.trust_for(source),
        timestamp=attendance.scanned_at or now,
        recorded_by=attendance.marked_by,
        source_ref=SourceRef(SourceModel.ATTENDANCE, attendance.record_id),
        metadata=_metadata(status=attendance.status, sessionId=attendance.session_id),
        is_active=attendance.valid,
    )


def _absence_signal(registration: RegistrationRecord, policy: TrustPolicy, now: datetime) -> Signal:
    return Signal(
        source=SignalSource.SYSTEM,
        signal_type=SignalType.ABSENT,
        trust_score=policy.trust_for(SignalSource.SYSTEM),
        timestamp=now,
        source_ref=SourceRef(SourceModel.PARTICIPANT, registration.subject_id),
        metadata=_metadata(inferredFrom="participantAttendanceStatus"),
    )


def _certificate_signal(
    certificate: CertificateRecord,
    policy: TrustPolicy,
    now: datetime,
) -> Signal:
    trust = policy.trust_for(SignalSource.CERTIFICATE)
    ref = SourceRef(SourceModel.CERTIFICATE, certificate.record_id)
    if certificate.is_revoked:
        return Signal(
            source=SignalSource.CERTIFICATE,
            signal_type=SignalType.CERTIFICATE_REVOKED,
            trust_score=trust,
            timestamp=certificate.revoked_at or certificate.updated_at or now,
            recorded_by=certificate.revoked_by or certificate.issued_by,
            source_ref=ref,
            metadata=_metadata(
                certificateId=certificate.certificate_id,
                revocationReason=certificate.revocation_reason,
            ),
        )
    return Signal(
        source=SignalSource.CERTIFICATE,
        signal_type=SignalType.CERTIFICATE_ISSUED,
        trust_score=trust,
        timestamp=certificate.issued_at or now,
        recorded_by=certificate.issued_by,
        source_ref=ref,
        metadata=_metadata(certificateId=certificate.certificate_id, status=certificate.status),
    )


def _invalidation_signal(
    registration: RegistrationRecord,
    policy: TrustPolicy,
    now: datetime,
) -> Signal:
    return Signal(
        source=SignalSource.ORGANIZER_OVERRIDE,
        signal_type=SignalType.INVALIDATED,
        trust_score=policy.trust_for(SignalSource.ORGANIZER_OVERRIDE),
        timestamp=registration.invalidated_at or now,
        recorded_by=registration.invalidated_by,
        source_ref=SourceRef(SourceModel.PARTICIPANT, registration.subject_id),
        metadata=_metadata(reason=registration.invalidation_reason),
    )


def _metadata(**values: object) -> MappingProxyType[str, object]:
    return MappingProxyType({key: value for key, value in values.items() if value is not None})
