"""Translate source payloads into domain source records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rollcall.domain.model import normalize_email
from rollcall.domain.ports.sources import AttendanceRecord, CertificateRecord, RegistrationRecord

if TYPE_CHECKING:
    from .schema import AttendancePayload, CertificatePayload, RegistrationPayload


def parse_registration(payload: RegistrationPayload) -> RegistrationRecord:
    return RegistrationRecord(
        subject_id=payload.subject_id,
        email=normalize_email(payload.email),
        event_id=payload.event_id,
        valid=payload.valid,
        created_by=payload.created_by,
        created_at=payload.created_at,
        attendance_status_hint=payload.attendance_status,
        registration_status=payload.registration_status,
        registration_type=payload.registration_type,
        invalidated_at=payload.invalidated_at,
        invalidated_by=payload.invalidated_by,
        invalidation_reason=payload.invalidation_reason,
    )


def parse_attendance(payload: AttendancePayload) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=payload.record_id,
        subject_id=payload.subject_id,
        event_id=payload.event_id,
        valid=payload.valid,
        marked_by=payload.marked_by,
        scanned_at=payload.scanned_at,
        status=payload.status,
        session_id=payload.session_id,
    )


def parse_certificate(payload: CertificatePayload) -> CertificateRecord:
    return CertificateRecord(
        record_id=payload.record_id,
        subject_id=payload.subject_id,
        event_id=payload.event_id,
        certificate_id=payload.certificate_id,
        valid=payload.valid,
        status=payload.status.upper(),
        issued_by=payload.issued_by,
        issued_at=payload.issued_at,
        revoked_by=payload.revoked_by,
        revoked_at=payload.revoked_at,
        revocation_reason=payload.revocation_reason,
        updated_at=payload.updated_at,
    )
