"""Pydantic models describing the signal source payloads."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class SourceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RegistrationPayload(SourceBaseModel):
    subject_id: str = Field(alias="id")
    email: str
    event_id: str = Field(alias="eventId")
    valid: bool = True
    created_by: str | None = Field(default=None, alias="createdBy")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    attendance_status: str | None = Field(default=None, alias="attendanceStatus")
    registration_status: str | None = Field(default=None, alias="registrationStatus")
    registration_type: str | None = Field(default=None, alias="registrationType")
    invalidated_at: datetime | None = Field(default=None, alias="invalidatedAt")
    invalidated_by: str | None = Field(default=None, alias="invalidatedBy")
    invalidation_reason: str | None = Field(default=None, alias="invalidationReason")

    normalize_blank = field_validator(
        "created_by",
        "attendance_status",
        "invalidated_by",
        "invalidation_reason",
        mode="before",
    )(_blank_to_none)
    normalize_tz = field_validator("created_at", "invalidated_at")(_ensure_utc)


class RegistrantsPayload(SourceBaseModel):
    event_id: str = Field(alias="eventId")
    emails: list[str] = Field(default_factory=list[str])


class AttendancePayload(SourceBaseModel):
    record_id: str = Field(alias="id")
    subject_id: str = Field(alias="subjectId")
    event_id: str = Field(alias="eventId")
    valid: bool = True
    marked_by: str | None = Field(default=None, alias="markedBy")
    scanned_at: datetime | None = Field(default=None, alias="scannedAt")
    status: str = "PRESENT"
    session_id: str | None = Field(default=None, alias="sessionId")

    normalize_blank = field_validator("marked_by", "session_id", mode="before")(_blank_to_none)
    normalize_tz = field_validator("scanned_at")(_ensure_utc)


class CertificatePayload(SourceBaseModel):
    record_id: str = Field(alias="id")
    subject_id: str = Field(alias="subjectId")
    event_id: str = Field(alias="eventId")
    certificate_id: str | None = Field(default=None, alias="certificateId")
    valid: bool = True
    status: str = "GENERATED"
    issued_by: str | None = Field(default=None, alias="issuedBy")
    issued_at: datetime | None = Field(default=None, alias="issuedAt")
    revoked_by: str | None = Field(default=None, alias="revokedBy")
    revoked_at: datetime | None = Field(default=None, alias="revokedAt")
    revocation_reason: str | None = Field(default=None, alias="revocationReason")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    normalize_blank = field_validator(
        "issued_by",
        "revoked_by",
        "revocation_reason",
        mode="before",
    )(_blank_to_none)
    normalize_tz = field_validator("issued_at", "revoked_at", "updated_at")(_ensure_utc)
