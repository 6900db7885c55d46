"""HTTP adapter for the registration, attendance and certificate sources."""

from __future__ import annotations

from .client import SourceClient, build_retry
from .schema import AttendancePayload, CertificatePayload, RegistrantsPayload, RegistrationPayload
from .sources import HttpSignalSources
from .translator import parse_attendance, parse_certificate, parse_registration

__all__ = [
    "AttendancePayload",
    "CertificatePayload",
    "HttpSignalSources",
    "RegistrantsPayload",
    "RegistrationPayload",
    "SourceClient",
    "build_retry",
    "parse_attendance",
    "parse_certificate",
    "parse_registration",
]
