"""HTTP-backed signal sources.

Each read is a single GET against the sources service:

- ``GET registrations/{event}/{email}``
- ``GET registrations/{event}``
- ``GET attendance/{event}/{subject}``
- ``GET certificates/{event}/{subject}``

A 404 means the source holds no record. Timeouts surface as ``SourceTimeoutError``;
any other transport failure, unexpected status or malformed payload as
``SourceReadError``. Each call opens its own ``SourceClient`` because the ports are
synchronous and every call runs its own event loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import ValidationError

from rollcall.config import get_sources_config
from rollcall.domain.reconciliation.errors import SourceReadError

from .client import SourceClient
from .schema import AttendancePayload, CertificatePayload, RegistrantsPayload, RegistrationPayload
from .translator import parse_attendance, parse_certificate, parse_registration

if TYPE_CHECKING:
    import httpx
    from pydantic import BaseModel

    from rollcall.config import SourcesConfig
    from rollcall.domain.ports.sources import (
        AttendanceRecord,
        AttendanceSource,
        CertificateRecord,
        CertificateSource,
        RegistrationRecord,
        RegistrationSource,
    )


def _segment(value: str) -> str:
    return quote(value, safe="")


@dataclass(slots=True)
class HttpSignalSources:
    """Implements the registration, attendance and certificate source ports."""

    config: SourcesConfig | None = None
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def settings(self) -> SourcesConfig:
        if self.config is None:
            self.config = get_sources_config()
        return self.config

    def get_registration(self, email: str, event_id: str) -> RegistrationRecord | None:
        path = f"registrations/{_segment(event_id)}/{_segment(email)}"
        payload = self._fetch("registration", path, RegistrationPayload)
        return parse_registration(payload) if payload is not None else None

    def list_registrants(self, event_id: str) -> list[str]:
        path = f"registrations/{_segment(event_id)}"
        payload = self._fetch("registration", path, RegistrantsPayload, roster=True)
        return list(payload.emails) if payload is not None else []

    def get_attendance(self, subject_id: str, event_id: str) -> AttendanceRecord | None:
        path = f"attendance/{_segment(event_id)}/{_segment(subject_id)}"
        payload = self._fetch("attendance", path, AttendancePayload)
        return parse_attendance(payload) if payload is not None else None

    def get_certificate(self, subject_id: str, event_id: str) -> CertificateRecord | None:
        path = f"certificates/{_segment(event_id)}/{_segment(subject_id)}"
        payload = self._fetch("certificate", path, CertificatePayload)
        return parse_certificate(payload) if payload is not None else None

    def _fetch[TModel: BaseModel](
        self,
        source: str,
        path: str,
        model: type[TModel],
        *,
        roster: bool = False,
    ) -> TModel | None:
        return asyncio.run(self._fetch_async(source, path, model, roster=roster))

    async def _fetch_async[TModel: BaseModel](
        self,
        source: str,
        path: str,
        model: type[TModel],
        *,
        roster: bool,
    ) -> TModel | None:
        client = SourceClient(self.settings(), roster=roster, transport=self.transport)
        async with client:
            payload = await client.read(source, path)
        if payload is None:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise SourceReadError(source, f"malformed payload from {path}") from exc


if TYPE_CHECKING:
    _registrations_check: RegistrationSource = HttpSignalSources()
    _attendance_check: AttendanceSource = HttpSignalSources()
    _certificates_check: CertificateSource = HttpSignalSources()
