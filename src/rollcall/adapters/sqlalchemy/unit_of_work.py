"""SQLAlchemy unit of work for participation records and their audit trail."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from rollcall.adapters.sqlalchemy.mappings import start_mappers
from rollcall.adapters.sqlalchemy.migrations import upgrade_head
from rollcall.adapters.sqlalchemy.repositories import (
    SqlAlchemyAuditRepository,
    SqlAlchemyParticipationRecordRepository,
)
from rollcall.config import get_database_config
from rollcall.domain.ports.unit_of_work import ReconciliationRepositories
from rollcall.domain.reconciliation.errors import ConcurrentUpdateError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or set up twice."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to a database and migrate it to the latest schema."""

    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind")

    if engine is None:
        database = get_database_config()
        engine = create_engine(database_uri or database.uri, echo=database.echo)
    start_mappers()
    upgrade_head(engine=engine)
    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    log.info(f"Participation store ready at {engine.url.render_as_string(hide_password=True)}")


def shutdown() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def configured_engine() -> Engine | None:
    return _engine


def is_started() -> bool:
    return _engine is not None


class SqlAlchemyReconciliationUnitOfWork:
    """One session per pass; record and audit rows commit together.

    A losing writer, either a stale ``reconciliation_version`` or a second insert of
    the same ``(email, event_id)``, surfaces as ``ConcurrentUpdateError``.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            if _session_factory is None:
                raise StartupError(
                    "SQLAlchemy adapter not started; call "
                    "rollcall.adapters.sqlalchemy.unit_of_work.startup() first"
                )
            session_factory = _session_factory
        self.session_factory = session_factory
        self._session: Session | None = None
        self._repositories: ReconciliationRepositories | None = None

    def __enter__(self) -> SqlAlchemyReconciliationUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self.session_factory()
        self._repositories = ReconciliationRepositories(
            records=SqlAlchemyParticipationRecordRepository(self._session),
            audit=SqlAlchemyAuditRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> ReconciliationRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        try:
            self.session.commit()
        except (StaleDataError, IntegrityError) as exc:
            self.session.rollback()
            log.warning(f"Lost a concurrent write: {exc.__class__.__name__}")
            raise ConcurrentUpdateError(
                "Participation record was modified concurrently; retry the operation"
            ) from exc

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from rollcall.domain.ports.unit_of_work import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyReconciliationUnitOfWork()
