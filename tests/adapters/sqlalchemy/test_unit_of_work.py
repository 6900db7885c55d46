from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from rollcall.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from rollcall.domain.model import CanonicalStatus, ParticipationRecord
from rollcall.domain.reconciliation import ConcurrentUpdateError, TrustPolicy, assess
from rollcall.domain.reconciliation.apply import apply_assessment
from tests.helpers.records import reconciled_record
from tests.helpers.signals import manual_presence, registered
from tests.helpers.sources import EVENT_ID, NOW

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


@pytest.fixture
def file_engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'rollcall.sqlite'}", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyReconciliationUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_startup_from_database_uri(tmp_path: Path) -> None:
    startup(database_uri=f"sqlite+pysqlite:///{tmp_path / 'uri.sqlite'}")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.records.get("ada@example.com", EVENT_ID) is None


def test_repositories_need_an_open_session(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyReconciliationUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_unit_of_work_persists_record_and_audit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    record, entry = reconciled_record("ada@example.com", [registered()])

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.records.add(record)
        uow.repositories.audit.add(entry)
        uow.commit()

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        loaded = uow.repositories.records.get("ada@example.com", EVENT_ID)
        history = uow.repositories.audit.history("ada@example.com", EVENT_ID)

    assert loaded is not None
    assert loaded.canonical_status is CanonicalStatus.REGISTERED_ONLY
    assert [item.version for item in history] == [1]


def test_exception_inside_unit_of_work_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    record, _ = reconciled_record("ada@example.com", [registered()])

    with pytest.raises(RuntimeError), SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.records.add(record)
        uow.session.flush()
        raise RuntimeError("abort")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.records.get("ada@example.com", EVENT_ID) is None


def test_stale_version_raises_concurrent_update(file_engine: Engine) -> None:
    startup(engine=file_engine)
    record, entry = reconciled_record("ada@example.com", [registered()])
    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.records.add(record)
        uow.repositories.audit.add(entry)
        uow.commit()

    policy = TrustPolicy()
    assessment = assess([registered(), manual_presence()], policy=policy, now=NOW)
    first = SqlAlchemyReconciliationUnitOfWork()
    second = SqlAlchemyReconciliationUnitOfWork()
    with first, second:
        mine = first.repositories.records.get("ada@example.com", EVENT_ID)
        theirs = second.repositories.records.get("ada@example.com", EVENT_ID)
        assert mine is not None
        assert theirs is not None

        apply_assessment(mine, assessment, policy=policy, now=NOW)
        first.commit()

        apply_assessment(theirs, assessment, policy=policy, now=NOW)
        with pytest.raises(ConcurrentUpdateError):
            second.commit()

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        stored = uow.repositories.records.get("ada@example.com", EVENT_ID)
    assert stored is not None
    assert stored.version == 2


def test_duplicate_pair_raises_concurrent_update(file_engine: Engine) -> None:
    startup(engine=file_engine)

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.records.add(ParticipationRecord(email="ada@example.com", event_id="e1"))
        uow.commit()

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.records.add(ParticipationRecord(email="ADA@example.com", event_id="e1"))
        with pytest.raises(ConcurrentUpdateError):
            uow.commit()
