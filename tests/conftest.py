from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from eventkb.adapters.sqlalchemy import start_mappers
from eventkb.adapters.sqlalchemy.mappings import create_all_tables
from eventkb.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyKnowledgeUnitOfWork,
    shutdown,
    startup,
)
from eventkb.config import configure_logging
from tests.helpers.knowledge import FakeLookup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True, scope="session")
def _logging() -> None:
    configure_logging(force=True)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyKnowledgeUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyKnowledgeUnitOfWork:
        return SqlAlchemyKnowledgeUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def fake_lookup() -> FakeLookup:
    return FakeLookup()
