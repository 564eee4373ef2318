"""SQLAlchemy-backed units of work for the knowledge base."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from eventkb.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from eventkb.adapters.sqlalchemy.repositories import (
    SqlAlchemyEntityRepository,
    SqlAlchemyEventRepository,
)
from eventkb.config.storage import get_database_config
from eventkb.domain.ports.persistence import StoreError
from eventkb.domain.ports.unit_of_work import KnowledgeRepositories, RepositoryCollection

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    # held for a whole merge transaction and around every other commit
    write_lock: threading.RLock = field(default_factory=threading.RLock)

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call eventkb.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self._engine, expire_on_commit=False, autoflush=False
            )
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, metadata, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_config().uri)
    start_mappers()
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine
    log.info("SQLAlchemy adapter started on %s", resolved_engine.url)


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections.

    An ``exclusive`` unit of work holds the adapter write lock from ``__enter__``
    to ``__exit__``; other units of work only take it while committing. Sessions
    do not autoflush, so a non-exclusive unit of work writes nothing outside that
    lock and never holds a database lock while waiting for it.
    """

    def __init__(self, *, exclusive: bool = False) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self.exclusive = exclusive
        self._session: Session | None = None
        self._holds_lock = False

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        if self.exclusive:
            _STATE.write_lock.acquire()
            self._holds_lock = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
            self.session.close()
            self.session = None
        finally:
            if self._holds_lock:
                self._holds_lock = False
                _STATE.write_lock.release()
        return False

    def commit(self) -> None:
        with self._commit_guard():
            try:
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise StoreError(str(exc)) from exc

    def rollback(self) -> None:
        self.session.rollback()

    def _commit_guard(self) -> AbstractContextManager[object]:
        return nullcontext() if self._holds_lock else _STATE.write_lock

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyKnowledgeUnitOfWork(BaseSqlAlchemyUnitOfWork[KnowledgeRepositories]):
    """Unit of work over the entity and event repositories."""

    def _build_repositories(self, session: Session) -> KnowledgeRepositories:
        return KnowledgeRepositories(
            entities=SqlAlchemyEntityRepository(session),
            events=SqlAlchemyEventRepository(session),
        )


if TYPE_CHECKING:
    from eventkb.domain.ports.unit_of_work import KnowledgeUnitOfWork

    _uow_check: KnowledgeUnitOfWork = SqlAlchemyKnowledgeUnitOfWork()
