"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import uuid
from functools import wraps
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from eventkb.adapters.sqlalchemy.mappings import entity_alias_table, entity_table, event_table
from eventkb.domain.model import TYPE_BY_COLLECTION, Entity, Event
from eventkb.domain.normalization import name_key
from eventkb.domain.ports.persistence import StoreError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.orm import Session
    from sqlalchemy.sql import Select

    from eventkb.domain.model import Collection, EntityType


def translate_errors[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Re-raise SQLAlchemy failures as the domain's ``StoreError``."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    return wrapper


class SqlAlchemyEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    @translate_errors
    def add(self, entity: Entity) -> None:
        self.session.add(entity)

    @translate_errors
    def get(self, record_id: str) -> Entity | None:
        try:
            key = uuid.UUID(record_id)
        except ValueError:
            return None
        return self.session.get(Entity, key)

    @translate_errors
    def find_by_name(self, collection: Collection, value: str) -> Sequence[Entity]:
        stmt = self._in_collection(collection).where(entity_table.c.name_key == name_key(value))
        return self._ordered(stmt)

    @translate_errors
    def find_by_alias(self, collection: Collection, value: str) -> Sequence[Entity]:
        stmt = (
            self._in_collection(collection)
            .join(entity_alias_table, entity_alias_table.c.entity_id == entity_table.c.id)
            .where(entity_alias_table.c.value_key == name_key(value))
        )
        return self._ordered(stmt)

    @translate_errors
    def find_by_external_id(self, entity_type: EntityType, external_id: str) -> Sequence[Entity]:
        stmt = (
            select(Entity)
            .where(entity_table.c.entity_type == entity_type)
            .where(entity_table.c.external_id == external_id)
        )
        return self._ordered(stmt)

    @translate_errors
    def lock_external_id(self, entity_type: EntityType, external_id: str) -> None:
        # no-op write: takes the database write lock (row locks on server databases)
        stmt = (
            update(entity_table)
            .where(entity_table.c.entity_type == entity_type)
            .where(entity_table.c.external_id == external_id)
            .values(row_version=entity_table.c.row_version)
        )
        self.session.execute(stmt)

    @translate_errors
    def duplicate_external_ids(self, entity_type: EntityType) -> Sequence[str]:
        stmt = (
            select(entity_table.c.external_id)
            .where(entity_table.c.entity_type == entity_type)
            .where(entity_table.c.external_id.is_not(None))
            .where(entity_table.c.external_id != "")
            .group_by(entity_table.c.external_id)
            .having(func.count() > 1)
            .order_by(entity_table.c.external_id)
        )
        return list(self.session.execute(stmt).scalars())

    @translate_errors
    def list_all(self, collection: Collection) -> Sequence[Entity]:
        return self._ordered(self._in_collection(collection))

    @translate_errors
    def update(self, entity: Entity) -> None:
        self.session.add(entity)
        self.session.flush()

    @translate_errors
    def remove(self, entity: Entity) -> None:
        self.session.delete(entity)
        self.session.flush()

    def _in_collection(self, collection: Collection) -> Select[tuple[Entity]]:
        entity_type = TYPE_BY_COLLECTION[collection]
        return select(Entity).where(entity_table.c.entity_type == entity_type)

    def _ordered(self, stmt: Select[tuple[Entity]]) -> list[Entity]:
        stmt = stmt.order_by(entity_table.c.created_at, entity_table.c.id)
        return list(self.session.execute(stmt).scalars().unique())


class SqlAlchemyEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    @translate_errors
    def add(self, entity: Event) -> None:
        self.session.add(entity)

    @translate_errors
    def find_candidates(self, event: Event) -> Sequence[Event]:
        triple = (
            (event_table.c.actor_key == event.actor_key)
            & (event_table.c.action == event.action)
            & (event_table.c.target_key == event.target_key)
        )
        sentence = event.sentence.strip()
        condition = or_(triple, event_table.c.sentence == sentence) if sentence else triple
        stmt = select(Event).where(condition).order_by(event_table.c.date_received)
        return list(self.session.execute(stmt).scalars())

    @translate_errors
    def list_all(self) -> Sequence[Event]:
        stmt = select(Event).order_by(event_table.c.date_received, event_table.c.id)
        return list(self.session.execute(stmt).scalars())
