"""SQLAlchemy mapping metadata for the knowledge base model."""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from eventkb.domain.dates import to_local_naive
from eventkb.domain.model import (
    Alias,
    Connection,
    Coordinates,
    Entity,
    EntityType,
    Event,
    OrganizationFields,
    PersonFields,
    PlaceCategory,
    PlaceFields,
    Role,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class LocalDateTime(TypeDecorator[datetime]):
    """Naive wall-clock time in the local zone; calendar-day comparisons rely on it."""

    impl = DateTime(timezone=False)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return to_local_naive(value)


class StringSetType(TypeDecorator[frozenset[str]]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: frozenset[str] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(sorted(value or ()))

    def process_result_value(self, value: str | None, dialect: Dialect) -> frozenset[str]:
        _ = dialect
        return frozenset(_load_strings(value))


class StringTupleType(TypeDecorator[tuple[str, ...]]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(list(value or ()))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        return tuple(_load_strings(value))


class _PayloadType[TPayload](TypeDecorator[TPayload], ABC):
    """Typed entity payload stored as a JSON object."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: TPayload | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(asdict(cast(Any, value)), sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> TPayload | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return None
        return self.load(cast(dict[str, Any], loaded))

    @abstractmethod
    def load(self, data: dict[str, Any]) -> TPayload: ...


class PersonFieldsType(_PayloadType[PersonFields]):
    def load(self, data: dict[str, Any]) -> PersonFields:
        return PersonFields(
            occupation=_optional_str(data.get("occupation")),
            date_of_birth=_optional_str(data.get("date_of_birth")),
            country=_optional_str(data.get("country")),
        )


class OrganizationFieldsType(_PayloadType[OrganizationFields]):
    def load(self, data: dict[str, Any]) -> OrganizationFields:
        return OrganizationFields(
            founded=_optional_str(data.get("founded")),
            country=_optional_str(data.get("country")),
        )


class PlaceFieldsType(_PayloadType[PlaceFields]):
    def load(self, data: dict[str, Any]) -> PlaceFields:
        coordinates = data.get("coordinates")
        population = data.get("population")
        return PlaceFields(
            coordinates=(
                Coordinates(lat=float(coordinates["lat"]), lng=float(coordinates["lng"]))
                if isinstance(coordinates, dict)
                else None
            ),
            country=_optional_str(data.get("country")),
            population=population if isinstance(population, int) else None,
        )


def _load_strings(value: str | None) -> list[str]:
    if not value:
        return []
    loaded = json.loads(value)
    if not isinstance(loaded, list):
        return []
    return [item for item in cast(list[Any], loaded) if isinstance(item, str)]


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Tables ----------------------------------------------------------------------

# ``entity_type`` doubles as the collection (people/organizations/places/unknown).
entity_table = Table(
    "entity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", Enum(EntityType, native_enum=False), nullable=False),
    Column("name", String, nullable=False),
    Column("name_key", String, nullable=False),
    Column("category", Enum(PlaceCategory, native_enum=False), nullable=True),
    Column("external_id", String, nullable=True),
    Column("description", String, nullable=False, default=""),
    Column("person", PersonFieldsType, nullable=True),
    Column("organization", OrganizationFieldsType, nullable=True),
    Column("place", PlaceFieldsType, nullable=True),
    Column("connection_count", Integer, nullable=False, default=0),
    Column("row_version", Integer, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
    Index("ix_entity_type_name_key", "entity_type", "name_key"),
    Index("ix_entity_type_external_id", "entity_type", "external_id"),
)

entity_alias_table = Table(
    "entity_alias",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "entity_id",
        UUIDColumnType,
        ForeignKey("entity.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("value", String, nullable=False),
    Column("value_key", String, nullable=False, index=True),
    UniqueConstraint("entity_id", "value_key"),
)

connection_table = Table(
    "connection",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "entity_id",
        UUIDColumnType,
        ForeignKey("entity.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # events are referenced, not owned; no foreign key
    Column("event_id", UUIDColumnType, nullable=False, index=True),
    Column("action", String, nullable=False),
    Column("role", Enum(Role, native_enum=False), nullable=False),
    Column("related_actors", StringSetType, nullable=False),
    Column("related_targets", StringSetType, nullable=False),
    Column("related_locations", StringSetType, nullable=False),
    Column("timestamp", LocalDateTime, nullable=True),
    Column("sentence", String, nullable=False, default=""),
    Column("position", Integer, nullable=False, default=0),
)

event_table = Table(
    "event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("raw_actor", String, nullable=False),
    Column("action", String, nullable=False),
    Column("raw_target", String, nullable=False, default=""),
    Column("sentence", String, nullable=False, default="", index=True),
    Column("date_received", LocalDateTime, nullable=False),
    Column("locations", StringTupleType, nullable=False),
    Column("actor_key", String, nullable=False),
    Column("target_key", String, nullable=False),
    Index("ix_event_triple", "actor_key", "action", "target_key"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Alias, entity_alias_table)

    mapper_registry.map_imperatively(Connection, connection_table)

    # writes based on a stale read raise StaleDataError
    mapper_registry.map_imperatively(
        Entity,
        entity_table,
        version_id_col=entity_table.c.row_version,
        properties={
            "_aliases": relationship(
                Alias,
                cascade="all, delete-orphan",
                order_by=entity_alias_table.c.value,
                lazy="selectin",
            ),
            "_connections": relationship(
                Connection,
                cascade="all, delete-orphan",
                order_by=connection_table.c.position,
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(Event, event_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
