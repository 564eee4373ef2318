"""Knowledge base aggregates: entities, their connections, and the events behind them.

``Entity`` is the aggregate root. Aliases and connections are owned by exactly one
entity and are only mutated through it, which keeps ``connection_count`` and the
alias set consistent with the name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from eventkb.domain.dates import same_calendar_day, utc_now
from eventkb.domain.model.entity import Identified
from eventkb.domain.model.enums import Collection, EntityType, PlaceCategory, Role
from eventkb.domain.normalization import collapse_whitespace, name_key, names_match

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


# Per-type payloads ----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class PersonFields:
    occupation: str | None = None
    date_of_birth: str | None = None
    country: str | None = None


@dataclass(frozen=True, slots=True)
class OrganizationFields:
    founded: str | None = None
    country: str | None = None


@dataclass(frozen=True, slots=True)
class PlaceFields:
    coordinates: Coordinates | None = None
    country: str | None = None
    population: int | None = None


type EntityDetails = PersonFields | OrganizationFields | PlaceFields

_PAYLOAD_TYPES: dict[EntityType, type[EntityDetails]] = {
    EntityType.PERSON: PersonFields,
    EntityType.ORGANIZATION: OrganizationFields,
    EntityType.PLACE: PlaceFields,
}


class StoreLocation(NamedTuple):
    collection: Collection
    record_id: str


# Events ----------------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class Event(Identified):
    """One ingested row. Treated as immutable once built."""

    raw_actor: str
    action: str
    raw_target: str = ""
    sentence: str = ""
    date_received: datetime
    locations: tuple[str, ...] = ()

    # whitespace-insensitive lookup keys for the duplicate pre-filter
    actor_key: str = field(init=False)
    target_key: str = field(init=False)

    def __post_init__(self) -> None:
        self.locations = tuple(self.locations)
        self.actor_key = collapse_whitespace(self.raw_actor)
        self.target_key = collapse_whitespace(self.raw_target)

    @property
    def store_location(self) -> StoreLocation:
        return StoreLocation(Collection.EVENTS, str(self.id))

    def is_duplicate_of(self, other: Event) -> bool:
        """Identical non-empty sentences, or same triple on the same calendar day."""

        sentence = self.sentence.strip()
        if sentence and sentence == other.sentence.strip():
            return True
        return (
            self.raw_actor == other.raw_actor
            and self.action == other.action
            and self.raw_target == other.raw_target
            and same_calendar_day(self.date_received, other.date_received)
        )


# Connections -----------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class Connection(Identified):
    """Link from one entity to one event in a given role."""

    event_id: UUID
    action: str
    role: Role
    related_actors: frozenset[str] = frozenset()
    related_targets: frozenset[str] = frozenset()
    related_locations: frozenset[str] = frozenset()
    timestamp: datetime | None = None
    sentence: str = ""
    position: int = 0

    def same_event_as(self, other: Connection) -> bool:
        if self.event_id == other.event_id:
            return True
        return (
            self.related_actors == other.related_actors
            and self.related_targets == other.related_targets
            and self.action == other.action
            and same_calendar_day(self.timestamp, other.timestamp)
        )

    def duplicates(self, other: Connection) -> bool:
        """Same role and action on the same event."""

        return (
            self.role == other.role and self.action == other.action and self.same_event_as(other)
        )

    def copy(self) -> Connection:
        """Return an unowned copy with a fresh identity."""

        return Connection(
            event_id=self.event_id,
            action=self.action,
            role=self.role,
            related_actors=self.related_actors,
            related_targets=self.related_targets,
            related_locations=self.related_locations,
            timestamp=self.timestamp,
            sentence=self.sentence,
        )


# Entities --------------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class Alias(Identified):
    value: str
    value_key: str = field(init=False)

    def __post_init__(self) -> None:
        self.value_key = name_key(self.value)


@dataclass(eq=False, kw_only=True)
class Entity(Identified):
    """A resolved real-world referent tracked across events.

    Exactly one of ``person``/``organization``/``place`` may be populated and it
    must match ``entity_type``; ``category`` is only meaningful for places.
    """

    name: str
    entity_type: EntityType = EntityType.UNKNOWN
    category: PlaceCategory | None = None
    external_id: str | None = None
    description: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None

    person: PersonFields | None = None
    organization: OrganizationFields | None = None
    place: PlaceFields | None = None

    name_key: str = field(init=False)
    connection_count: int = field(default=0, init=False)
    _aliases: list[Alias] = field(default_factory=list["Alias"], init=False, repr=False)
    _connections: list[Connection] = field(
        default_factory=list["Connection"], init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.external_id = self.external_id or None
        self.name_key = name_key(self.name)
        self.connection_count = len(self._connections)
        self.add_alias(self.name)
        _check_variant(self.entity_type, self.category, self.details_by_type())

    # identity / placement

    @property
    def collection(self) -> Collection:
        return self.entity_type.collection

    @property
    def store_location(self) -> StoreLocation:
        return StoreLocation(self.collection, str(self.id))

    # aliases

    @property
    def aliases(self) -> frozenset[str]:
        return frozenset(alias.value for alias in self._aliases)

    @property
    def alias_keys(self) -> frozenset[str]:
        return frozenset(alias.value_key for alias in self._aliases)

    def add_alias(self, value: str) -> bool:
        """Add ``value`` unless an alias with the same comparison key exists."""

        if not value.strip():
            return False
        key = name_key(value)
        if any(alias.value_key == key for alias in self._aliases):
            return False
        self._aliases.append(Alias(value=value))
        return True

    def is_known_as(self, name: str) -> bool:
        """Case-insensitive match against the name or any alias."""

        return names_match(name, self.name, aliases=self.aliases)

    # connections

    @property
    def connections(self) -> tuple[Connection, ...]:
        return tuple(self._connections)

    def find_connection(self, candidate: Connection) -> Connection | None:
        for connection in self._connections:
            if connection.duplicates(candidate):
                return connection
        return None

    def add_connection(self, connection: Connection) -> bool:
        """Append ``connection`` unless an equivalent one is already present."""

        if self.find_connection(connection) is not None:
            return False
        connection.position = len(self._connections)
        self._connections.append(connection)
        self.connection_count = len(self._connections)
        return True

    def absorb(self, other: Entity) -> int:
        """Fold ``other``'s names and connections into this entity.

        Connections are copied, never shared. Returns the number of connections
        that were new to this entity.
        """

        for alias in sorted(other.aliases | {other.name}):
            self.add_alias(alias)
        added = 0
        for connection in other.connections:
            if self.add_connection(connection.copy()):
                added += 1
        return added

    # type variant

    def details_by_type(self) -> dict[EntityType, EntityDetails | None]:
        return {
            EntityType.PERSON: self.person,
            EntityType.ORGANIZATION: self.organization,
            EntityType.PLACE: self.place,
        }

    @property
    def details(self) -> EntityDetails | None:
        return self.details_by_type().get(self.entity_type)


def _check_variant(
    entity_type: EntityType,
    category: PlaceCategory | None,
    payloads: dict[EntityType, EntityDetails | None],
) -> None:
    if category is not None and entity_type != EntityType.PLACE:
        raise ValueError(f"category is only valid for places, not {entity_type}")
    for payload_type, payload in payloads.items():
        if payload is None:
            continue
        if payload_type != entity_type:
            raise ValueError(f"{payload_type} payload set on a {entity_type} entity")
        expected = _PAYLOAD_TYPES.get(entity_type)
        if expected is None or not isinstance(payload, expected):
            raise ValueError(f"{type(payload).__name__} does not belong to {entity_type}")

