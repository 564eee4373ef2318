"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Collection(StrEnum):
    """Store collections. One per entity type bucket plus events."""

    PEOPLE = "people"
    ORGANIZATIONS = "organizations"
    PLACES = "places"
    UNKNOWN = "unknown"
    EVENTS = "events"


class EntityType(StrEnum):
    PERSON = "person"
    ORGANIZATION = "organization"
    PLACE = "place"
    UNKNOWN = "unknown"

    @property
    def collection(self) -> Collection:
        return _COLLECTION_BY_TYPE[self]


class Role(StrEnum):
    """Role an entity plays in an event."""

    ACTOR = "actor"
    TARGET = "target"
    LOCATION = "location"


class PlaceCategory(StrEnum):
    COUNTRY = "country"
    STATE = "state"
    CITY = "city"
    PLACE = "place"


_COLLECTION_BY_TYPE: dict[EntityType, Collection] = {
    EntityType.PERSON: Collection.PEOPLE,
    EntityType.ORGANIZATION: Collection.ORGANIZATIONS,
    EntityType.PLACE: Collection.PLACES,
    EntityType.UNKNOWN: Collection.UNKNOWN,
}

ENTITY_COLLECTIONS: tuple[Collection, ...] = tuple(_COLLECTION_BY_TYPE.values())
TYPE_BY_COLLECTION: dict[Collection, EntityType] = {
    collection: entity_type for entity_type, collection in _COLLECTION_BY_TYPE.items()
}
