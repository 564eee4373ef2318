"""Public domain model surface."""

from __future__ import annotations

from eventkb.domain.model.entity import Identified, new_id
from eventkb.domain.model.enums import (
    ENTITY_COLLECTIONS,
    TYPE_BY_COLLECTION,
    Collection,
    EntityType,
    PlaceCategory,
    Role,
)
from eventkb.domain.model.knowledge import (
    Alias,
    Connection,
    Coordinates,
    Entity,
    EntityDetails,
    Event,
    OrganizationFields,
    PersonFields,
    PlaceFields,
    StoreLocation,
)

__all__ = [  # noqa: RUF022
    # base
    "Identified",
    "new_id",
    # aggregates
    "Entity",
    "Alias",
    "Connection",
    "Event",
    "StoreLocation",
    # typed payloads
    "EntityDetails",
    "PersonFields",
    "OrganizationFields",
    "PlaceFields",
    "Coordinates",
    # enums
    "Collection",
    "EntityType",
    "PlaceCategory",
    "Role",
    "ENTITY_COLLECTIONS",
    "TYPE_BY_COLLECTION",
]
