"""Translate Wikidata entities into domain enrichment records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from eventkb.domain.model import Coordinates
from eventkb.domain.normalization import collapse_whitespace, strip_leading_article
from eventkb.domain.ports.enrichment import Enrichment

from .schema import (
    COORDINATES,
    COUNTRY,
    DATE_OF_BIRTH,
    FOUNDED,
    INSTANCE_OF,
    OCCUPATION,
    POPULATION,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import PropertyId, QId, WikidataEntity


def clean_search_name(name: str) -> str:
    """Drop one leading article and collapse whitespace; never returns an empty query."""

    cleaned = collapse_whitespace(name)
    cleaned = collapse_whitespace(strip_leading_article(cleaned) or cleaned)
    return cleaned or name


def translate_entity(
    entity: WikidataEntity,
    *,
    language: str,
    labels: Mapping[QId, str] | None = None,
) -> Enrichment:
    """Build an ``Enrichment`` from ``entity``; item references use ``labels`` when known."""

    resolved = labels or {}
    return Enrichment(
        id=entity.id,
        label=entity.label(language),
        description=entity.description(language),
        category=_item_label(entity, INSTANCE_OF, resolved),
        coordinates=_coordinates(entity.first_value(COORDINATES)),
        country=_item_label(entity, COUNTRY, resolved),
        population=_quantity(entity.first_value(POPULATION)),
        occupation=_item_label(entity, OCCUPATION, resolved),
        founded=_scalar(entity.first_value(FOUNDED)),
        date_of_birth=_scalar(entity.first_value(DATE_OF_BIRTH)),
    )


def _item_label(
    entity: WikidataEntity, property_id: PropertyId, labels: Mapping[QId, str]
) -> str | None:
    value = _scalar(entity.first_value(property_id))
    if value is None:
        return None
    return labels.get(value, value)


def _scalar(value: object) -> str | None:
    """String form of a datavalue: plain strings, or the time/text/id of an object."""

    if isinstance(value, str):
        return value or None
    if not isinstance(value, dict):
        return None
    data = cast(dict[str, Any], value)
    for key in ("time", "text", "id"):
        item = data.get(key)
        if isinstance(item, str) and item:
            return item
    return None


def _coordinates(value: object) -> Coordinates | None:
    if not isinstance(value, dict):
        return None
    data = cast(dict[str, Any], value)
    latitude = data.get("latitude")
    longitude = data.get("longitude")
    if not isinstance(latitude, int | float) or not isinstance(longitude, int | float):
        return None
    return Coordinates(lat=float(latitude), lng=float(longitude))


def _quantity(value: object) -> int | None:
    if not isinstance(value, dict):
        return None
    amount = cast(dict[str, Any], value).get("amount")
    if not isinstance(amount, str):
        return None
    try:
        return int(float(amount.lstrip("+")))
    except ValueError:
        return None
