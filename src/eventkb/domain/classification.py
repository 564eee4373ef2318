"""Entity type inference from enrichment metadata and name heuristics."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from eventkb.domain.model import (
    Entity,
    EntityDetails,
    EntityType,
    OrganizationFields,
    PersonFields,
    PlaceCategory,
    PlaceFields,
    Role,
)

if TYPE_CHECKING:
    from eventkb.domain.ports.enrichment import Enrichment

PERSON_CATEGORY_TERMS: Final[tuple[str, ...]] = ("human", "person")
ORGANIZATION_CATEGORY_TERMS: Final[tuple[str, ...]] = (
    "organization",
    "organisation",
    "company",
    "corporation",
    "institution",
)
PLACE_CATEGORY_TERMS: Final[tuple[str, ...]] = (
    "city",
    "country",
    "state",
    "province",
    "region",
    "town",
    "village",
    "county",
    "capital",
    "territory",
    "municipality",
    "island",
    "continent",
)

PERSON_NAME_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"^(?:Mr|Mrs|Ms|Dr|Prof)\.\s"),
    re.compile(r"\b(?:Jr|Sr)\.(?!\w)"),
    re.compile(r"\b(?:II|III|IV)\b"),
)
# Short abbreviations only count as whole words ("Inc" but not "Lincoln").
ORGANIZATION_NAME_ABBREVIATIONS: Final = re.compile(r"\b(?:corp|inc|llc|ltd|plc|co)\b")
ORGANIZATION_NAME_KEYWORDS: Final[tuple[str, ...]] = (
    "company",
    "corporation",
    "institute",
    "university",
    "college",
    "association",
    "agency",
    "foundation",
    "ministry",
    "department",
)
PLACE_NAME_KEYWORDS: Final[tuple[str, ...]] = (
    "city",
    "river",
    "county",
    "lake",
    "mountain",
    "island",
    "valley",
    "province",
    "state of",
    "republic",
    "kingdom",
)

COMMON_COUNTRIES: Final[frozenset[str]] = frozenset(
    {
        "united states",
        "usa",
        "u.s.",
        "america",
        "canada",
        "mexico",
        "brazil",
        "argentina",
        "united kingdom",
        "uk",
        "u.k.",
        "england",
        "france",
        "germany",
        "italy",
        "spain",
        "russia",
        "china",
        "japan",
        "india",
        "australia",
        "south africa",
    }
)
KNOWN_STATES: Final = re.compile(
    r"\b(?:california|texas|florida|new york|illinois|pennsylvania|ohio|georgia"
    r"|north carolina|michigan)\b"
)
KNOWN_CITIES: Final = re.compile(
    r"\b(?:new york|los angeles|chicago|houston|philadelphia|phoenix|san antonio"
    r"|san diego|dallas|san jose)\b"
)


@dataclass(slots=True)
class EntityClassifier:
    """Infers an ``EntityType`` for a name; first matching rule wins.

    Enrichment category terms are consulted before name heuristics. ``role_hint``
    only lets the classifier skip checks that cannot match; it never changes the
    result.
    """

    country_names: frozenset[str] = field(default=COMMON_COUNTRIES)

    def classify(
        self,
        name: str,
        enrichment: Enrichment | None = None,
        role_hint: Role | None = None,
    ) -> EntityType:
        # Without enrichment the category rules are all misses for actors/targets.
        if enrichment is not None or role_hint not in (Role.ACTOR, Role.TARGET):
            from_enrichment = self._classify_enrichment(enrichment)
            if from_enrichment is not None:
                return from_enrichment
        return self._classify_name(name)

    def classify_place_category(
        self, name: str, enrichment: Enrichment | None = None
    ) -> PlaceCategory:
        category = _category_label(enrichment)
        if "country" in category:
            return PlaceCategory.COUNTRY
        if "city" in category:
            return PlaceCategory.CITY
        if "state" in category or "province" in category:
            return PlaceCategory.STATE

        lowered = name.strip().lower()
        if lowered in self.country_names:
            return PlaceCategory.COUNTRY
        if "state" in lowered or "province" in lowered or KNOWN_STATES.search(lowered):
            return PlaceCategory.STATE
        if "city" in lowered or "town" in lowered or KNOWN_CITIES.search(lowered):
            return PlaceCategory.CITY
        return PlaceCategory.PLACE

    def _classify_enrichment(self, enrichment: Enrichment | None) -> EntityType | None:
        if enrichment is None:
            return None
        category = _category_label(enrichment)
        if _contains_any(category, PERSON_CATEGORY_TERMS):
            return EntityType.PERSON
        if _contains_any(category, ORGANIZATION_CATEGORY_TERMS):
            return EntityType.ORGANIZATION
        if _contains_any(category, PLACE_CATEGORY_TERMS) or enrichment.coordinates is not None:
            return EntityType.PLACE
        return None

    def _classify_name(self, name: str) -> EntityType:
        if any(pattern.search(name) for pattern in PERSON_NAME_PATTERNS):
            return EntityType.PERSON
        lowered = name.lower()
        if ORGANIZATION_NAME_ABBREVIATIONS.search(lowered) or _contains_any(
            lowered, ORGANIZATION_NAME_KEYWORDS
        ):
            return EntityType.ORGANIZATION
        if _contains_any(lowered, PLACE_NAME_KEYWORDS):
            return EntityType.PLACE
        return EntityType.UNKNOWN


def build_entity(
    name: str,
    entity_type: EntityType,
    *,
    enrichment: Enrichment | None = None,
    category: PlaceCategory | None = None,
) -> Entity:
    """Create a new entity of ``entity_type`` carrying the enrichment fields it supports."""

    return Entity(
        name=name,
        entity_type=entity_type,
        category=category if entity_type == EntityType.PLACE else None,
        external_id=enrichment.id if enrichment is not None else None,
        description=enrichment.description if enrichment is not None else "",
        **_details_kwargs(entity_type, enrichment),
    )


def _details_kwargs(
    entity_type: EntityType, enrichment: Enrichment | None
) -> dict[str, EntityDetails]:
    if enrichment is None:
        return {}
    match entity_type:
        case EntityType.PERSON:
            return {
                "person": PersonFields(
                    occupation=enrichment.occupation,
                    date_of_birth=enrichment.date_of_birth,
                    country=enrichment.country,
                )
            }
        case EntityType.ORGANIZATION:
            return {
                "organization": OrganizationFields(
                    founded=enrichment.founded,
                    country=enrichment.country,
                )
            }
        case EntityType.PLACE:
            return {
                "place": PlaceFields(
                    coordinates=enrichment.coordinates,
                    country=enrichment.country,
                    population=enrichment.population,
                )
            }
        case _:
            return {}


def _category_label(enrichment: Enrichment | None) -> str:
    if enrichment is None or not enrichment.category:
        return ""
    return enrichment.category.lower()


def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
    return any(term in text for term in terms)
