"""Wikidata action API response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type QId = str  # e.g. "Q90"
type PropertyId = str  # e.g. "P31"

INSTANCE_OF: PropertyId = "P31"
OCCUPATION: PropertyId = "P106"
COUNTRY: PropertyId = "P17"
COORDINATES: PropertyId = "P625"
POPULATION: PropertyId = "P1082"
DATE_OF_BIRTH: PropertyId = "P569"
FOUNDED: PropertyId = "P571"


class WikidataBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class WikidataSearchHit(WikidataBaseModel):
    id: QId
    label: str = ""
    description: str = ""


class WikidataSearchResponse(WikidataBaseModel):
    search: list[WikidataSearchHit] = Field(default_factory=list)


class WikidataDataValue(WikidataBaseModel):
    value: object = None
    type: str | None = None


class WikidataSnak(WikidataBaseModel):
    snaktype: str = "value"
    datavalue: WikidataDataValue | None = None


class WikidataClaim(WikidataBaseModel):
    mainsnak: WikidataSnak
    rank: str = "normal"


class WikidataLanguageValue(WikidataBaseModel):
    language: str = ""
    value: str = ""


class WikidataEntity(WikidataBaseModel):
    id: QId
    missing: str | None = None
    labels: dict[str, WikidataLanguageValue] = Field(default_factory=dict)
    descriptions: dict[str, WikidataLanguageValue] = Field(default_factory=dict)
    claims: dict[PropertyId, list[WikidataClaim]] = Field(default_factory=dict)

    _main_properties: ClassVar[tuple[PropertyId, ...]] = (INSTANCE_OF, OCCUPATION, COUNTRY)

    def label(self, language: str) -> str:
        entry = self.labels.get(language)
        return entry.value if entry else ""

    def description(self, language: str) -> str:
        entry = self.descriptions.get(language)
        return entry.value if entry else ""

    def first_value(self, property_id: PropertyId) -> object:
        """``datavalue.value`` of the first claim for ``property_id`` that has one."""

        for claim in self.claims.get(property_id, ()):
            if claim.mainsnak.datavalue is not None:
                return claim.mainsnak.datavalue.value
        return None

    def referenced_ids(self) -> list[QId]:
        """Item ids behind the properties whose labels we display."""

        ids: list[QId] = []
        for property_id in self._main_properties:
            value = self.first_value(property_id)
            if isinstance(value, dict):
                item_id = value.get("id")  # pyright: ignore[reportUnknownMemberType]
                if isinstance(item_id, str):
                    ids.append(item_id)
        return list(dict.fromkeys(ids))


class WikidataEntitiesResponse(WikidataBaseModel):
    entities: dict[QId, WikidataEntity] = Field(default_factory=dict)
