"""Wikidata enrichment adapter."""

from __future__ import annotations

from .client import WikidataAPIError, WikidataClient
from .lookup import WikidataLookup
from .schema import WikidataEntitiesResponse, WikidataEntity, WikidataSearchResponse
from .translator import clean_search_name, translate_entity

__all__ = [
    "WikidataAPIError",
    "WikidataClient",
    "WikidataEntitiesResponse",
    "WikidataEntity",
    "WikidataLookup",
    "WikidataSearchResponse",
    "clean_search_name",
    "translate_entity",
]
