from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from eventkb.domain.model import Coordinates
from eventkb.domain.ports.enrichment import EnrichmentLookup

if TYPE_CHECKING:
    from eventkb.adapters.wikidata import WikidataLookup
    from tests.helpers.wikidata import FakeWikidataAPI


def test_lookup_satisfies_port(wikidata_lookup: WikidataLookup) -> None:
    assert isinstance(wikidata_lookup, EnrichmentLookup)


def test_first_hit_is_described_with_resolved_labels(wikidata_lookup: WikidataLookup) -> None:
    result = asyncio.run(wikidata_lookup.search("Barack Obama"))

    assert result is not None
    assert result.id == "Q76"
    assert result.label == "Barack Obama"
    assert result.description == "president of the United States"
    assert result.category == "human"
    assert result.occupation == "politician"
    assert result.country == "United States"
    assert result.date_of_birth == "+1961-08-04T00:00:00Z"


def test_search_query_drops_leading_article(
    wikidata_lookup: WikidataLookup, wikidata_api: FakeWikidataAPI
) -> None:
    result = asyncio.run(wikidata_lookup.search("  the   Paris "))

    assert result is not None
    assert wikidata_api.requests[0].url.params["search"] == "Paris"
    assert result.category == "city"
    assert result.country == "France"
    assert result.coordinates == Coordinates(lat=48.856613, lng=2.352222)
    assert result.population == 2145906


def test_no_hits_means_no_enrichment(
    wikidata_lookup: WikidataLookup, wikidata_api: FakeWikidataAPI
) -> None:
    assert asyncio.run(wikidata_lookup.search("Nobody In Particular")) is None
    assert len(wikidata_api.requests) == 1


def test_label_failure_keeps_item_ids(
    wikidata_lookup: WikidataLookup, wikidata_api: FakeWikidataAPI
) -> None:
    wikidata_api.fail_labels = True

    result = asyncio.run(wikidata_lookup.search("Barack Obama"))

    assert result is not None
    assert result.category == "Q5"
    assert result.occupation == "Q82955"
