"""Shared fixtures for Wikidata adapter tests."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from eventkb.adapters.wikidata import WikidataClient, WikidataLookup
from eventkb.config.wikidata import get_wikidata_config
from tests.helpers.wikidata import OBAMA, PARIS, FakeWikidataAPI, offline_factory

if TYPE_CHECKING:
    from collections.abc import Iterator

    from eventkb.config.wikidata import WikidataConfig


@pytest.fixture
def wikidata_config() -> WikidataConfig:
    return get_wikidata_config()


@pytest.fixture
def wikidata_api() -> FakeWikidataAPI:
    return FakeWikidataAPI(
        {"Q76": OBAMA, "Q90": PARIS},
        search={"Barack Obama": ["Q76", "Q649593"], "Paris": ["Q90"]},
    )


@pytest.fixture
def wikidata_client(
    wikidata_config: WikidataConfig, wikidata_api: FakeWikidataAPI
) -> Iterator[WikidataClient]:
    client = WikidataClient(config=wikidata_config, client_factory=offline_factory(wikidata_api))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def wikidata_lookup(
    wikidata_config: WikidataConfig, wikidata_client: WikidataClient
) -> WikidataLookup:
    return WikidataLookup(config=wikidata_config, client=wikidata_client)
