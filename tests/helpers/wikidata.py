"""Canned Wikidata payloads and an offline API served through ``httpx.MockTransport``."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import httpx

from eventkb.adapters.http_resilience import ResilientClient
from eventkb.config.http_resilience import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

    from eventkb.config.http_resilience import ResilienceConfig

type WikidataPayload = dict[str, object]
type Handler = Callable[[httpx.Request], httpx.Response]


def item_claim(item_id: str) -> WikidataPayload:
    return {"mainsnak": {"datavalue": {"value": {"id": item_id}, "type": "wikibase-entityid"}}}


def value_claim(value: object) -> WikidataPayload:
    return {"mainsnak": {"datavalue": {"value": value}}}


def labelled(entity_id: str, label: str) -> WikidataPayload:
    return {"id": entity_id, "labels": {"en": {"language": "en", "value": label}}}


OBAMA: WikidataPayload = {
    "id": "Q76",
    "labels": {"en": {"language": "en", "value": "Barack Obama"}},
    "descriptions": {"en": {"language": "en", "value": "president of the United States"}},
    "claims": {
        "P31": [item_claim("Q5")],
        "P106": [item_claim("Q82955")],
        "P17": [item_claim("Q30")],
        "P569": [value_claim({"time": "+1961-08-04T00:00:00Z", "precision": 11})],
    },
}

PARIS: WikidataPayload = {
    "id": "Q90",
    "labels": {"en": {"language": "en", "value": "Paris"}},
    "claims": {
        "P31": [item_claim("Q515")],
        "P17": [item_claim("Q142")],
        "P625": [value_claim({"latitude": 48.856613, "longitude": 2.352222})],
        "P1082": [value_claim({"amount": "+2145906", "unit": "1"})],
    },
}

LABELS: dict[str, str] = {
    "Q5": "human",
    "Q82955": "politician",
    "Q30": "United States",
    "Q515": "city",
    "Q142": "France",
}


class FakeWikidataAPI:
    """Request handler answering ``wbsearchentities`` and ``wbgetentities``."""

    def __init__(
        self,
        entities: dict[str, WikidataPayload],
        *,
        search: dict[str, list[str]] | None = None,
        labels: dict[str, str] | None = None,
    ) -> None:
        self.entities = entities
        self.search = search or {}
        self.labels = labels if labels is not None else LABELS
        self.requests: list[httpx.Request] = []
        self.fail_labels = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        match params.get("action"):
            case "wbsearchentities":
                hits = [
                    {"id": entity_id, "label": entity_id}
                    for entity_id in self.search.get(params["search"], [])
                ]
                return httpx.Response(200, json={"search": hits})
            case "wbgetentities":
                return self._entities(params)
            case _:
                return httpx.Response(200, json={"error": {"info": "unknown action"}})

    def _entities(self, params: httpx.QueryParams) -> httpx.Response:
        ids = params["ids"].split("|")
        if params.get("props") == "labels":
            if self.fail_labels:
                return httpx.Response(404, json={})
            source = {key: labelled(key, label) for key, label in self.labels.items()}
        else:
            source = self.entities
        found = {entity_id: source[entity_id] for entity_id in ids if entity_id in source}
        missing = {key: {"id": key, "missing": ""} for key in ids if key not in found}
        return httpx.Response(200, json={"entities": {**found, **missing}})


def offline_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    """Client factory that serves every request from ``handler`` with no retries or cache."""

    def factory(config: ResilienceConfig) -> ResilientClient:
        config = replace(config, cache=None, ratelimit=None, retry=RetryPolicy(total=0))
        return ResilientClient(config, transport=httpx.MockTransport(handler))

    return factory
