"""Wikidata action API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from eventkb.adapters.http_resilience import ResilientClient
from eventkb.config.wikidata import WIKIDATA_API_PATH

from .schema import WikidataEntitiesResponse, WikidataSearchHit, WikidataSearchResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from eventkb.config.http_resilience import ResilienceConfig
    from eventkb.config.wikidata import WikidataConfig

    from .schema import QId, WikidataEntity

log = getLogger(__name__)

# wbgetentities accepts at most 50 ids per request
MAX_IDS_PER_REQUEST = 50


class WikidataAPIError(RuntimeError):
    """Raised when the Wikidata API returns an unexpected response."""


class WikidataClient:
    """Low-level async client for ``wbsearchentities`` and ``wbgetentities``.

    The underlying ``ResilientClient`` is built on first use and reused until
    ``aclose()``; use the client as an async context manager to release it.
    """

    def __init__(
        self,
        *,
        config: WikidataConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> WikidataClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def search(self, query: str) -> list[WikidataSearchHit]:
        params = {
            "action": "wbsearchentities",
            "search": query,
            "language": self._config.language,
            "limit": str(self._config.search_limit),
            "format": "json",
        }
        payload = await self._perform_request(params)
        return WikidataSearchResponse.model_validate(payload).search

    async def get_entities(
        self, ids: Sequence[QId], *, props: Sequence[str] | None = None
    ) -> dict[QId, WikidataEntity]:
        if not ids:
            return {}
        entities: dict[QId, WikidataEntity] = {}
        for start in range(0, len(ids), MAX_IDS_PER_REQUEST):
            params = {
                "action": "wbgetentities",
                "ids": "|".join(ids[start : start + MAX_IDS_PER_REQUEST]),
                "format": "json",
            }
            if props:
                params["props"] = "|".join(props)
                params["languages"] = self._config.language
            payload = await self._perform_request(params)
            response = WikidataEntitiesResponse.model_validate(payload)
            entities.update(
                (entity_id, entity)
                for entity_id, entity in response.entities.items()
                if entity.missing is None
            )
        return entities

    async def labels(self, ids: Sequence[QId]) -> dict[QId, str]:
        """Labels in the configured language for ``ids``; unknown ids are omitted."""

        entities = await self.get_entities(ids, props=("labels",))
        labels: dict[QId, str] = {}
        for entity_id, entity in entities.items():
            label = entity.label(self._config.language)
            if label:
                labels[entity_id] = label
        return labels

    def _session(self) -> ResilientClient:
        # shared by every request so they all go through one rate limiter and cache
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    async def _perform_request(self, params: dict[str, str]) -> dict[str, object]:
        if self._resilience.base_url is None:
            raise WikidataAPIError("Missing Wikidata base_url in resilience configuration")
        response = await self._session().get(WIKIDATA_API_PATH, params=params)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise WikidataAPIError("Unexpected Wikidata response payload")
        if "error" in payload:
            error = payload["error"]
            info = error.get("info") if isinstance(error, dict) else error
            raise WikidataAPIError(f"Wikidata API error: {info}")
        log.debug("Wikidata %s answered", params["action"])
        return payload
