"""Enrichment lookup backed by Wikidata search."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from .client import WikidataAPIError, WikidataClient
from .translator import clean_search_name, translate_entity

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from eventkb.adapters.http_resilience import ResilientClient
    from eventkb.config.http_resilience import ResilienceConfig
    from eventkb.config.wikidata import WikidataConfig
    from eventkb.domain.ports.enrichment import Enrichment

    from .schema import QId, WikidataEntity

log = getLogger(__name__)


class WikidataLookup:
    """Search Wikidata for a name and describe the first hit."""

    def __init__(
        self,
        *,
        config: WikidataConfig,
        client: WikidataClient | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client = client or WikidataClient(config=config, client_factory=client_factory)

    async def __aenter__(self) -> WikidataLookup:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search(self, name: str) -> Enrichment | None:
        query = clean_search_name(name)
        hits = await self._client.search(query)
        if not hits:
            log.debug("Wikidata has no match for %r", query)
            return None

        best = hits[0]
        entity = (await self._client.get_entities([best.id])).get(best.id)
        if entity is None:
            return None

        labels = await self._resolve_labels(entity)
        return translate_entity(entity, language=self._config.language, labels=labels)

    async def _resolve_labels(self, entity: WikidataEntity) -> dict[QId, str]:
        ids = entity.referenced_ids()
        if not ids:
            return {}
        try:
            return await self._client.labels(ids)
        except (httpx.HTTPError, WikidataAPIError, ValidationError) as exc:
            # keep the raw item ids rather than losing the whole enrichment
            log.warning("Could not resolve Wikidata labels for %s: %s", entity.id, exc)
            return {}
