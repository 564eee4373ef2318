"""Per-run resolution state: session entity cache, name locks and enrichment memo."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from eventkb.config.ingest import DEFAULT_ENRICHMENT_CONCURRENCY
from eventkb.domain.normalization import name_key

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from eventkb.domain.model import Entity
    from eventkb.domain.ports.enrichment import Enrichment, EnrichmentLookup

log = logging.getLogger(__name__)


class SessionCache:
    """Entities seen during the current run, indexed by name and alias keys."""

    def __init__(self) -> None:
        self._entities: dict[object, Entity] = {}
        self._by_key: dict[str, Entity] = {}

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(tuple(self._entities.values()))

    def __contains__(self, entity: object) -> bool:
        return getattr(entity, "id", None) in self._entities

    def find(self, name: str) -> Entity | None:
        """Return the cached entity known as ``name`` (case-insensitive), if any."""

        key = name_key(name)
        if not key:
            return None
        entity = self._by_key.get(key)
        if entity is not None and entity.is_known_as(name):
            return entity
        # aliases may have grown since the entity was indexed
        for candidate in self._entities.values():
            if candidate.is_known_as(name):
                self._by_key[key] = candidate
                return candidate
        return None

    def register(self, entity: Entity) -> None:
        self._entities.setdefault(entity.id, entity)
        self._by_key.setdefault(entity.name_key, entity)
        for key in entity.alias_keys:
            self._by_key.setdefault(key, entity)

    def clear(self) -> None:
        self._entities.clear()
        self._by_key.clear()


class NameLocks:
    """Registry of ``asyncio.Lock`` objects keyed by name key.

    A lock only lives while some task holds or awaits it, so the registry never
    carries locks bound to an event loop that has since closed.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


class EnrichmentCache:
    """Memoizes enrichment lookups per name key for the lifetime of a run.

    Failed lookups are logged and remembered as ``None``; nothing expires until
    ``clear()`` is called.
    """

    def __init__(
        self,
        lookup: EnrichmentLookup,
        *,
        max_concurrency: int = DEFAULT_ENRICHMENT_CONCURRENCY,
    ) -> None:
        self.lookup = lookup
        self.max_concurrency = max(1, max_concurrency)
        self._results: dict[str, Enrichment | None] = {}
        self._locks = NameLocks()
        self._limiter: asyncio.Semaphore | None = None
        self._limiter_loop: asyncio.AbstractEventLoop | None = None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name_key(name) in self._results

    async def get(self, name: str) -> Enrichment | None:
        key = name_key(name)
        if key in self._results:
            return self._results[key]
        async with self._locks.hold(key):
            if key in self._results:
                return self._results[key]
            async with self._limiter_for_loop():
                result = await self._search(name)
            self._results[key] = result
            return result

    def clear(self) -> None:
        self._results.clear()

    async def _search(self, name: str) -> Enrichment | None:
        try:
            result = await self.lookup.search(name)
        except Exception as exc:  # noqa: BLE001 - any lookup failure means "no data"
            log.warning("Enrichment lookup failed for %r: %s", name, exc)
            return None
        if result is None:
            log.debug("No enrichment found for %r", name)
        return result

    def _limiter_for_loop(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._limiter is None or self._limiter_loop is not loop:
            self._limiter = asyncio.Semaphore(self.max_concurrency)
            self._limiter_loop = loop
        return self._limiter


@dataclass(slots=True)
class ResolutionContext:
    """Everything a single ingestion run shares between its mention tasks."""

    enrichment: EnrichmentCache
    entities: SessionCache = field(default_factory=SessionCache)
    name_locks: NameLocks = field(default_factory=NameLocks)

    @classmethod
    def create(
        cls,
        lookup: EnrichmentLookup,
        *,
        enrichment_concurrency: int = DEFAULT_ENRICHMENT_CONCURRENCY,
    ) -> ResolutionContext:
        return cls(enrichment=EnrichmentCache(lookup, max_concurrency=enrichment_concurrency))

    def reset(self) -> None:
        """Forget cached entities and enrichment results."""

        self.entities.clear()
        self.enrichment.clear()
