"""Resolve a raw mention to an entity already known to the run or the store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eventkb.domain.model import ENTITY_COLLECTIONS
from eventkb.domain.normalization import variations

if TYPE_CHECKING:
    from eventkb.domain.model import Collection, Entity
    from eventkb.domain.ports.persistence import EntityRepository
    from eventkb.domain.resolution.context import SessionCache

log = logging.getLogger(__name__)


class EntityMatcher:
    """Looks a name up in the session cache first, then in every store collection.

    Store hits are registered in the session cache so later mentions of the same
    name, in any letter case, resolve to the same object.
    """

    def __init__(self, cache: SessionCache, repository: EntityRepository | None = None) -> None:
        self.cache = cache
        self.repository = repository

    def resolve(self, name: str) -> Entity | None:
        if not name.strip():
            return None
        cached = self.cache.find(name)
        if cached is not None:
            return cached
        if self.repository is None:
            return None

        for collection in ENTITY_COLLECTIONS:
            found = self._find_in_collection(collection, name)
            if found is not None:
                log.debug("Matched %r to stored %s %s", name, collection, found.id)
                self.cache.register(found)
                return found
        return None

    def _find_in_collection(self, collection: Collection, name: str) -> Entity | None:
        assert self.repository is not None
        for variation in variations(name):
            for finder in (self.repository.find_by_name, self.repository.find_by_alias):
                hits = finder(collection, variation)
                if hits:
                    return hits[0]
        return None
