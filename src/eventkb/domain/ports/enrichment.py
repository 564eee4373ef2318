"""Port definitions for name enrichment lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from eventkb.domain.model import Coordinates


@dataclass(frozen=True, slots=True)
class Enrichment:
    """Structured metadata about a name, as returned by an external lookup."""

    id: str
    label: str = ""
    description: str = ""
    category: str | None = None
    coordinates: Coordinates | None = None
    country: str | None = None
    population: int | None = None
    occupation: str | None = None
    founded: str | None = None
    date_of_birth: str | None = None


@runtime_checkable
class EnrichmentLookup(Protocol):
    """Async lookup returning enrichment for a name, or ``None`` when unknown.

    Implementations may raise or time out; callers treat both as "no data".
    """

    async def search(self, name: str) -> Enrichment | None: ...


class NullEnrichmentLookup:
    """Lookup that never finds anything (offline ingestion)."""

    async def search(self, name: str) -> Enrichment | None:
        del name
        return None
