"""Domain port definitions for adapters."""

from __future__ import annotations

from .enrichment import Enrichment, EnrichmentLookup, NullEnrichmentLookup
from .persistence import EntityRepository, EventRepository, Repository, StoreError
from .unit_of_work import (
    KnowledgeRepositories,
    KnowledgeUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "Enrichment",
    "EnrichmentLookup",
    "EntityRepository",
    "EventRepository",
    "KnowledgeRepositories",
    "KnowledgeUnitOfWork",
    "NullEnrichmentLookup",
    "Repository",
    "RepositoryCollection",
    "StoreError",
    "UnitOfWork",
]
