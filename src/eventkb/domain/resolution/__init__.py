"""Entity resolution: matching mentions to entities and recording connections."""

from __future__ import annotations

from .connections import ConnectionRecorder
from .context import EnrichmentCache, NameLocks, ResolutionContext, SessionCache
from .events import EventDeduplicator
from .matcher import EntityMatcher
from .processor import MentionOutcome, MentionProcessor

__all__ = [
    "ConnectionRecorder",
    "EnrichmentCache",
    "EntityMatcher",
    "EventDeduplicator",
    "MentionOutcome",
    "MentionProcessor",
    "NameLocks",
    "ResolutionContext",
    "SessionCache",
]
