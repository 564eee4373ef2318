"""Detect events that were already ingested."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eventkb.domain.ports.persistence import StoreError

if TYPE_CHECKING:
    from eventkb.domain.model import Event
    from eventkb.domain.ports.persistence import EventRepository

log = logging.getLogger(__name__)


class EventDeduplicator:
    def __init__(self, repository: EventRepository) -> None:
        self.repository = repository

    def is_duplicate(self, event: Event) -> bool:
        """Return whether the store already holds an equivalent event.

        When the store cannot be queried the event is treated as new.
        """

        try:
            candidates = self.repository.find_candidates(event)
        except StoreError as exc:
            log.warning("Duplicate check failed for event %s, treating as new: %s", event.id, exc)
            return False
        return any(
            candidate.id != event.id and event.is_duplicate_of(candidate)
            for candidate in candidates
        )
