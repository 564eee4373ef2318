"""Build connections from events and attach them to entities without duplicates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eventkb.domain.model import Connection
from eventkb.domain.normalization import split_mention_list

if TYPE_CHECKING:
    from eventkb.domain.model import Entity, Event, Role

log = logging.getLogger(__name__)


class ConnectionRecorder:
    def build(self, event: Event, role: Role) -> Connection:
        """Connection describing ``event`` from the point of view of one ``role``."""

        return Connection(
            event_id=event.id,
            action=event.action,
            role=role,
            related_actors=frozenset(split_mention_list(event.raw_actor)),
            related_targets=frozenset(split_mention_list(event.raw_target)),
            related_locations=frozenset(event.locations),
            timestamp=event.date_received,
            sentence=event.sentence,
        )

    def is_same_event(self, connection: Connection, event: Event) -> bool:
        return connection.same_event_as(self.build(event, connection.role))

    def connection_exists(self, entity: Entity, event: Event, role: Role) -> bool:
        return entity.find_connection(self.build(event, role)) is not None

    def attach(self, entity: Entity, event: Event, role: Role) -> bool:
        """Link ``entity`` to ``event``; returns ``False`` if it was already linked."""

        added = entity.add_connection(self.build(event, role))
        if added:
            log.debug("Connected %s to event %s as %s", entity.name, event.id, role)
        return added
