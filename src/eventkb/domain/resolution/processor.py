"""Resolve, create and connect the entity behind one mention of an event."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from eventkb.domain.classification import EntityClassifier, build_entity
from eventkb.domain.model import EntityType, Role
from eventkb.domain.normalization import collapse_whitespace, name_key
from eventkb.domain.resolution.connections import ConnectionRecorder
from eventkb.domain.resolution.matcher import EntityMatcher

if TYPE_CHECKING:
    from eventkb.domain.model import Entity, Event
    from eventkb.domain.ports.persistence import EntityRepository
    from eventkb.domain.resolution.context import ResolutionContext

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MentionOutcome:
    entity: Entity
    created: bool
    connected: bool


class MentionProcessor:
    """Runs the per-mention pipeline: match, else enrich/classify/create, then connect.

    Creation is serialized per name key through the context's name locks, so
    concurrent mentions of the same name yield a single entity.
    """

    def __init__(
        self,
        context: ResolutionContext,
        repository: EntityRepository | None = None,
        *,
        classifier: EntityClassifier | None = None,
        recorder: ConnectionRecorder | None = None,
    ) -> None:
        self.context = context
        self.repository = repository
        self.classifier = classifier or EntityClassifier()
        self.recorder = recorder or ConnectionRecorder()
        self.matcher = EntityMatcher(context.entities, repository)

    async def process(self, name: str, role: Role, event: Event) -> MentionOutcome:
        name = collapse_whitespace(name)
        if not name:
            raise ValueError("Empty mention")

        async with self.context.name_locks.hold(name_key(name)):
            entity = self.matcher.resolve(name)
            created = entity is None
            if entity is None:
                entity = await self._create(name, role)

        connected = self.recorder.attach(entity, event, role)
        return MentionOutcome(entity=entity, created=created, connected=connected)

    async def _create(self, name: str, role: Role) -> Entity:
        enrichment = await self.context.enrichment.get(name)
        if role is Role.LOCATION:
            entity = build_entity(
                name,
                EntityType.PLACE,
                enrichment=enrichment,
                category=self.classifier.classify_place_category(name, enrichment),
            )
        else:
            entity_type = self.classifier.classify(name, enrichment, role_hint=role)
            category = (
                self.classifier.classify_place_category(name, enrichment)
                if entity_type is EntityType.PLACE
                else None
            )
            entity = build_entity(name, entity_type, enrichment=enrichment, category=category)

        self.context.entities.register(entity)
        if self.repository is not None:
            self.repository.add(entity)
        log.info("Created %s %r", entity.entity_type, entity.name)
        return entity
