"""Ports for persisting knowledge base aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from eventkb.domain.model import Collection, Entity, EntityType, Event


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class EntityRepository(Repository["Entity"], Protocol):
    """Persistence contract for entities across the per-type collections."""

    def get(self, record_id: str) -> Entity | None: ...

    def find_by_name(self, collection: Collection, value: str) -> Sequence[Entity]:
        """Entities in ``collection`` whose name equals ``value`` (case-insensitive)."""
        ...

    def find_by_alias(self, collection: Collection, value: str) -> Sequence[Entity]:
        """Entities in ``collection`` whose alias set contains ``value`` (case-insensitive)."""
        ...

    def find_by_external_id(self, entity_type: EntityType, external_id: str) -> Sequence[Entity]:
        ...

    def lock_external_id(self, entity_type: EntityType, external_id: str) -> None:
        """Keep other writers off the entities sharing ``external_id`` until commit or rollback."""
        ...

    def duplicate_external_ids(self, entity_type: EntityType) -> Sequence[str]:
        """External ids shared by more than one entity of ``entity_type``."""
        ...

    def list_all(self, collection: Collection) -> Sequence[Entity]: ...

    def update(self, entity: Entity) -> None: ...

    def remove(self, entity: Entity) -> None: ...


@runtime_checkable
class EventRepository(Repository["Event"], Protocol):
    """Persistence contract for ingested events."""

    def find_candidates(self, event: Event) -> Sequence[Event]:
        """Events sharing ``event``'s sentence or its normalized actor/action/target."""
        ...

    def list_all(self) -> Sequence[Event]: ...


class StoreError(RuntimeError):
    """A persistence adapter failed to read or write."""
