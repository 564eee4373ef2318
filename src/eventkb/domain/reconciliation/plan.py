"""Duplicate clusters and the rules for collapsing them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from eventkb.domain.dates import utc_now

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from eventkb.domain.model import Entity, EntityType


@dataclass(frozen=True, slots=True)
class ClusterSummary:
    """Read-only view of one duplicate cluster."""

    entity_type: EntityType
    external_id: str
    canonical_id: str
    canonical_name: str
    member_ids: tuple[str, ...]
    member_names: tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.member_ids)

    @property
    def duplicates_to_remove(self) -> int:
        return self.size - 1

    @classmethod
    def from_members(
        cls, entity_type: EntityType, external_id: str, members: Sequence[Entity]
    ) -> ClusterSummary:
        ordered = order_members(members)
        return cls(
            entity_type=entity_type,
            external_id=external_id,
            canonical_id=str(ordered[0].id),
            canonical_name=ordered[0].name,
            member_ids=tuple(str(member.id) for member in ordered),
            member_names=tuple(member.name for member in ordered),
        )


@dataclass(frozen=True, slots=True)
class MergePreview:
    clusters: tuple[ClusterSummary, ...] = ()

    @property
    def total_duplicates_to_remove(self) -> int:
        return sum(cluster.duplicates_to_remove for cluster in self.clusters)


def order_members(members: Sequence[Entity]) -> list[Entity]:
    """Sort cluster members so the canonical one comes first.

    Oldest ``created_at`` wins; ties go to the smallest id string.
    """

    return sorted(members, key=lambda member: (member.created_at, member.sort_key))


def collapse_cluster(
    members: Sequence[Entity], *, now: datetime | None = None
) -> tuple[Entity, list[Entity]]:
    """Fold every duplicate into the canonical member.

    Returns the canonical entity and the duplicates, which the caller deletes.
    """

    if len(members) < 2:
        raise ValueError("A cluster needs at least two members")
    canonical, *duplicates = order_members(members)
    for duplicate in duplicates:
        canonical.absorb(duplicate)
        if not canonical.description and duplicate.description:
            canonical.description = duplicate.description
    canonical.updated_at = now or utc_now()
    return canonical, duplicates
