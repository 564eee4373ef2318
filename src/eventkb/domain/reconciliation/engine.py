"""Collapse persisted entities that share an external id into one canonical record."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from eventkb.domain.model import EntityType
from eventkb.domain.ports.persistence import StoreError

from .plan import ClusterSummary, MergePreview, collapse_cluster

if TYPE_CHECKING:
    from collections.abc import Callable

    from eventkb.domain.ports.unit_of_work import KnowledgeUnitOfWork

log = logging.getLogger(__name__)


class MergeError(RuntimeError):
    """Merging one cluster failed; its transaction was rolled back."""

    def __init__(self, entity_type: EntityType, external_id: str, message: str) -> None:
        super().__init__(f"Merging {entity_type} cluster {external_id!r} failed: {message}")
        self.entity_type = entity_type
        self.external_id = external_id


@dataclass(slots=True)
class MergeReport:
    duplicate_groups_found: int = 0
    duplicates_removed: int = 0


class MergeEngine:
    """Finds duplicate clusters and merges each one in its own transaction.

    ``cluster_unit_of_work_factory`` should return a unit of work that excludes
    concurrent ingestion writes; it defaults to ``unit_of_work_factory``.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], KnowledgeUnitOfWork],
        *,
        cluster_unit_of_work_factory: Callable[[], KnowledgeUnitOfWork] | None = None,
    ) -> None:
        self.unit_of_work_factory = unit_of_work_factory
        self.cluster_unit_of_work_factory = cluster_unit_of_work_factory or unit_of_work_factory

    def preview(self) -> MergePreview:
        clusters: list[ClusterSummary] = []
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.entities
            for entity_type in EntityType:
                for external_id in repository.duplicate_external_ids(entity_type):
                    members = repository.find_by_external_id(entity_type, external_id)
                    if len(members) > 1:
                        clusters.append(
                            ClusterSummary.from_members(entity_type, external_id, members)
                        )
        return MergePreview(clusters=tuple(clusters))

    def run(self) -> MergeReport:
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.entities
            targets = [
                (entity_type, external_id)
                for entity_type in EntityType
                for external_id in repository.duplicate_external_ids(entity_type)
            ]

        report = MergeReport()
        for entity_type, external_id in targets:
            removed = self._merge_cluster(entity_type, external_id)
            if removed:
                report.duplicate_groups_found += 1
                report.duplicates_removed += removed
        log.info(
            "Merge finished: %s cluster(s), %s duplicate(s) removed",
            report.duplicate_groups_found,
            report.duplicates_removed,
        )
        return report

    def _merge_cluster(self, entity_type: EntityType, external_id: str) -> int:
        try:
            with self.cluster_unit_of_work_factory() as uow:
                repository = uow.repositories.entities
                # lock first, then re-read; ingestion may have changed the cluster
                repository.lock_external_id(entity_type, external_id)
                members = list(repository.find_by_external_id(entity_type, external_id))
                if len(members) < 2:
                    return 0
                canonical, duplicates = collapse_cluster(members)
                repository.update(canonical)
                for duplicate in duplicates:
                    repository.remove(duplicate)
                uow.commit()
        except StoreError as exc:
            log.exception("Merge of %s cluster %r rolled back", entity_type, external_id)
            raise MergeError(entity_type, external_id, str(exc)) from exc

        log.info(
            "Merged %s duplicate(s) into %s %r (%s)",
            len(duplicates),
            entity_type,
            canonical.name,
            external_id,
        )
        return len(duplicates)
