"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AsyncExitStack
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from eventkb.adapters.csv_source import read_rows
from eventkb.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyKnowledgeUnitOfWork,
    is_started,
    startup,
)
from eventkb.adapters.wikidata import WikidataLookup
from eventkb.config import get_ingest_config, get_wikidata_config
from eventkb.domain.data_integration import IngestResult, ingest_rows
from eventkb.domain.ports.enrichment import NullEnrichmentLookup
from eventkb.domain.ports.unit_of_work import KnowledgeUnitOfWork
from eventkb.domain.reconciliation import MergeEngine, MergePreview, MergeReport

if TYPE_CHECKING:
    from pathlib import Path

    from eventkb.domain.ports.enrichment import EnrichmentLookup

UnitOfWorkFactory = Callable[[], KnowledgeUnitOfWork]


log = getLogger(__name__)


def ingest_csv(
    path: Path | str,
    *,
    enrich: bool = True,
    lookup: EnrichmentLookup | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> IngestResult:
    """Ingest a CSV file of events using the configured adapters.

    A ``lookup`` passed in stays open; the Wikidata lookup built here is closed
    when the run ends.
    """

    _ensure_started()
    config = get_ingest_config()
    log.info("Starting ingest of %s (enrichment=%s)", path, enrich)

    async def run() -> IngestResult:
        async with AsyncExitStack() as stack:
            effective_lookup = lookup
            if effective_lookup is None:
                effective_lookup = (
                    await stack.enter_async_context(WikidataLookup(config=get_wikidata_config()))
                    if enrich
                    else NullEnrichmentLookup()
                )
            return await ingest_rows(
                read_rows(path, delimiter=config.csv_delimiter),
                lookup=effective_lookup,
                unit_of_work_factory=unit_of_work_factory or SqlAlchemyKnowledgeUnitOfWork,
                enrichment_concurrency=config.enrichment_concurrency,
            )

    return asyncio.run(run())


def preview_merge(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> MergePreview:
    """Report the duplicate clusters a merge would collapse, without writing."""

    _ensure_started()
    preview = _merge_engine(unit_of_work_factory).preview()
    log.info(
        "Merge preview: %s cluster(s), %s duplicate(s) to remove",
        len(preview.clusters),
        preview.total_duplicates_to_remove,
    )
    return preview


def run_merge(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> MergeReport:
    """Collapse every duplicate cluster into its canonical entity."""

    _ensure_started()
    return _merge_engine(unit_of_work_factory).run()


def _merge_engine(unit_of_work_factory: UnitOfWorkFactory | None) -> MergeEngine:
    if unit_of_work_factory is not None:
        return MergeEngine(unit_of_work_factory)
    return MergeEngine(
        SqlAlchemyKnowledgeUnitOfWork,
        cluster_unit_of_work_factory=partial(SqlAlchemyKnowledgeUnitOfWork, exclusive=True),
    )


def _ensure_started() -> None:
    if not is_started():
        startup()
