"""Application service for ingesting event rows into the knowledge base."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from eventkb.config.ingest import DEFAULT_ENRICHMENT_CONCURRENCY
from eventkb.domain.dates import parse_date_received
from eventkb.domain.model import Event, Role
from eventkb.domain.normalization import split_mentions
from eventkb.domain.ports.persistence import StoreError
from eventkb.domain.resolution import (
    EventDeduplicator,
    MentionOutcome,
    MentionProcessor,
    ResolutionContext,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from eventkb.domain.ports.enrichment import EnrichmentLookup
    from eventkb.domain.ports.unit_of_work import KnowledgeUnitOfWork

log = logging.getLogger(__name__)

DATE_FIELDS: Final[tuple[str, ...]] = ("DateReceived", "Date Received")

type Row = Mapping[str, str | None]


class RowValidationError(ValueError):
    """An input row is missing required fields or carries an unparseable date."""


@dataclass(slots=True)
class IngestResult:
    """Outcome of an ingestion run."""

    processed: int = 0
    skipped_invalid: int = 0
    skipped_duplicates: int = 0
    entities_created: int = 0
    connections_added: int = 0
    failed_mentions: int = 0
    failed_rows: int = 0


def parse_row(row: Row) -> Event:
    """Validate ``row`` and build the event it describes."""

    actor = _field(row, "Actor")
    action = _field(row, "Action")
    date_raw = next((_field(row, name) for name in DATE_FIELDS if _field(row, name)), "")

    missing = [
        name
        for name, value in (("Actor", actor), ("Action", action), ("DateReceived", date_raw))
        if not value
    ]
    if missing:
        raise RowValidationError(f"Missing required field(s): {', '.join(missing)}")

    try:
        date_received = parse_date_received(date_raw)
    except ValueError as exc:
        raise RowValidationError(str(exc)) from exc

    return Event(
        raw_actor=actor,
        action=action,
        raw_target=_field(row, "Target"),
        sentence=_field(row, "Sentence"),
        date_received=date_received,
        locations=tuple(split_mentions(_field(row, "Locations"))),
    )


def mentions_of(event: Event) -> list[tuple[str, Role]]:
    """Every (name, role) pair an event mentions, actors first."""

    return [
        *((name, Role.ACTOR) for name in split_mentions(event.raw_actor)),
        *((name, Role.TARGET) for name in split_mentions(event.raw_target)),
        *((name, Role.LOCATION) for name in event.locations),
    ]


async def ingest_rows(
    rows: Iterable[Row],
    *,
    lookup: EnrichmentLookup,
    unit_of_work_factory: Callable[[], KnowledgeUnitOfWork],
    context: ResolutionContext | None = None,
    enrichment_concurrency: int = DEFAULT_ENRICHMENT_CONCURRENCY,
) -> IngestResult:
    """Ingest ``rows`` one at a time, resolving each row's mentions concurrently.

    Each row is committed after all of its mentions have been processed. Invalid
    and duplicate rows are skipped; store failures fail the affected mention or row
    and the run carries on.
    """

    if context is None:
        context = ResolutionContext.create(lookup, enrichment_concurrency=enrichment_concurrency)
    result = IngestResult()

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        deduplicator = EventDeduplicator(repositories.events)
        processor = MentionProcessor(context, repositories.entities)

        for line, row in enumerate(rows, start=1):
            try:
                event = parse_row(row)
            except RowValidationError as exc:
                log.warning("Skipping row %s: %s", line, exc)
                result.skipped_invalid += 1
                continue

            if deduplicator.is_duplicate(event):
                log.info("Skipping row %s: duplicate event", line)
                result.skipped_duplicates += 1
                continue

            try:
                repositories.events.add(event)
                outcomes = await _process_mentions(processor, event, result)
                uow.commit()
            except StoreError as exc:
                log.warning("Row %s failed and was rolled back: %s", line, exc)
                uow.rollback()
                # cached entities may be stale after a rollback or a concurrent merge
                context.entities.clear()
                result.failed_rows += 1
                continue

            result.processed += 1
            result.entities_created += sum(outcome.created for outcome in outcomes)
            result.connections_added += sum(outcome.connected for outcome in outcomes)

    log.info(
        "Ingest finished: %s processed, %s invalid, %s duplicate, %s failed",
        result.processed,
        result.skipped_invalid,
        result.skipped_duplicates,
        result.failed_rows,
    )
    return result


async def _process_mentions(
    processor: MentionProcessor, event: Event, result: IngestResult
) -> list[MentionOutcome]:
    mentions = mentions_of(event)
    gathered = await asyncio.gather(
        *(processor.process(name, role, event) for name, role in mentions),
        return_exceptions=True,
    )

    outcomes: list[MentionOutcome] = []
    for (name, role), outcome in zip(mentions, gathered, strict=True):
        if isinstance(outcome, StoreError):
            log.warning("Failed to resolve %s mention %r: %s", role, name, outcome)
            result.failed_mentions += 1
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        outcomes.append(outcome)
    return outcomes


def _field(row: Row, name: str) -> str:
    value = row.get(name)
    return value.strip() if value else ""
