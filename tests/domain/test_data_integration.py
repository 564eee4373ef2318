from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from eventkb.domain.data_integration import (
    IngestResult,
    RowValidationError,
    ingest_rows,
    mentions_of,
    parse_row,
)
from eventkb.domain.model import Collection, EntityType, Role
from eventkb.domain.resolution import ResolutionContext
from tests.helpers.knowledge import (
    FakeEntityRepository,
    FakeEventRepository,
    FakeKnowledgeUnitOfWork,
    FakeLookup,
    enrichment,
)


def _row(**overrides: str) -> dict[str, str]:
    row = {
        "Actor": "John Smith",
        "Action": "met",
        "Target": "Jane Doe",
        "Sentence": "John Smith met Jane Doe in Paris.",
        "DateReceived": "2024-03-01T09:30:00",
        "Locations": "Paris",
    }
    row.update(overrides)
    return row


def _ingest(
    rows: list[dict[str, str]],
    uow: FakeKnowledgeUnitOfWork,
    lookup: FakeLookup | None = None,
) -> IngestResult:
    return asyncio.run(
        ingest_rows(rows, lookup=lookup or FakeLookup(), unit_of_work_factory=lambda: uow)
    )


def test_parse_row_builds_event() -> None:
    event = parse_row(_row(Locations="Washington, D.C., Paris"))

    assert event.raw_actor == "John Smith"
    assert event.date_received == datetime(2024, 3, 1, 9, 30)  # noqa: DTZ001
    assert event.locations == ("Washington, D.C.", "Paris")


def test_parse_row_accepts_spaced_date_header_and_us_dates() -> None:
    row = _row()
    del row["DateReceived"]
    row["Date Received"] = "03/01/2024"

    assert parse_row(row).date_received.date() == datetime(2024, 3, 1).date()  # noqa: DTZ001


@pytest.mark.parametrize(
    "overrides",
    [
        {"Actor": ""},
        {"Action": "   "},
        {"DateReceived": ""},
        {"DateReceived": "not a date"},
    ],
)
def test_parse_row_rejects_invalid_rows(overrides: dict[str, str]) -> None:
    with pytest.raises(RowValidationError):
        parse_row(_row(**overrides))


def test_mentions_cover_every_role() -> None:
    event = parse_row(_row(Actor="Alice, Bob", Locations="Paris, Texas"))

    assert mentions_of(event) == [
        ("Alice", Role.ACTOR),
        ("Bob", Role.ACTOR),
        ("Jane Doe", Role.TARGET),
        ("Paris", Role.LOCATION),
        ("Texas", Role.LOCATION),
    ]


def test_mentions_split_on_conjunctions() -> None:
    event = parse_row(
        _row(
            Actor="John Smith and Jane Doe",
            Target="Acme & Globex",
            Locations="Washington, D.C. and Paris",
        )
    )

    assert event.locations == ("Washington, D.C.", "Paris")
    assert mentions_of(event) == [
        ("John Smith", Role.ACTOR),
        ("Jane Doe", Role.ACTOR),
        ("Acme", Role.TARGET),
        ("Globex", Role.TARGET),
        ("Washington, D.C.", Role.LOCATION),
        ("Paris", Role.LOCATION),
    ]


def test_conjoined_actors_become_separate_entities() -> None:
    entities = FakeEntityRepository()
    uow = FakeKnowledgeUnitOfWork(entities)

    result = _ingest([_row(Actor="John Smith & Jane Doe", Target="")], uow)

    assert result.entities_created == 3
    assert sorted(entity.name for entity in entities.items) == ["Jane Doe", "John Smith", "Paris"]


def test_ingest_creates_entities_and_connections() -> None:
    entities = FakeEntityRepository()
    events = FakeEventRepository()
    uow = FakeKnowledgeUnitOfWork(entities, events)
    lookup = FakeLookup({"John Smith": enrichment("Q1", category="human")})

    result = _ingest([_row()], uow, lookup)

    assert result.processed == 1
    assert result.entities_created == 3
    assert result.connections_added == 3
    assert uow.commits == 1
    assert len(events.items) == 1
    by_name = {entity.name: entity for entity in entities.items}
    assert by_name["John Smith"].entity_type == EntityType.PERSON
    assert by_name["Paris"].collection == Collection.PLACES
    assert by_name["Jane Doe"].connections[0].role == Role.TARGET


def test_invalid_and_duplicate_rows_are_skipped() -> None:
    uow = FakeKnowledgeUnitOfWork()
    rows = [
        _row(),
        _row(Actor=""),
        _row(Action="greeted"),  # same sentence as the first row
        _row(DateReceived="garbage"),
    ]

    result = _ingest(rows, uow)

    assert result.processed == 1
    assert result.skipped_invalid == 2
    assert result.skipped_duplicates == 1
    assert len(uow.repositories.events.list_all()) == 1


def test_repeated_names_across_rows_resolve_to_one_entity() -> None:
    entities = FakeEntityRepository()
    uow = FakeKnowledgeUnitOfWork(entities)
    rows = [
        _row(Sentence="", Target="Acme Inc"),
        _row(Sentence="", Actor="JOHN SMITH", Action="sued", Target="acme inc"),
    ]

    result = _ingest(rows, uow)

    assert result.processed == 2
    assert sorted(entity.name for entity in entities.items) == ["Acme Inc", "John Smith", "Paris"]
    smith = next(entity for entity in entities.items if entity.name == "John Smith")
    assert smith.connection_count == 2


def test_enrichment_failure_does_not_fail_the_row() -> None:
    uow = FakeKnowledgeUnitOfWork()
    lookup = FakeLookup(failing={"John Smith"})

    result = _ingest([_row()], uow, lookup)

    assert result.processed == 1
    assert result.entities_created == 3


def test_store_failures_are_counted_and_run_continues() -> None:
    entities = FakeEntityRepository()
    uow = FakeKnowledgeUnitOfWork(entities)
    entities.fail = True

    result = _ingest([_row()], uow)

    assert result.failed_mentions == 3
    assert result.processed == 1

    entities.fail = False
    uow.fail_commit = True
    result = _ingest([_row(Sentence="Another sentence", Action="called")], uow)

    assert result.failed_rows == 1
    assert result.processed == 0
    assert uow.rollbacks == 1


def test_failed_row_empties_the_session_cache() -> None:
    uow = FakeKnowledgeUnitOfWork()
    context = ResolutionContext.create(FakeLookup())

    def run(rows: list[dict[str, str]]) -> IngestResult:
        return asyncio.run(
            ingest_rows(
                rows, lookup=FakeLookup(), unit_of_work_factory=lambda: uow, context=context
            )
        )

    run([_row()])
    assert len(context.entities) == 3

    uow.fail_commit = True
    result = run([_row(Sentence="Smith called Doe.", Action="called", Target="Acme")])

    assert result.failed_rows == 1
    assert len(context.entities) == 0
