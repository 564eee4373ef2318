from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from eventkb.domain.model import (
    Collection,
    Connection,
    Entity,
    EntityType,
    OrganizationFields,
    PersonFields,
    PlaceCategory,
    PlaceFields,
    Role,
)
from tests.helpers.knowledge import make_event


def _connection(**overrides: object) -> Connection:
    event = make_event()
    values: dict[str, object] = {
        "event_id": event.id,
        "action": "met",
        "role": Role.ACTOR,
        "related_actors": frozenset({"John Smith"}),
        "related_targets": frozenset({"Jane Doe"}),
        "timestamp": datetime(2024, 3, 1, 10, 0),  # noqa: DTZ001
    }
    values.update(overrides)
    return Connection(**values)  # type: ignore[arg-type]


def test_new_entity_knows_its_own_name() -> None:
    entity = Entity(name="Barack Obama", entity_type=EntityType.PERSON)

    assert entity.aliases == {"Barack Obama"}
    assert entity.is_known_as("barack OBAMA")
    assert entity.connection_count == 0
    assert entity.collection == Collection.PEOPLE
    assert entity.store_location == (Collection.PEOPLE, str(entity.id))


def test_blank_external_id_is_none() -> None:
    assert Entity(name="X", external_id="").external_id is None


def test_aliases_are_deduplicated_case_insensitively() -> None:
    entity = Entity(name="IBM", entity_type=EntityType.ORGANIZATION)

    assert entity.add_alias("Big Blue")
    assert not entity.add_alias("big blue")
    assert not entity.add_alias("ibm")
    assert not entity.add_alias("   ")
    assert entity.aliases == {"IBM", "Big Blue"}


def test_payload_must_match_type() -> None:
    with pytest.raises(ValueError, match="payload"):
        Entity(name="Paris", entity_type=EntityType.PERSON, place=PlaceFields())


def test_category_only_for_places() -> None:
    with pytest.raises(ValueError, match="category"):
        Entity(name="Acme", entity_type=EntityType.ORGANIZATION, category=PlaceCategory.CITY)


def test_details_follow_entity_type() -> None:
    entity = Entity(
        name="Acme",
        entity_type=EntityType.ORGANIZATION,
        organization=OrganizationFields(founded="1900"),
    )

    assert entity.collection == Collection.ORGANIZATIONS
    assert entity.person is None
    assert entity.details == OrganizationFields(founded="1900")


def test_person_payload_rejected_on_place() -> None:
    with pytest.raises(ValueError, match="payload"):
        Entity(name="Paris", entity_type=EntityType.PLACE, person=PersonFields())


def test_add_connection_keeps_count_and_skips_duplicates() -> None:
    entity = Entity(name="John Smith", entity_type=EntityType.PERSON)
    first = _connection()

    assert entity.add_connection(first)
    # same role and action, same event by content on the same day
    late = datetime(2024, 3, 1, 23, 0)  # noqa: DTZ001
    assert not entity.add_connection(_connection(timestamp=late))
    assert entity.add_connection(_connection(role=Role.TARGET))
    assert entity.add_connection(_connection(action="called"))

    assert entity.connection_count == len(entity.connections) == 3
    assert [c.position for c in entity.connections] == [0, 1, 2]


def test_connection_without_timestamp_only_matches_by_event_id() -> None:
    undated = _connection(timestamp=None)
    assert not undated.same_event_as(_connection(timestamp=None))
    assert undated.same_event_as(undated.copy())


def test_absorb_unions_names_and_copies_connections() -> None:
    keep = Entity(name="Barack Obama", entity_type=EntityType.PERSON)
    other = Entity(name="Obama", entity_type=EntityType.PERSON)
    other.add_alias("President Obama")
    shared = _connection()
    keep.add_connection(shared)
    other.add_connection(_connection(event_id=shared.event_id))
    other.add_connection(_connection(action="spoke"))

    added = keep.absorb(other)

    assert added == 1
    assert keep.aliases == {"Barack Obama", "Obama", "President Obama"}
    assert keep.connection_count == 2
    assert all(c not in other.connections for c in keep.connections)


def test_event_duplicate_rules() -> None:
    base = make_event(sentence="John met Jane.")

    assert base.is_duplicate_of(make_event(actor="Someone", sentence="  John met Jane. "))
    assert base.is_duplicate_of(
        make_event(date_received=datetime(2024, 3, 1, 22, 0))  # noqa: DTZ001
    )
    assert not base.is_duplicate_of(
        make_event(date_received=datetime(2024, 3, 2, 9, 30))  # noqa: DTZ001
    )
    assert not make_event().is_duplicate_of(make_event(target="John Doe"))


def test_event_keys_are_whitespace_normalized() -> None:
    event = make_event(actor="  John   Smith ", target="Jane\tDoe")
    assert event.actor_key == "John Smith"
    assert event.target_key == "Jane Doe"
    assert event.store_location.collection == Collection.EVENTS


def test_aware_and_naive_timestamps_compare_by_local_day() -> None:
    aware = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    local = aware.astimezone().replace(tzinfo=None)
    left = _connection(timestamp=aware)
    right = _connection(timestamp=local + timedelta(minutes=1))
    assert left.same_event_as(right)
