from __future__ import annotations

import pytest

from eventkb.domain.normalization import (
    collapse_whitespace,
    name_key,
    names_match,
    split_mention_list,
    split_mentions,
    strip_leading_article,
    variations,
)


def test_variations_for_article_name() -> None:
    assert variations("The White House") == ["The White House", "White House"]


def test_variations_adds_leading_article_and_punctuation_free_form() -> None:
    assert variations("St. Louis") == ["St. Louis", "the St. Louis", "St Louis"]


def test_variations_original_comes_first_and_are_unique() -> None:
    result = variations("Acme")
    assert result[0] == "Acme"
    assert len(result) == len(set(result))


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("the Senate", "Senate"),
        ("A Tribe Called Quest", "Tribe Called Quest"),
        ("An Garda", "Garda"),
        ("Theodore", None),
        ("the ", None),
    ],
)
def test_strip_leading_article(name: str, expected: str | None) -> None:
    assert strip_leading_article(name) == expected


def test_split_keeps_suffix_qualifier_with_city() -> None:
    assert split_mention_list("John Smith, Washington, D.C., Jane Doe") == [
        "John Smith",
        "Washington, D.C.",
        "Jane Doe",
    ]


def test_split_does_not_break_on_lowercase_continuation() -> None:
    assert split_mention_list("Smith, Jones and associates, Acme") == [
        "Smith",
        "Jones and associates",
        "Acme",
    ]
    assert split_mention_list("Acme, inc") == ["Acme, inc"]


def test_split_keeps_title_with_following_name() -> None:
    assert split_mention_list("Dr., Brown, Alice") == ["Dr., Brown", "Alice"]


@pytest.mark.parametrize("text", [None, "", "   "])
def test_split_empty_input(text: str | None) -> None:
    assert split_mention_list(text) == []


def test_split_drops_empty_segments() -> None:
    assert split_mention_list("Alice, , Bob") == ["Alice", "Bob"]
    assert split_mention_list(", Alice, Bob,") == ["Alice", "Bob"]


def test_name_key_is_case_and_whitespace_insensitive() -> None:
    assert name_key("  Barack   OBAMA ") == name_key("barack obama")
    assert collapse_whitespace(" a \t b\n") == "a b"


def test_names_match_uses_aliases() -> None:
    assert names_match("ACME corp", "acme Corp")
    assert names_match("Big Blue", "IBM", aliases=["big blue"])
    assert not names_match("Big Blue", "IBM")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("John Smith and Jane Doe", ["John Smith", "Jane Doe"]),
        ("Smith & Jones + Brown", ["Smith", "Jones", "Brown"]),
        ("Alice AND Bob, Carol", ["Alice", "Bob", "Carol"]),
        ("Washington, D.C. and Paris", ["Washington, D.C.", "Paris"]),
        ("Anderson, Sandy", ["Anderson", "Sandy"]),
        ("Smith, Jones and associates", ["Smith", "Jones", "associates"]),
    ],
)
def test_split_mentions_breaks_on_conjunctions_then_commas(
    text: str, expected: list[str]
) -> None:
    assert split_mentions(text) == expected


@pytest.mark.parametrize("text", [None, "", "  "])
def test_split_mentions_empty_input(text: str | None) -> None:
    assert split_mentions(text) == []
