"""Name normalization: comparison keys, search variations and mention-list splitting.

Everything here is pure string handling so it can be shared by the matcher, the
connection recorder and the persistence adapter without pulling in the model.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

LEADING_ARTICLES: Final[tuple[str, ...]] = ("the ", "a ", "an ")

# Qualifiers written after a comma that belong to the preceding name,
# e.g. "Washington, D.C.".
SUFFIX_ABBREVIATIONS: Final[tuple[str, ...]] = ("D.C.", "U.S.", "U.K.")
# Titles that never end a name on their own.
TITLE_ABBREVIATIONS: Final[tuple[str, ...]] = ("St.", "Dr.", "Mr.", "Mrs.", "Ms.")

_PUNCTUATION_RE: Final = re.compile(r"[.,!?;:'\"()-]")
_WHITESPACE_RE: Final = re.compile(r"\s+")
_TITLE_TAIL_RE: Final = re.compile(
    r"(?:^|\s)(?:" + "|".join(re.escape(a) for a in TITLE_ABBREVIATIONS) + r")$"
)
_STARTS_UPPER_RE: Final = re.compile(r"^[A-Z]")
_CONJUNCTION_RE: Final = re.compile(r"\s+(?:and|&|\+)\s+", re.IGNORECASE)


def collapse_whitespace(value: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""

    return _WHITESPACE_RE.sub(" ", value).strip()


def name_key(name: str) -> str:
    """Return the case-insensitive comparison key for ``name``."""

    return collapse_whitespace(name).casefold()


def names_match(left: str, right: str, *, aliases: Iterable[str] = ()) -> bool:
    """Case-insensitive name comparison, optionally against ``right``'s aliases."""

    key = name_key(left)
    if key == name_key(right):
        return True
    return any(name_key(alias) == key for alias in aliases)


def strip_leading_article(name: str) -> str | None:
    """Return ``name`` without a leading article, or ``None`` if it has none."""

    lowered = name.lower()
    for article in LEADING_ARTICLES:
        if lowered.startswith(article):
            stripped = name[len(article) :].strip()
            return stripped or None
    return None


def variations(name: str) -> list[str]:
    """Return search variations for ``name`` (order-preserving, deduplicated).

    The original name always comes first, followed by the article-stripped form,
    the form with a leading "the " and the punctuation-free form where they differ.
    """

    candidates = [name]

    without_article = strip_leading_article(name.strip())
    if without_article is not None:
        candidates.append(without_article)

    if not name.strip().lower().startswith("the "):
        candidates.append(f"the {name}")

    no_punctuation = _PUNCTUATION_RE.sub("", name).strip()
    if no_punctuation and no_punctuation != name:
        candidates.append(no_punctuation)

    return list(dict.fromkeys(candidates))


def split_mention_list(text: str | None) -> list[str]:
    """Split a comma-joined mention string into individual names.

    A comma only separates two names when the following segment starts with an
    uppercase letter, is not itself a suffix qualifier such as "D.C.", and the
    text accumulated so far does not end in a title such as "Dr.".

    >>> split_mention_list("John Smith, Washington, D.C., Jane Doe")
    ['John Smith', 'Washington, D.C.', 'Jane Doe']
    """

    if text is None or not text.strip():
        return []

    parts = text.split(",")
    names: list[str] = []
    current = ""
    for index, raw_part in enumerate(parts):
        part = raw_part.strip()
        if part:
            current = f"{current}, {part}" if current else part

        is_last = index == len(parts) - 1
        if is_last or _is_split_point(current, parts[index + 1]):
            names.append(current.strip())
            current = ""

    return [name for name in names if name]


def split_mentions(text: str | None) -> list[str]:
    """Split a mention field on "and", "&" and "+" first, then on commas.

    >>> split_mentions("John Smith and Jane Doe, Washington, D.C. & Acme")
    ['John Smith', 'Jane Doe', 'Washington, D.C.', 'Acme']
    """

    if text is None or not text.strip():
        return []
    return [name for part in _CONJUNCTION_RE.split(text) for name in split_mention_list(part)]


def _is_split_point(accumulated: str, following: str) -> bool:
    segment = following.strip()
    if not _STARTS_UPPER_RE.match(segment):
        return False
    if segment in SUFFIX_ABBREVIATIONS:
        return False
    return _TITLE_TAIL_RE.search(accumulated) is None
