"""Read event rows from delimited text files."""

from __future__ import annotations

import csv
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)


def read_rows(path: Path | str, *, delimiter: str = ",") -> Iterator[dict[str, str]]:
    """Yield each data row of ``path`` keyed by its trimmed header names.

    Cells missing from short rows come back as empty strings; surplus cells are
    dropped.
    """

    source = Path(path)
    log.info("Reading rows from %s", source)
    with source.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle, delimiter=delimiter)
        for row in reader:
            yield {
                key.strip(): (value or "")
                for key, value in row.items()
                if isinstance(key, str)
            }
