"""Shared logging helpers for eventkb."""

from __future__ import annotations

import logging
from typing import Final

# Chatty third-party loggers that only matter when debugging HTTP traffic.
NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "hishel")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    Wraps ``logging.basicConfig``. Below DEBUG the HTTP client loggers are capped at
    WARNING so that enrichment lookups do not flood ingest output. Pass ``force=True``
    to reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
