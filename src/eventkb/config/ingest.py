"""Ingestion defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_ENRICHMENT_CONCURRENCY = 8
DEFAULT_CSV_DELIMITER = ","


@dataclass(frozen=True, slots=True)
class IngestConfig:
    enrichment_concurrency: int = DEFAULT_ENRICHMENT_CONCURRENCY
    csv_delimiter: str = DEFAULT_CSV_DELIMITER


def get_ingest_config() -> IngestConfig:
    raw = optional_env_var("EVENTKB_ENRICHMENT_CONCURRENCY", str(DEFAULT_ENRICHMENT_CONCURRENCY))
    try:
        concurrency = int(raw)
    except ValueError as exc:
        msg = f"EVENTKB_ENRICHMENT_CONCURRENCY must be an integer: {raw!r}"
        raise ConfigurationError(msg) from exc
    if concurrency < 1:
        raise ConfigurationError("EVENTKB_ENRICHMENT_CONCURRENCY must be at least 1")
    return IngestConfig(
        enrichment_concurrency=concurrency,
        csv_delimiter=optional_env_var("EVENTKB_CSV_DELIMITER", DEFAULT_CSV_DELIMITER),
    )
