"""Wikidata configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

WIKIDATA_BASE_URL = "https://www.wikidata.org/w/"
WIKIDATA_API_PATH = "api.php"
WIKIDATA_TIMEOUT_SECONDS = 5.0
WIKIDATA_LANGUAGE = "en"
DEFAULT_CONTACT = "https://github.com/eventkb/eventkb"


@dataclass(frozen=True, slots=True)
class WikidataConfig:
    language: str
    search_limit: int
    resilience: ResilienceConfig


def get_wikidata_config(*, resilience: ResilienceConfig | None = None) -> WikidataConfig:
    # Wikimedia rejects requests without an identifying user agent.
    contact = optional_env_var("EVENTKB_WIKIDATA_CONTACT", DEFAULT_CONTACT)
    user_agent = f"eventkb ({contact})"

    return WikidataConfig(
        language=optional_env_var("EVENTKB_WIKIDATA_LANGUAGE", WIKIDATA_LANGUAGE),
        search_limit=5,
        resilience=resilience
        or ResilienceConfig(
            name="wikidata",
            base_url=WIKIDATA_BASE_URL,
            timeout_seconds=WIKIDATA_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=2),
            cache=CacheConfig(),
            default_headers={"User-Agent": user_agent},
        ),
    )
