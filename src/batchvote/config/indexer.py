"""Indexer (GraphQL) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_var
from .http_resilience import RateLimit, ResilienceConfig

INDEXER_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class IndexerConfig:
    """Holds the GraphQL indexer endpoint and its HTTP profile."""

    endpoint: str
    resilience: ResilienceConfig


def get_indexer_config(*, resilience: ResilienceConfig | None = None) -> IndexerConfig:
    endpoint = require_env_var("BATCHVOTE_INDEXER_URL")
    api_key = optional_env_var("BATCHVOTE_INDEXER_API_KEY")
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return IndexerConfig(
        endpoint=endpoint,
        resilience=resilience
        or ResilienceConfig(
            name="indexer",
            base_url=endpoint,
            timeout_seconds=INDEXER_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers=headers,
        ),
    )
