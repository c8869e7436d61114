"""Execution defaults for batch vote submissions."""

from __future__ import annotations

from batchvote.domain.batch_vote.settings import (
    DEFAULT_DUST_TOLERANCE,
    DEFAULT_OBJECT_POLL_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_ATTEMPTS,
    ExecutionConfig,
)

from .env import env_float, env_int, optional_env_var


def get_execution_config() -> ExecutionConfig:
    return ExecutionConfig(
        dust_tolerance=env_int("BATCHVOTE_DUST_TOLERANCE", DEFAULT_DUST_TOLERANCE),
        poll_interval_seconds=env_float("BATCHVOTE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SECONDS),
        poll_max_attempts=env_int("BATCHVOTE_POLL_ATTEMPTS", DEFAULT_POLL_MAX_ATTEMPTS),
        object_poll_max_attempts=env_int(
            "BATCHVOTE_OBJECT_POLL_ATTEMPTS", DEFAULT_OBJECT_POLL_MAX_ATTEMPTS
        ),
        category_predicate_id=optional_env_var("BATCHVOTE_CATEGORY_PREDICATE_ID"),
        reject_against_on_new_relationships=(
            optional_env_var("BATCHVOTE_STRICT_DIRECTION") or ""
        ).lower()
        in {"1", "true", "yes"},
    )
