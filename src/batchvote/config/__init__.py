"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .execution import get_execution_config
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .indexer import IndexerConfig, get_indexer_config
from .ledger import LedgerConfig, get_ledger_config
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "NO_RETRY",
    "ConfigurationError",
    "IndexerConfig",
    "LedgerConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_execution_config",
    "get_indexer_config",
    "get_ledger_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
