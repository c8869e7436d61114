from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from batchvote.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_execution_config,
    get_indexer_config,
    get_ledger_config,
    get_storage_config,
    require_env_vars,
)
from batchvote.domain.batch_vote.settings import (
    DEFAULT_DUST_TOLERANCE,
    DEFAULT_POLL_MAX_ATTEMPTS,
)

if TYPE_CHECKING:
    from pathlib import Path

ENV_NAMES = (
    "BATCHVOTE_INDEXER_URL",
    "BATCHVOTE_INDEXER_API_KEY",
    "BATCHVOTE_LEDGER_RPC_URL",
    "BATCHVOTE_VAULT_ADDRESS",
    "BATCHVOTE_ACCOUNT",
    "BATCHVOTE_POLL_INTERVAL",
    "BATCHVOTE_POLL_ATTEMPTS",
    "BATCHVOTE_OBJECT_POLL_ATTEMPTS",
    "BATCHVOTE_DUST_TOLERANCE",
    "BATCHVOTE_CATEGORY_PREDICATE_ID",
    "BATCHVOTE_STRICT_DIRECTION",
    "BATCHVOTE_DATA_DIR",
    "BATCHVOTE_CART_MAX_AGE_HOURS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_VAULT_ADDRESS", "   ")

    with pytest.raises(MissingConfigurationError) as excinfo:
        require_env_vars(["BATCHVOTE_LEDGER_RPC_URL", "BATCHVOTE_VAULT_ADDRESS"])

    assert "BATCHVOTE_LEDGER_RPC_URL, BATCHVOTE_VAULT_ADDRESS" in str(excinfo.value)
    assert excinfo.value.names == ("BATCHVOTE_LEDGER_RPC_URL", "BATCHVOTE_VAULT_ADDRESS")


def test_execution_config_defaults() -> None:
    config = get_execution_config()

    assert config.dust_tolerance == DEFAULT_DUST_TOLERANCE
    assert config.poll_max_attempts == DEFAULT_POLL_MAX_ATTEMPTS
    assert config.category_predicate_id is None
    assert not config.reject_against_on_new_relationships


def test_execution_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("BATCHVOTE_POLL_ATTEMPTS", "4")
    monkeypatch.setenv("BATCHVOTE_CATEGORY_PREDICATE_ID", "0xcat")
    monkeypatch.setenv("BATCHVOTE_STRICT_DIRECTION", "true")

    config = get_execution_config()

    assert config.poll_interval_seconds == 0.5
    assert config.poll_max_attempts == 4
    assert config.category_predicate_id == "0xcat"
    assert config.reject_against_on_new_relationships


def test_invalid_number_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_POLL_ATTEMPTS", "many")

    with pytest.raises(ConfigurationError, match="BATCHVOTE_POLL_ATTEMPTS"):
        get_execution_config()


def test_indexer_config_adds_bearer_header(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_INDEXER_URL", "https://indexer.test/graphql")
    monkeypatch.setenv("BATCHVOTE_INDEXER_API_KEY", "secret")

    config = get_indexer_config()

    assert config.endpoint == "https://indexer.test/graphql"
    assert config.resilience.default_headers == {"Authorization": "Bearer secret"}
    assert config.resilience.ratelimit is not None


def test_ledger_config_never_retries_writes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_LEDGER_RPC_URL", "https://gateway.test/rpc")
    monkeypatch.setenv("BATCHVOTE_VAULT_ADDRESS", "0xvault")

    config = get_ledger_config()

    assert config.account is None
    assert config.resilience.retry.total == 0


def test_ledger_config_requires_vault(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_LEDGER_RPC_URL", "https://gateway.test/rpc")

    with pytest.raises(MissingConfigurationError, match="BATCHVOTE_VAULT_ADDRESS"):
        get_ledger_config()


def test_storage_config_honours_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BATCHVOTE_DATA_DIR", str(tmp_path))

    config = get_storage_config()

    assert config.carts_dir() == tmp_path.resolve() / "carts"
    assert (tmp_path / "carts").is_dir()


def test_storage_config_reads_cart_max_age(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHVOTE_CART_MAX_AGE_HOURS", "1.5")

    assert get_storage_config().cart_max_age == timedelta(hours=1, minutes=30)
