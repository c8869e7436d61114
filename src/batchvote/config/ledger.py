"""Ledger gateway configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import NO_RETRY, ResilienceConfig

# Receipts can take a while on congested networks.
LEDGER_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True)
class LedgerConfig:
    """Holds the JSON-RPC gateway endpoint and the vault contract address."""

    rpc_url: str
    vault_address: str
    account: str | None
    resilience: ResilienceConfig


def get_ledger_config(*, resilience: ResilienceConfig | None = None) -> LedgerConfig:
    values = require_env_vars(("BATCHVOTE_LEDGER_RPC_URL", "BATCHVOTE_VAULT_ADDRESS"))
    rpc_url = values["BATCHVOTE_LEDGER_RPC_URL"]
    return LedgerConfig(
        rpc_url=rpc_url,
        vault_address=values["BATCHVOTE_VAULT_ADDRESS"],
        account=optional_env_var("BATCHVOTE_ACCOUNT"),
        resilience=resilience
        or ResilienceConfig(
            name="ledger",
            base_url=rpc_url,
            timeout_seconds=LEDGER_TIMEOUT_SECONDS,
            retry=NO_RETRY,
        ),
    )
