"""JSON-RPC payload schemas for the ledger signing gateway."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GatewayModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class JsonRpcError(GatewayModel):
    code: int
    message: str
    data: Any = None

    def describe(self) -> str:
        """Message plus the revert data, which carries custom error names."""

        if self.data is None:
            return self.message
        return f"{self.message}: {self.data}"


class JsonRpcResponse(GatewayModel):
    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None


class VaultConfigPayload(GatewayModel):
    # Amounts travel as decimal strings; pydantic parses them into exact ints.
    triple_cost: int = Field(alias="tripleCost")
    min_deposit: int = Field(alias="minDeposit")


class AtomPayload(GatewayModel):
    term_id: str | None = Field(default=None, alias="termId")
    created: bool = False
    tx_hash: str | None = Field(default=None, alias="txHash")


class ReceiptPayload(GatewayModel):
    tx_hash: str = Field(alias="transactionHash")
    status: str
    block_number: int | None = Field(default=None, alias="blockNumber")
    revert_reason: str | None = Field(default=None, alias="revertReason")

    @property
    def succeeded(self) -> bool:
        return self.status.lower() in {"success", "0x1", "1"}
