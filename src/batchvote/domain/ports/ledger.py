"""Port for the remote ledger (vault contract behind a signer)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from batchvote.domain.model import (
        ContractConfig,
        CreateTriplesRequest,
        DepositBatchRequest,
        ObjectReceipt,
        RedeemBatchRequest,
        TermId,
        TransactionReceipt,
    )


@runtime_checkable
class LedgerClient(Protocol):
    """Read and write access to the vault contract.

    Write calls simulate, submit and wait for the receipt. They return only once
    the transaction is confirmed, or raise ``LedgerCallError`` with a stable code.
    """

    @property
    def account(self) -> str | None:
        """Connected account, ``None`` when no wallet is connected."""
        ...

    async def read_config(self) -> ContractConfig: ...

    async def get_shares(self, account: str, term_id: TermId, curve_id: int) -> int: ...

    async def get_or_create_object(self, label: str) -> ObjectReceipt: ...

    async def create_triples(self, request: CreateTriplesRequest) -> TransactionReceipt: ...

    async def deposit_batch(self, request: DepositBatchRequest) -> TransactionReceipt: ...

    async def redeem_batch(self, request: RedeemBatchRequest) -> TransactionReceipt: ...
