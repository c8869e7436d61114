"""JSON-RPC 2.0 client for a vault signing gateway."""

from __future__ import annotations

import itertools
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from batchvote.adapters.http_resilience import ResilientClient
from batchvote.domain.batch_vote.errors import ErrorCode, LedgerCallError
from batchvote.domain.model import ContractConfig, ObjectReceipt, TransactionReceipt

from .schema import AtomPayload, JsonRpcResponse, ReceiptPayload, VaultConfigPayload

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from batchvote.config.http_resilience import ResilienceConfig
    from batchvote.config.ledger import LedgerConfig
    from batchvote.domain.model import (
        CreateTriplesRequest,
        DepositBatchRequest,
        RedeemBatchRequest,
        TermId,
    )

log = getLogger(__name__)


def _amounts(values: Sequence[int]) -> list[str]:
    return [str(value) for value in values]


class JsonRpcLedgerClient:
    """``LedgerClient`` talking to a gateway that holds the signer.

    Every write is simulated first, then sent, then awaited until its receipt
    is available. Gateway errors are classified into ``LedgerCallError``.
    """

    def __init__(
        self,
        *,
        config: LedgerConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None
        self._ids = itertools.count(1)

    async def aclose(self) -> None:
        """Close the HTTP client; the next call opens a new one."""

        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    @property
    def account(self) -> str | None:
        return self._config.account

    async def read_config(self) -> ContractConfig:
        result = await self._call("vault_getConfig", [self._config.vault_address])
        payload = self._validate(VaultConfigPayload, result, "vault_getConfig")
        return ContractConfig(triple_cost=payload.triple_cost, min_deposit=payload.min_deposit)

    async def get_shares(self, account: str, term_id: TermId, curve_id: int) -> int:
        result = await self._call(
            "vault_getShares", [self._config.vault_address, account, term_id, curve_id]
        )
        try:
            return int(result)
        except (TypeError, ValueError) as exc:
            raise LedgerCallError.from_message(f"Invalid share balance: {result!r}") from exc

    async def get_or_create_object(self, label: str) -> ObjectReceipt:
        result = await self._call(
            "vault_getOrCreateAtom",
            [self._config.vault_address, self._require_account(), label],
        )
        payload = self._validate(AtomPayload, result, "vault_getOrCreateAtom")
        if payload.tx_hash is not None:
            await self._wait_for_receipt(payload.tx_hash)
        log.debug(
            "Object %r: id=%s created=%s", label, payload.term_id, payload.created
        )
        return ObjectReceipt(
            label=label,
            object_id=payload.term_id,
            created=payload.created,
            tx_hash=payload.tx_hash,
        )

    async def create_triples(self, request: CreateTriplesRequest) -> TransactionReceipt:
        return await self._transact(
            "createTriples",
            [
                list(request.subject_ids),
                list(request.predicate_ids),
                list(request.object_ids),
                _amounts(request.assets),
            ],
            value=request.value,
        )

    async def deposit_batch(self, request: DepositBatchRequest) -> TransactionReceipt:
        return await self._transact(
            "depositBatch",
            [
                request.receiver,
                list(request.term_ids),
                list(request.curve_ids),
                _amounts(request.amounts),
                _amounts(request.min_shares),
            ],
            value=request.value,
        )

    async def redeem_batch(self, request: RedeemBatchRequest) -> TransactionReceipt:
        return await self._transact(
            "redeemBatch",
            [
                request.receiver,
                list(request.term_ids),
                list(request.curve_ids),
                _amounts(request.shares),
                _amounts(request.min_assets),
            ],
            value=request.value,
        )

    async def _transact(self, function: str, args: list[Any], *, value: int) -> TransactionReceipt:
        call = {
            "to": self._config.vault_address,
            "from": self._require_account(),
            "function": function,
            "args": args,
            "value": str(value),
        }
        await self._call("vault_simulate", [call])
        tx_hash = await self._call("vault_send", [call])
        if not isinstance(tx_hash, str):
            raise LedgerCallError.from_message(f"vault_send returned no hash: {tx_hash!r}")
        log.info("Sent %s: %s", function, tx_hash)
        return await self._wait_for_receipt(tx_hash)

    async def _wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        result = await self._call("vault_waitForReceipt", [tx_hash])
        receipt = self._validate(ReceiptPayload, result, "vault_waitForReceipt")
        if not receipt.succeeded:
            reason = receipt.revert_reason or f"transaction {tx_hash} reverted"
            code = LedgerCallError.from_message(reason).code
            if code is ErrorCode.UNKNOWN:
                code = ErrorCode.TRANSACTION_REVERTED
            raise LedgerCallError(code, raw_message=reason)
        return TransactionReceipt(tx_hash=receipt.tx_hash, block_number=receipt.block_number)

    async def _call(self, method: str, params: list[Any]) -> Any:  # noqa: ANN401
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            raw = await self._http().post_json(self._config.rpc_url, body)
        except httpx.HTTPError as exc:
            log.warning("Ledger gateway call %s failed: %s", method, exc)
            raise LedgerCallError.from_message(str(exc)) from exc
        except ValueError as exc:
            raise LedgerCallError.from_message(f"Malformed {method} response") from exc

        try:
            payload = JsonRpcResponse.model_validate(raw)
        except ValidationError as exc:
            raise LedgerCallError.from_message(f"Malformed {method} response") from exc
        if payload.error is not None:
            message = payload.error.describe()
            log.debug("Ledger gateway %s error: %s", method, message)
            raise LedgerCallError.from_message(message)
        return payload.result

    def _require_account(self) -> str:
        account = self._config.account
        if not account:
            raise LedgerCallError(ErrorCode.WALLET_NOT_CONNECTED)
        return account

    @staticmethod
    def _validate[TModel: BaseModel](
        model: type[TModel],
        result: object,
        method: str,
    ) -> TModel:
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise LedgerCallError.from_message(f"Malformed {method} result") from exc
