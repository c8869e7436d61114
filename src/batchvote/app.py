"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.adapters.cart_storage import CartFileStore
from batchvote.adapters.indexer import GraphQLIndexerClient
from batchvote.adapters.ledger import JsonRpcLedgerClient
from batchvote.config import (
    get_execution_config,
    get_indexer_config,
    get_ledger_config,
    get_storage_config,
)
from batchvote.domain.batch_vote import BatchVoteOrchestrator
from batchvote.domain.batch_vote.context import SKIP_NOT_INDEXED

if TYPE_CHECKING:
    from batchvote.domain.batch_vote import BatchVoteResult, EventStream, ExecutionConfig
    from batchvote.domain.model import Cart
    from batchvote.domain.ports import IndexerClient, LedgerClient


log = getLogger(__name__)


def build_orchestrator(
    *,
    ledger: LedgerClient | None = None,
    indexer: IndexerClient | None = None,
    config: ExecutionConfig | None = None,
    events: EventStream | None = None,
) -> BatchVoteOrchestrator:
    """Wire the HTTP adapters and environment configuration into an orchestrator."""

    return BatchVoteOrchestrator(
        ledger or JsonRpcLedgerClient(config=get_ledger_config()),
        indexer or GraphQLIndexerClient(config=get_indexer_config()),
        config=config or get_execution_config(),
        events=events,
    )


def build_cart_store() -> CartFileStore:
    return CartFileStore(get_storage_config())


def submit_cart(
    cart: Cart,
    *,
    orchestrator: BatchVoteOrchestrator | None = None,
) -> BatchVoteResult:
    """Submit ``cart`` synchronously and return the aggregated result."""

    effective = orchestrator or build_orchestrator()
    log.info("Submitting cart for %s with %s item(s)", cart.subject_id, len(cart.items))
    result = asyncio.run(_submit_and_close(effective, cart))
    log.info(
        "Finished submission: deposited=%s, withdrawn=%s, skipped=%s",
        result.total_deposited,
        result.total_withdrawn,
        len(result.skipped),
    )
    return result


async def _submit_and_close(orchestrator: BatchVoteOrchestrator, cart: Cart) -> BatchVoteResult:
    try:
        return await orchestrator.submit(cart)
    finally:
        for adapter in (orchestrator.ledger, orchestrator.indexer):
            if isinstance(adapter, JsonRpcLedgerClient | GraphQLIndexerClient):
                await adapter.aclose()


def submit_stored_cart(
    subject_id: str,
    *,
    store: CartFileStore | None = None,
    orchestrator: BatchVoteOrchestrator | None = None,
) -> BatchVoteResult | None:
    """Submit the persisted cart for ``subject_id``.

    On success the stored cart is cleared, except for items skipped because the
    indexer had not caught up yet; those stay stored so they can be resubmitted.
    """

    effective_store = store or build_cart_store()
    cart = effective_store.load(subject_id)
    if cart is None:
        log.info("No stored cart for %s", subject_id)
        return None
    result = submit_cart(cart, orchestrator=orchestrator)

    retry_ids = {s.item_id for s in result.skipped if s.reason == SKIP_NOT_INDEXED}
    for skipped in result.skipped:
        if skipped.item_id not in retry_ids:
            log.warning("Discarding item %s (%s)", skipped.item_id, skipped.reason)
    retained = tuple(item for item in cart.items if item.id in retry_ids)
    if retained:
        log.warning(
            "Keeping %s item(s) for %s that were not indexed in time", len(retained), subject_id
        )
        effective_store.save(replace(cart, items=retained))
    else:
        effective_store.remove(subject_id)
    return result
