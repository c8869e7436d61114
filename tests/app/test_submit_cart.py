from __future__ import annotations

import pytest

from batchvote.adapters.cart_storage import CartFileStore
from batchvote.app import build_orchestrator, submit_cart, submit_stored_cart
from batchvote.domain.batch_vote import BatchVoteError, BatchVoteOrchestrator, ErrorCode
from batchvote.domain.model import Cart, Curve, Direction, ExecutionState, TripleKey
from tests.helpers.batch_vote import (
    MIN_DEPOSIT,
    PREDICATE_ID,
    SUBJECT_ID,
    TRIPLE_COST,
    FakeIndexer,
    FakeLedger,
    make_config,
    make_item,
)

pytestmark = pytest.mark.integration


def _orchestrator(ledger: FakeLedger, indexer: FakeIndexer) -> BatchVoteOrchestrator:
    return build_orchestrator(ledger=ledger, indexer=indexer, config=make_config())


def _cart() -> Cart:
    return Cart(subject_id=SUBJECT_ID, items=(make_item(),))


def test_submit_cart_runs_the_orchestrator(ledger: FakeLedger, indexer: FakeIndexer) -> None:
    orchestrator = _orchestrator(ledger, indexer)

    result = submit_cart(_cart(), orchestrator=orchestrator)

    assert orchestrator.state is ExecutionState.SUCCESS
    assert result.transaction_count == 1
    assert [call.method for call in ledger.write_calls()] == ["deposit_batch"]


def test_submit_stored_cart_clears_it_on_success(
    ledger: FakeLedger,
    indexer: FakeIndexer,
    cart_store: CartFileStore,
) -> None:
    cart_store.save(_cart())

    result = submit_stored_cart(
        SUBJECT_ID, store=cart_store, orchestrator=_orchestrator(ledger, indexer)
    )

    assert result is not None
    assert result.total_deposited == make_item().amount
    assert cart_store.load(SUBJECT_ID) is None


def test_submit_stored_cart_without_cart_is_a_no_op(
    ledger: FakeLedger,
    indexer: FakeIndexer,
    cart_store: CartFileStore,
) -> None:
    result = submit_stored_cart(
        SUBJECT_ID, store=cart_store, orchestrator=_orchestrator(ledger, indexer)
    )

    assert result is None
    assert ledger.calls == []


def test_failed_submission_keeps_the_stored_cart(
    indexer: FakeIndexer,
    cart_store: CartFileStore,
) -> None:
    ledger = FakeLedger(indexer, account=None)
    cart_store.save(_cart())

    with pytest.raises(BatchVoteError) as excinfo:
        submit_stored_cart(
            SUBJECT_ID, store=cart_store, orchestrator=_orchestrator(ledger, indexer)
        )

    assert excinfo.value.code is ErrorCode.WALLET_NOT_CONNECTED
    assert cart_store.load(SUBJECT_ID) is not None


def test_items_not_indexed_in_time_stay_stored(
    ledger: FakeLedger,
    indexer: FakeIndexer,
    cart_store: CartFileStore,
) -> None:
    indexer.unreachable.add(TripleKey(SUBJECT_ID, PREDICATE_ID, "0xlost"))
    lost = make_item(
        "lost",
        object_id="0xlost",
        curve=Curve.PROGRESSIVE,
        existing_relationship=False,
        amount=TRIPLE_COST + MIN_DEPOSIT,
    )
    against = make_item(
        "against",
        object_id="0xfresh",
        direction=Direction.AGAINST,
        existing_relationship=False,
        amount=TRIPLE_COST + MIN_DEPOSIT,
    )
    cart_store.save(Cart(subject_id=SUBJECT_ID, items=(make_item(), lost, against)))

    result = submit_stored_cart(
        SUBJECT_ID, store=cart_store, orchestrator=_orchestrator(ledger, indexer)
    )

    assert result is not None
    assert {skipped.item_id for skipped in result.skipped} == {"lost", "against"}
    remaining = cart_store.load(SUBJECT_ID)
    assert remaining is not None
    assert remaining.items == (lost,)
