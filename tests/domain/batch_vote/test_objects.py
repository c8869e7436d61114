from __future__ import annotations

from batchvote.domain.batch_vote import ItemSkipped, ObjectCreationPhase, TransactionConfirmed
from batchvote.domain.model import Direction, ExecutionState
from tests.helpers.batch_vote import (
    CATEGORY_PREDICATE_ID,
    FakeIndexer,
    FakeLedger,
    make_config,
    make_context,
    make_new_object_item,
    run,
)


def test_creates_object_and_queues_its_relationship() -> None:
    bundle = make_context()
    item = make_new_object_item()
    bundle.plan.objects = [item]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    assert [call.request for call in bundle.ledger.write_calls("create_object")] == ["Patience"]
    (queued,) = bundle.plan.relationships
    assert queued.id == item.id
    assert queued.object_id == "atom:Patience"
    assert queued.needs_relationship
    assert bundle.plan.objects == []
    assert bundle.result.objects_created == 1
    assert bundle.result.tx_hashes[ExecutionState.CREATING_OBJECTS] == ["0xtx1"]
    assert bundle.context.current_step == 1


def test_new_category_is_created_before_the_object() -> None:
    bundle = make_context()
    bundle.plan.objects = [make_new_object_item(category="Trait", category_id=None)]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    created = [call.request for call in bundle.ledger.write_calls("create_object")]
    assert created == ["Trait", "Patience"]
    assert bundle.plan.relationships[0].new_object is not None
    assert bundle.plan.relationships[0].new_object.category_id == "atom:Trait"
    assert bundle.result.objects_created == 2


def test_shared_labels_are_created_once() -> None:
    bundle = make_context()
    bundle.plan.objects = [
        make_new_object_item("a", category="Trait", category_id=None),
        make_new_object_item("b", category="Trait", category_id=None),
    ]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    created = [call.request for call in bundle.ledger.write_calls("create_object")]
    assert created == ["Trait", "Patience"]
    assert [item.object_id for item in bundle.plan.relationships] == [
        "atom:Patience",
        "atom:Patience",
    ]
    assert len(bundle.events.of_type(TransactionConfirmed)) == 2


def test_existing_object_is_reused_without_transaction() -> None:
    ledger = FakeLedger(FakeIndexer())
    ledger.objects["Patience"] = "0xexisting"
    bundle = make_context(ledger)
    bundle.plan.objects = [make_new_object_item()]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    assert bundle.ledger.write_calls() == []
    assert bundle.plan.relationships[0].object_id == "0xexisting"
    assert bundle.result.objects_created == 0
    assert bundle.context.current_step == 0


def test_against_items_are_dropped_and_reported() -> None:
    bundle = make_context()
    against = make_new_object_item("against", direction=Direction.AGAINST)
    bundle.plan.objects = [against]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    assert bundle.ledger.write_calls() == []
    assert bundle.plan.relationships == []
    assert [event.item_id for event in bundle.events.of_type(ItemSkipped)] == ["against"]
    assert bundle.result.skipped[0].reason == "against_on_new_relationship"


def test_missing_receipt_id_is_resolved_through_indexer() -> None:
    indexer = FakeIndexer()
    ledger = FakeLedger(indexer, omit_object_ids=True)
    bundle = make_context(ledger, indexer)
    bundle.plan.objects = [make_new_object_item()]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    assert indexer.object_queries == [["Patience"]]
    assert bundle.plan.relationships[0].object_id == "atom:Patience"


def test_category_link_queued_for_created_objects_only() -> None:
    ledger = FakeLedger(FakeIndexer())
    ledger.objects["Known"] = "0xknown"
    bundle = make_context(ledger, config=make_config(category_predicate_id=CATEGORY_PREDICATE_ID))
    bundle.plan.objects = [
        make_new_object_item("a", name="Patience"),
        make_new_object_item("b", name="Patience"),
        make_new_object_item("c", name="Known"),
    ]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    (link,) = bundle.plan.category_links
    assert link.object_id == "atom:Patience"
    assert link.category_id == "0xcategory"


def test_no_category_link_without_predicate() -> None:
    bundle = make_context()
    bundle.plan.objects = [make_new_object_item()]

    run(ObjectCreationPhase().run(bundle.plan, context=bundle.context))

    assert bundle.plan.category_links == []
