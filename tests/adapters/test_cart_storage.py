from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from batchvote.adapters.cart_storage import (
    CartFileStore,
    SerializedCart,
    deserialize_cart,
    serialize_cart,
)
from batchvote.config.storage import StorageConfig
from batchvote.domain.model import Cart, CurrentPosition, Curve, Direction
from tests.helpers.batch_vote import SUBJECT_ID, make_item, make_new_object_item

if TYPE_CHECKING:
    from pathlib import Path

NOW = datetime(2025, 3, 1, 12, tzinfo=UTC)
HUGE = 123_456_789_012_345_678_901_234_567_890


def _cart() -> Cart:
    return Cart(
        subject_id=SUBJECT_ID,
        subject_label="Ada",
        items=(
            make_item(
                "held",
                amount=HUGE,
                curve=Curve.PROGRESSIVE,
                direction=Direction.AGAINST,
                position=CurrentPosition(
                    direction=Direction.FOR, shares=HUGE + 1, curve=Curve.PROGRESSIVE
                ),
            ),
            make_new_object_item("fresh", category_id=None),
        ),
    )


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_round_trip_preserves_amounts_exactly() -> None:
    cart = _cart()

    serialized = serialize_cart(cart, saved_at=NOW)
    restored = deserialize_cart(SerializedCart.model_validate_json(serialized.model_dump_json()))

    assert restored == cart
    assert serialized.items[0].amount == str(HUGE)


def test_missing_curve_defaults_to_linear() -> None:
    payload = {
        "subject_id": SUBJECT_ID,
        "saved_at": NOW.isoformat(),
        "items": [
            {
                "id": "legacy",
                "predicate_id": "0xpredicate",
                "object_label": "Courage",
                "object_id": "0xobject",
                "direction": "for",
                "amount": "100",
                "current_position": {"direction": "against", "shares": "7"},
            }
        ],
    }

    cart = deserialize_cart(SerializedCart.model_validate(payload))

    (item,) = cart.items
    assert item.curve is Curve.LINEAR
    assert item.current_position is not None
    assert item.current_position.curve is Curve.LINEAR
    assert item.current_position.shares == 7


def test_store_save_load_and_remove(tmp_path: Path) -> None:
    store = CartFileStore(StorageConfig(data_dir=tmp_path), clock=_Clock(NOW))
    cart = _cart()

    path = store.save(cart)

    assert path.parent == tmp_path.resolve() / "carts"
    assert json.loads(path.read_text())["items"][0]["amount"] == str(HUGE)
    assert store.load(SUBJECT_ID) == cart
    assert store.remove(SUBJECT_ID)
    assert store.load(SUBJECT_ID) is None
    assert not store.remove(SUBJECT_ID)


def test_expired_cart_is_discarded(tmp_path: Path) -> None:
    clock = _Clock(NOW)
    store = CartFileStore(StorageConfig(data_dir=tmp_path), clock=clock)
    path = store.save(_cart())

    clock.now = NOW + timedelta(hours=24, seconds=1)

    assert store.load(SUBJECT_ID) is None
    assert not path.exists()


def test_unreadable_cart_is_ignored(tmp_path: Path) -> None:
    store = CartFileStore(StorageConfig(data_dir=tmp_path))
    store.path_for(SUBJECT_ID).write_text("{not json", encoding="utf-8")

    assert store.load(SUBJECT_ID) is None


def test_subject_ids_are_sanitised_into_file_names(tmp_path: Path) -> None:
    store = CartFileStore(StorageConfig(data_dir=tmp_path))

    assert store.path_for("0xab/../cd").name == "0xab_.._cd.json"


def test_max_age_comes_from_storage_config(tmp_path: Path) -> None:
    clock = _Clock(NOW)
    config = StorageConfig(data_dir=tmp_path, cart_max_age=timedelta(minutes=5))
    store = CartFileStore(config, clock=clock)
    store.save(_cart())

    clock.now = NOW + timedelta(minutes=4)
    assert store.load(SUBJECT_ID) is not None

    clock.now = NOW + timedelta(minutes=6)
    assert store.load(SUBJECT_ID) is None


def test_naive_saved_at_is_read_as_utc(tmp_path: Path) -> None:
    store = CartFileStore(
        StorageConfig(data_dir=tmp_path), clock=_Clock(NOW + timedelta(hours=1))
    )
    payload = serialize_cart(_cart(), saved_at=NOW).model_dump(mode="json")
    payload["saved_at"] = "2025-03-01T12:00:00"
    store.path_for(SUBJECT_ID).write_text(json.dumps(payload), encoding="utf-8")

    assert store.load(SUBJECT_ID) == _cart()
