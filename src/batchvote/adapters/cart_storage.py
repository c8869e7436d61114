"""JSON file persistence for carts, one file per subject.

Amounts and share counts are stored as decimal strings so that values beyond
the float range survive the round-trip exactly.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from batchvote.domain.model import Cart, CartItem, CurrentPosition, Curve, Direction, NewObjectData

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from batchvote.config.storage import StorageConfig

log = getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]")


class _SerializedModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SerializedPosition(_SerializedModel):
    direction: Direction
    shares: str
    curve: Curve = Curve.LINEAR


class SerializedNewObject(_SerializedModel):
    name: str
    category: str
    category_id: str | None = None


class SerializedCartItem(_SerializedModel):
    id: str
    predicate_id: str
    object_label: str
    direction: Direction
    # Carts saved before progressive curves existed carry no curve.
    curve: Curve = Curve.LINEAR
    amount: str
    object_id: str | None = None
    term_id: str | None = None
    counter_term_id: str | None = None
    current_position: SerializedPosition | None = None
    new_object: SerializedNewObject | None = None


class SerializedCart(_SerializedModel):
    subject_id: str
    subject_label: str = ""
    items: list[SerializedCartItem] = Field(default_factory=list[SerializedCartItem])
    saved_at: datetime

    @field_validator("saved_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Hand-edited files may carry a naive timestamp.
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def serialize_cart(cart: Cart, *, saved_at: datetime | None = None) -> SerializedCart:
    return SerializedCart(
        subject_id=cart.subject_id,
        subject_label=cart.subject_label,
        items=[_serialize_item(item) for item in cart.items],
        saved_at=saved_at or datetime.now(UTC),
    )


def deserialize_cart(data: SerializedCart) -> Cart:
    return Cart(
        subject_id=data.subject_id,
        subject_label=data.subject_label,
        items=tuple(_deserialize_item(item) for item in data.items),
    )


def _serialize_item(item: CartItem) -> SerializedCartItem:
    position = item.current_position
    new_object = item.new_object
    return SerializedCartItem(
        id=item.id,
        predicate_id=item.predicate_id,
        object_label=item.object_label,
        direction=item.direction,
        curve=item.curve,
        amount=str(item.amount),
        object_id=item.object_id,
        term_id=item.term_id,
        counter_term_id=item.counter_term_id,
        current_position=(
            SerializedPosition(
                direction=position.direction,
                shares=str(position.shares),
                curve=position.curve,
            )
            if position is not None
            else None
        ),
        new_object=(
            SerializedNewObject(
                name=new_object.name,
                category=new_object.category,
                category_id=new_object.category_id,
            )
            if new_object is not None
            else None
        ),
    )


def _deserialize_item(data: SerializedCartItem) -> CartItem:
    position = data.current_position
    new_object = data.new_object
    return CartItem(
        id=data.id,
        predicate_id=data.predicate_id,
        object_label=data.object_label,
        direction=data.direction,
        curve=data.curve,
        amount=int(data.amount),
        object_id=data.object_id,
        term_id=data.term_id,
        counter_term_id=data.counter_term_id,
        current_position=(
            CurrentPosition(
                direction=position.direction,
                shares=int(position.shares),
                curve=position.curve,
            )
            if position is not None
            else None
        ),
        new_object=(
            NewObjectData(
                name=new_object.name,
                category=new_object.category,
                category_id=new_object.category_id,
            )
            if new_object is not None
            else None
        ),
    )


class CartFileStore:
    """Persist carts under ``<data_dir>/carts``; carts older than ``cart_max_age`` expire."""

    def __init__(
        self,
        config: StorageConfig,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._max_age = config.cart_max_age
        self._clock = clock or (lambda: datetime.now(UTC))

    def path_for(self, subject_id: str) -> Path:
        filename = _UNSAFE_FILENAME.sub("_", subject_id) or "cart"
        return self._config.carts_dir() / f"{filename}.json"

    def save(self, cart: Cart) -> Path:
        path = self.path_for(cart.subject_id)
        serialized = serialize_cart(cart, saved_at=self._clock())
        path.write_text(serialized.model_dump_json(indent=2), encoding="utf-8")
        log.debug("Saved cart with %s item(s) to %s", len(cart.items), path)
        return path

    def load(self, subject_id: str) -> Cart | None:
        path = self.path_for(subject_id)
        if not path.exists():
            return None
        try:
            data = SerializedCart.model_validate_json(path.read_text(encoding="utf-8"))
            cart = deserialize_cart(data)
        except (OSError, ValidationError, ValueError) as exc:
            log.warning("Ignoring unreadable cart file %s: %s", path, exc)
            return None

        if self._clock() - data.saved_at > self._max_age:
            log.info("Cart for %s expired (saved %s); removing it", subject_id, data.saved_at)
            path.unlink(missing_ok=True)
            return None
        return cart

    def remove(self, subject_id: str) -> bool:
        path = self.path_for(subject_id)
        if not path.exists():
            return False
        path.unlink()
        return True
