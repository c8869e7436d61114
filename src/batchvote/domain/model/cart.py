"""Cart items: a caller's locally accumulated vote intents."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import NamedTuple

from .enums import Curve, CurveMix, Direction

type TermId = str


@dataclass(slots=True, frozen=True)
class CurrentPosition:
    """A position the caller believes they hold on an item's relationship."""

    direction: Direction
    shares: int
    curve: Curve = Curve.LINEAR


@dataclass(slots=True, frozen=True)
class NewObjectData:
    """Creation payload for an object that does not exist on the ledger yet."""

    name: str
    category: str
    category_id: TermId | None = None

    @property
    def is_new_category(self) -> bool:
        return self.category_id is None


@dataclass(slots=True, frozen=True)
class CartItem:
    """A single vote intent.

    ``object_id`` is ``None`` while the target object still has to be created;
    ``term_id``/``counter_term_id`` are ``None`` while the relationship does not
    exist yet. Items are immutable: every adjustment returns a new instance.
    """

    id: str
    predicate_id: TermId
    object_label: str
    direction: Direction
    amount: int
    curve: Curve = Curve.LINEAR
    object_id: TermId | None = None
    term_id: TermId | None = None
    counter_term_id: TermId | None = None
    current_position: CurrentPosition | None = None
    new_object: NewObjectData | None = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"Cart item {self.id!r} amount must be strictly positive")
        if self.object_id is None and self.new_object is None:
            raise ValueError(f"Cart item {self.id!r} needs an object id or creation data")

    @property
    def needs_object(self) -> bool:
        return self.object_id is None

    @property
    def needs_relationship(self) -> bool:
        return self.term_id is None or self.counter_term_id is None

    @property
    def needs_redeem(self) -> bool:
        position = self.current_position
        if position is None or self.needs_relationship:
            return False
        return position.direction is not self.direction and position.shares > 0

    @property
    def target_term_id(self) -> TermId:
        """Vault receiving this item's deposit: FOR side or its counter."""

        term_id = self.term_id if self.direction is Direction.FOR else self.counter_term_id
        if term_id is None:
            raise ValueError(f"Cart item {self.id!r} has no resolved relationship")
        return term_id

    def with_amount(self, amount: int) -> CartItem:
        return replace(self, amount=amount)

    def with_object(self, object_id: TermId, *, category_id: TermId | None = None) -> CartItem:
        new_object = self.new_object
        if new_object is not None and category_id is not None:
            new_object = replace(new_object, category_id=category_id)
        return replace(self, object_id=object_id, new_object=new_object)

    def with_relationship(self, term_id: TermId, counter_term_id: TermId) -> CartItem:
        return replace(self, term_id=term_id, counter_term_id=counter_term_id)


@dataclass(slots=True, frozen=True)
class Cart:
    subject_id: TermId
    subject_label: str = ""
    items: tuple[CartItem, ...] = field(default_factory=tuple)


class TripleKey(NamedTuple):
    subject_id: TermId
    predicate_id: TermId
    object_id: TermId


@dataclass(slots=True)
class UniqueTriple:
    """Every cart item targeting the same (subject, predicate, object) link."""

    key: TripleKey
    object_label: str
    items: list[CartItem] = field(default_factory=list[CartItem])

    @property
    def curve_mix(self) -> CurveMix:
        curves = {item.curve for item in self.items}
        if curves == {Curve.PROGRESSIVE}:
            return CurveMix.PROGRESSIVE_ONLY
        if Curve.PROGRESSIVE in curves:
            return CurveMix.MIXED
        return CurveMix.LINEAR_ONLY

    @property
    def is_single_linear_for(self) -> bool:
        if len(self.items) != 1:
            return False
        item = self.items[0]
        return item.curve is Curve.LINEAR and item.direction is Direction.FOR
