"""Cart classification: deduplication into unique triples and phase partitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.domain.model import CartItem, TripleKey, UniqueTriple

if TYPE_CHECKING:
    from collections.abc import Iterable

    from batchvote.domain.model import TermId

log = getLogger(__name__)


def triple_key(subject_id: TermId, item: CartItem) -> TripleKey:
    if item.object_id is None:
        raise ValueError(f"Cart item {item.id!r} has no object id to key on")
    return TripleKey(
        subject_id=subject_id, predicate_id=item.predicate_id, object_id=item.object_id
    )


def group_triples(subject_id: TermId, items: Iterable[CartItem]) -> dict[TripleKey, UniqueTriple]:
    """Collapse items sharing (subject, predicate, object) into one ``UniqueTriple``.

    Curve and direction are properties of a deposit, not of the relationship, so
    they never split a group. Insertion order follows the first item of each group.
    """

    triples: dict[TripleKey, UniqueTriple] = {}
    count = 0
    for item in items:
        count += 1
        key = triple_key(subject_id, item)
        triple = triples.get(key)
        if triple is None:
            triple = UniqueTriple(key=key, object_label=item.object_label)
            triples[key] = triple
        triple.items.append(item)
    log.debug("Deduplicated %s items into %s unique triples", count, len(triples))
    return triples


@dataclass(slots=True)
class CartClassification:
    """Disjoint partitions of a cart; every input item lands in exactly one list."""

    needs_object: list[CartItem] = field(default_factory=list[CartItem])
    needs_relationship: list[CartItem] = field(default_factory=list[CartItem])
    needs_redeem: list[CartItem] = field(default_factory=list[CartItem])
    direct_deposit: list[CartItem] = field(default_factory=list[CartItem])
    triples: dict[TripleKey, UniqueTriple] = field(default_factory=dict[TripleKey, UniqueTriple])

    @property
    def partitions(self) -> tuple[list[CartItem], ...]:
        return (self.needs_object, self.needs_relationship, self.needs_redeem, self.direct_deposit)

    @property
    def deposit_items(self) -> list[CartItem]:
        """Items depositing on an existing relationship, redeem-first ones included."""

        return [*self.needs_redeem, *self.direct_deposit]


def classify_cart(subject_id: TermId, items: Iterable[CartItem]) -> CartClassification:
    """Partition ``items`` by the work they need before their deposit can land."""

    classification = CartClassification()
    known_objects: list[CartItem] = []
    for item in items:
        if item.needs_object:
            classification.needs_object.append(item)
            continue
        known_objects.append(item)
        if item.needs_relationship:
            classification.needs_relationship.append(item)
        elif item.needs_redeem:
            classification.needs_redeem.append(item)
        else:
            classification.direct_deposit.append(item)

    classification.triples = group_triples(subject_id, known_objects)
    return classification
