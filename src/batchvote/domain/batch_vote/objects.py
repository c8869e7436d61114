"""Object creation phase: resolve ids for items targeting brand-new objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.domain.model import Direction, ExecutionState, TransactionReceipt

from .context import SKIP_AGAINST_ON_NEW_RELATIONSHIP, CategoryLink

if TYPE_CHECKING:
    from collections.abc import Iterable

    from batchvote.domain.model import CartItem, TermId

    from .context import ExecutionPlan, SubmissionContext

log = getLogger(__name__)


def drop_against_items(
    items: Iterable[CartItem],
    *,
    context: SubmissionContext,
    phase: ExecutionState,
) -> list[CartItem]:
    """Keep FOR items only; a relationship that does not exist yet cannot be opposed."""

    kept: list[CartItem] = []
    for item in items:
        if item.direction is Direction.AGAINST:
            log.warning(
                "Skipping AGAINST vote on %r: the relationship does not exist yet",
                item.object_label,
            )
            context.skip(item, SKIP_AGAINST_ON_NEW_RELATIONSHIP, phase)
            continue
        kept.append(item)
    return kept


@dataclass(slots=True)
class _ResolvedObject:
    object_id: TermId
    created: bool


@dataclass(slots=True)
class ObjectCreationPhase:
    """Get-or-create categories and objects, then queue their relationships.

    Calls are memoised by label so a category or object shared by several
    items is only sent to the ledger once per submission.
    """

    name: ExecutionState = ExecutionState.CREATING_OBJECTS
    _resolved: dict[str, _ResolvedObject] = field(default_factory=dict[str, _ResolvedObject])

    def is_empty(self, plan: ExecutionPlan) -> bool:
        return not plan.objects

    async def run(self, plan: ExecutionPlan, *, context: SubmissionContext) -> None:
        self._resolved.clear()
        items = drop_against_items(plan.objects, context=context, phase=self.name)
        plan.objects = []
        linked: set[TermId] = set()

        for item in items:
            new_object = item.new_object
            if new_object is None:
                raise ValueError(f"Cart item {item.id!r} has no object creation data")

            category_id = new_object.category_id
            if category_id is None:
                category = await self._ensure(new_object.category, context=context)
                category_id = category.object_id

            resolved = await self._ensure(new_object.name, context=context)
            if (
                resolved.created
                and context.config.category_predicate_id is not None
                and resolved.object_id not in linked
            ):
                linked.add(resolved.object_id)
                plan.category_links.append(
                    CategoryLink(
                        object_id=resolved.object_id,
                        category_id=category_id,
                        object_label=new_object.name,
                    )
                )
            plan.relationships.append(item.with_object(resolved.object_id, category_id=category_id))

        log.info(
            "Resolved %s object(s), %s created, %s category link(s) queued",
            len(self._resolved),
            sum(1 for resolved in self._resolved.values() if resolved.created),
            len(plan.category_links),
        )

    async def _ensure(self, label: str, *, context: SubmissionContext) -> _ResolvedObject:
        cached = self._resolved.get(label)
        if cached is not None:
            return cached

        receipt = await context.ledger.get_or_create_object(label)
        if receipt.tx_hash is not None:
            context.record_transaction(
                self.name,
                TransactionReceipt(tx_hash=receipt.tx_hash),
                f"create object {label!r}",
            )
        object_id = receipt.object_id
        if object_id is None:
            log.debug("Object %r has no id in its receipt; waiting for the indexer", label)
            object_id = await context.poller.wait_for_object(label)
        if receipt.created:
            context.result.objects_created += 1

        resolved = _ResolvedObject(object_id=object_id, created=receipt.created)
        self._resolved[label] = resolved
        return resolved
