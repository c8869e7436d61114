"""Relationship creation phase with inline or deferred initial deposits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.domain.model import (
    CreateTriplesRequest,
    DepositBatchRequest,
    ExecutionState,
    TripleKey,
)

from .classification import group_triples
from .context import SKIP_NOT_INDEXED
from .objects import drop_against_items

if TYPE_CHECKING:
    from batchvote.domain.model import TermId, UniqueTriple

    from .context import ExecutionPlan, SubmissionContext

log = getLogger(__name__)


class DepositMode(StrEnum):
    INLINE = "inline"
    DEFERRED = "deferred"


def deposit_mode(triple: UniqueTriple) -> DepositMode:
    """A lone linear FOR vote rides along the creation call; anything else waits."""

    return DepositMode.INLINE if triple.is_single_linear_for else DepositMode.DEFERRED


def creation_assets(triple: UniqueTriple, triple_cost: int) -> int:
    if deposit_mode(triple) is DepositMode.INLINE:
        return triple.items[0].amount
    return triple_cost


@dataclass(slots=True, frozen=True)
class _DeferredDeposit:
    term_id: TermId
    curve_id: int
    amount: int


def deferred_deposits(
    triple: UniqueTriple,
    term_id: TermId,
    *,
    triple_cost: int,
    context: SubmissionContext,
) -> list[_DeferredDeposit]:
    """Deposits completing a deferred triple.

    The creation call already paid ``triple_cost`` into the relationship, so
    it is deducted from the first deposit only. Non-positive results are dropped.
    """

    deposits: list[_DeferredDeposit] = []
    for index, item in enumerate(triple.items):
        amount = item.amount - triple_cost if index == 0 else item.amount
        if amount <= 0:
            log.debug(
                "Nothing left to deposit for %r after the creation cost",
                item.object_label,
            )
            continue
        deposits.append(
            _DeferredDeposit(term_id=term_id, curve_id=context.curve_id(item), amount=amount)
        )
    return deposits


@dataclass(slots=True)
class RelationshipCreationPhase:
    """Create every missing relationship (plus category links) in one transaction."""

    name: ExecutionState = ExecutionState.CREATING_RELATIONSHIPS

    def is_empty(self, plan: ExecutionPlan) -> bool:
        return not plan.relationships and not plan.category_links

    async def run(self, plan: ExecutionPlan, *, context: SubmissionContext) -> None:
        items = drop_against_items(plan.relationships, context=context, phase=self.name)
        plan.relationships = []
        triples = group_triples(context.subject_id, items)
        triple_cost = context.contract_config.triple_cost

        request = self._build_request(list(triples.values()), plan, context=context)
        if request is None:
            log.info("No relationships left to create")
            return

        receipt = await context.ledger.create_triples(request)
        context.record_transaction(
            self.name, receipt, f"create {len(request.subject_ids)} relationship(s)"
        )
        context.result.relationships_created += len(request.subject_ids)
        context.result.total_deposited += request.value
        plan.category_links = []

        deferred = [
            triple for triple in triples.values() if deposit_mode(triple) is DepositMode.DEFERRED
        ]
        if not deferred:
            return

        resolved = await context.poller.wait_for_triples(triple.key for triple in deferred)
        deposits: list[_DeferredDeposit] = []
        for triple in deferred:
            indexed = resolved.get(triple.key)
            if indexed is None:
                log.warning(
                    "Relationship to %r was created but never indexed; skipping its deposits",
                    triple.object_label,
                )
                for item in triple.items:
                    context.skip(item, SKIP_NOT_INDEXED, self.name)
                continue
            info = indexed.created_info()
            plan.created_triples[triple.key] = info
            deposits.extend(
                deferred_deposits(
                    triple, info.term_id, triple_cost=triple_cost, context=context
                )
            )

        if not deposits:
            return

        deposit_request = DepositBatchRequest(
            receiver=context.account,
            term_ids=tuple(deposit.term_id for deposit in deposits),
            curve_ids=tuple(deposit.curve_id for deposit in deposits),
            amounts=tuple(deposit.amount for deposit in deposits),
            min_shares=tuple(0 for _ in deposits),
        )
        receipt = await context.ledger.deposit_batch(deposit_request)
        context.record_transaction(
            self.name, receipt, f"deposit on {len(deposits)} new relationship(s)"
        )
        context.result.total_deposited += deposit_request.value

    def _build_request(
        self,
        triples: list[UniqueTriple],
        plan: ExecutionPlan,
        *,
        context: SubmissionContext,
    ) -> CreateTriplesRequest | None:
        triple_cost = context.contract_config.triple_cost
        keys: list[TripleKey] = [triple.key for triple in triples]
        assets: list[int] = [creation_assets(triple, triple_cost) for triple in triples]

        predicate_id = context.config.category_predicate_id
        if predicate_id is not None:
            for link in plan.category_links:
                keys.append(TripleKey(link.object_id, predicate_id, link.category_id))
                assets.append(triple_cost)

        if not keys:
            return None
        log.info(
            "Creating %s relationship(s): %s inline, %s deferred, %s category link(s)",
            len(keys),
            sum(1 for triple in triples if deposit_mode(triple) is DepositMode.INLINE),
            sum(1 for triple in triples if deposit_mode(triple) is DepositMode.DEFERRED),
            len(keys) - len(triples),
        )
        return CreateTriplesRequest(
            subject_ids=tuple(key.subject_id for key in keys),
            predicate_ids=tuple(key.predicate_id for key in keys),
            object_ids=tuple(key.object_id for key in keys),
            assets=tuple(assets),
        )
