"""Deposit phase: one batched deposit, with counter-vault recovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.domain.model import (
    CartItem,
    Curve,
    DepositBatchRequest,
    Direction,
    ExecutionState,
)

from .errors import ErrorCode, LedgerCallError
from .redeems import RedeemExecutor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from batchvote.domain.model import TermId

    from .context import ExecutionPlan, SubmissionContext

log = getLogger(__name__)


@dataclass(slots=True)
class DepositSplit:
    progressive_against: list[CartItem] = field(default_factory=list[CartItem])
    linear_against: list[CartItem] = field(default_factory=list[CartItem])
    others: list[CartItem] = field(default_factory=list[CartItem])


def split_deposits(items: Sequence[CartItem]) -> DepositSplit:
    split = DepositSplit()
    for item in items:
        if item.direction is Direction.AGAINST and item.curve is Curve.PROGRESSIVE:
            split.progressive_against.append(item)
        elif item.direction is Direction.AGAINST:
            split.linear_against.append(item)
        else:
            split.others.append(item)
    return split


def build_deposit_request(
    items: Sequence[CartItem],
    *,
    context: SubmissionContext,
) -> DepositBatchRequest:
    return DepositBatchRequest(
        receiver=context.account,
        term_ids=tuple(item.target_term_id for item in items),
        curve_ids=tuple(context.curve_id(item) for item in items),
        amounts=tuple(item.amount for item in items),
        min_shares=tuple(0 for _ in items),
    )


@dataclass(slots=True)
class DepositPhase:
    """Deposit on relationships that already exist.

    FOR votes target the relationship's vault, AGAINST votes its counter vault.
    Blocking FOR positions are redeemed first. If the ledger refuses to
    initialise a progressive counter vault, a FOR seed is deposited and redeemed
    before the original request is retried; this happens at most once per
    submission.
    """

    executor: RedeemExecutor = field(default_factory=RedeemExecutor)
    name: ExecutionState = ExecutionState.DEPOSITING

    def is_empty(self, plan: ExecutionPlan) -> bool:
        return not plan.deposits

    async def run(self, plan: ExecutionPlan, *, context: SubmissionContext) -> None:
        items = plan.deposits
        split = split_deposits(items)

        if split.linear_against:
            await self.executor.redeem_blocking_for_positions(
                split.linear_against, Curve.LINEAR, context=context
            )
        if split.progressive_against:
            await self.executor.redeem_blocking_for_positions(
                split.progressive_against, Curve.PROGRESSIVE, context=context
            )

        request = build_deposit_request(items, context=context)
        try:
            receipt = await context.ledger.deposit_batch(request)
        except LedgerCallError as exc:
            if exc.code is not ErrorCode.COUNTER_TRIPLE_NOT_INITIALIZABLE:
                raise
            if context.recovery_attempted:
                log.error("Counter vault still not initialisable after recovery")
                raise
            affected = list(
                dict.fromkeys(
                    item.term_id for item in split.progressive_against if item.term_id is not None
                )
            )
            if not affected:
                raise
            context.recovery_attempted = True
            await self._recover(affected, context=context)
            receipt = await context.ledger.deposit_batch(request)

        context.record_transaction(self.name, receipt, f"deposit on {len(items)} item(s)")
        context.result.total_deposited += request.value

    async def _recover(self, term_ids: list[TermId], *, context: SubmissionContext) -> None:
        log.warning(
            "Seeding %s progressive counter vault(s) before retrying the deposit",
            len(term_ids),
        )
        min_deposit = context.contract_config.min_deposit
        progressive = context.config.curve_ids.for_curve(Curve.PROGRESSIVE)
        seed = DepositBatchRequest(
            receiver=context.account,
            term_ids=tuple(term_ids),
            curve_ids=tuple(progressive for _ in term_ids),
            amounts=tuple(min_deposit for _ in term_ids),
            min_shares=tuple(0 for _ in term_ids),
        )
        receipt = await context.ledger.deposit_batch(seed)
        context.record_transaction(self.name, receipt, "seed progressive FOR positions")
        await self.executor.redeem_seed_positions(term_ids, context=context, phase=self.name)
