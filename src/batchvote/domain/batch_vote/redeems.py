"""Withdrawal of existing positions, including blocking and seed positions."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.domain.model import Curve, Direction, ExecutionState, RedeemBatchRequest

if TYPE_CHECKING:
    from collections.abc import Iterable

    from batchvote.domain.model import CartItem, TermId

    from .context import ExecutionPlan, SubmissionContext

log = getLogger(__name__)


type _Position = tuple[TermId, int]


@dataclass(slots=True, frozen=True)
class RedeemOutcome:
    tx_hash: str
    total_shares: int


class RedeemExecutor:
    """Build a single redeem transaction out of freshly read share balances.

    Cached position sizes are never trusted: balances are re-read from the
    ledger and zero balances are skipped.
    """

    async def redeem_positions(
        self,
        items: Iterable[CartItem],
        *,
        context: SubmissionContext,
        phase: ExecutionState = ExecutionState.REDEEMING,
    ) -> RedeemOutcome | None:
        positions: list[_Position] = []
        for item in items:
            held = item.current_position
            if held is None:
                continue
            term_id = item.term_id if held.direction is Direction.FOR else item.counter_term_id
            if term_id is None:
                log.debug("No resolved vault for the position on %r", item.object_label)
                continue
            positions.append((term_id, context.config.curve_ids.for_curve(held.curve)))
        return await self._redeem(positions, context=context, phase=phase, label="redeem positions")

    async def redeem_blocking_for_positions(
        self,
        items: Iterable[CartItem],
        curve: Curve,
        *,
        context: SubmissionContext,
        phase: ExecutionState = ExecutionState.REDEEMING,
    ) -> RedeemOutcome | None:
        """Withdraw FOR positions on ``curve`` that would block AGAINST deposits."""

        curve_id = context.config.curve_ids.for_curve(curve)
        positions = [(item.term_id, curve_id) for item in items if item.term_id is not None]
        return await self._redeem(
            positions,
            context=context,
            phase=phase,
            label=f"redeem blocking {curve} FOR positions",
        )

    async def redeem_seed_positions(
        self,
        term_ids: Iterable[TermId],
        *,
        context: SubmissionContext,
        phase: ExecutionState = ExecutionState.DEPOSITING,
    ) -> RedeemOutcome | None:
        """Withdraw the progressive FOR seeds placed by the deposit recovery."""

        curve_id = context.config.curve_ids.for_curve(Curve.PROGRESSIVE)
        return await self._redeem(
            [(term_id, curve_id) for term_id in term_ids],
            context=context,
            phase=phase,
            label="redeem seed positions",
            counted=False,
        )

    async def _redeem(
        self,
        positions: list[_Position],
        *,
        context: SubmissionContext,
        phase: ExecutionState,
        label: str,
        counted: bool = True,
    ) -> RedeemOutcome | None:
        unique = list(dict.fromkeys(positions))
        if not unique:
            return None

        balances = await asyncio.gather(
            *(
                context.ledger.get_shares(context.account, term_id, curve_id)
                for term_id, curve_id in unique
            )
        )
        held: list[tuple[TermId, int, int]] = []
        for (term_id, curve_id), shares in zip(unique, balances, strict=True):
            if shares <= 0:
                log.debug("Skipping %s on curve %s: no shares held", term_id, curve_id)
                continue
            held.append((term_id, curve_id, shares))
        if not held:
            return None

        request = RedeemBatchRequest(
            receiver=context.account,
            term_ids=tuple(term_id for term_id, _, _ in held),
            curve_ids=tuple(curve_id for _, curve_id, _ in held),
            shares=tuple(shares for _, _, shares in held),
            min_assets=tuple(0 for _ in held),
        )
        receipt = await context.ledger.redeem_batch(request)
        context.record_transaction(phase, receipt, label)
        total_shares = sum(request.shares)
        if counted:
            context.result.total_withdrawn += total_shares
        return RedeemOutcome(tx_hash=receipt.tx_hash, total_shares=total_shares)


@dataclass(slots=True)
class RedeemPhase:
    """Withdraw opposite-direction positions ahead of the deposit phase."""

    executor: RedeemExecutor = field(default_factory=RedeemExecutor)
    name: ExecutionState = ExecutionState.REDEEMING

    def is_empty(self, plan: ExecutionPlan) -> bool:
        return not plan.redeems

    async def run(self, plan: ExecutionPlan, *, context: SubmissionContext) -> None:
        outcome = await self.executor.redeem_positions(plan.redeems, context=context)
        if outcome is None:
            log.info("All %s position(s) to redeem were already empty", len(plan.redeems))
            return
        log.info("Redeemed %s share(s) in %s", outcome.total_shares, outcome.tx_hash)
