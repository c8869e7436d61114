"""State machine driving a whole batch vote submission."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.domain.model import Direction, ExecutionState

from .amounts import validate_amounts
from .classification import classify_cart, triple_key
from .context import BatchVoteResult, ExecutionPlan, SubmissionContext
from .deposits import DepositPhase
from .errors import (
    BatchVoteError,
    BatchVoteFailure,
    CartValidationError,
    ErrorCode,
    LedgerCallError,
)
from .events import EventStream, PhaseCompleted, PhaseStarted, SubmissionFailed
from .objects import ObjectCreationPhase
from .polling import IndexingPoller
from .redeems import RedeemExecutor, RedeemPhase
from .relationships import RelationshipCreationPhase
from .settings import ExecutionConfig

if TYPE_CHECKING:
    from collections.abc import Sequence

    from batchvote.domain.model import Cart, CartItem, ContractConfig
    from batchvote.domain.ports import IndexerClient, LedgerClient

    from .classification import CartClassification
    from .context import ExecutionPhase

log = getLogger(__name__)


def count_steps(plan: ExecutionPlan) -> int:
    """Expected transaction count, for progress display only."""

    steps = 0
    if plan.objects:
        steps += 1
    # Every new object also goes through relationship creation.
    if plan.objects or plan.relationships:
        steps += 2
    if plan.redeems:
        steps += 1
    if plan.deposits:
        steps += 1
    return max(steps, 1)


def build_plan(classification: CartClassification) -> ExecutionPlan:
    return ExecutionPlan(
        objects=list(classification.needs_object),
        relationships=list(classification.needs_relationship),
        redeems=list(classification.needs_redeem),
        deposits=classification.deposit_items,
    )


def default_phases() -> tuple[ExecutionPhase, ...]:
    executor = RedeemExecutor()
    return (
        ObjectCreationPhase(),
        RelationshipCreationPhase(),
        RedeemPhase(executor=executor),
        DepositPhase(executor=executor),
    )


class BatchVoteOrchestrator:
    """Run a cart through validation and the four execution phases.

    ``state``, ``current_step`` and ``total_steps`` are readable at any time;
    the same information is published on ``events``. After a failure ``error``
    holds the structured failure until ``reset`` is called.
    """

    def __init__(
        self,
        ledger: LedgerClient | None,
        indexer: IndexerClient | None,
        *,
        config: ExecutionConfig | None = None,
        events: EventStream | None = None,
        poller: IndexingPoller | None = None,
        phases: Sequence[ExecutionPhase] | None = None,
    ) -> None:
        self.ledger = ledger
        self.indexer = indexer
        self.config = config or ExecutionConfig()
        self.events = events or EventStream()
        self._poller = poller
        self._phases = tuple(phases) if phases is not None else default_phases()
        self.state = ExecutionState.IDLE
        self.error: BatchVoteFailure | None = None
        self.current_step = 0
        self.total_steps = 0
        self._context: SubmissionContext | None = None
        self.events.subscribe(self._track_progress)

    def reset(self) -> None:
        if self.state.in_flight:
            raise RuntimeError("Cannot reset while a submission is in flight")
        self.state = ExecutionState.IDLE
        self.error = None
        self.current_step = 0
        self.total_steps = 0
        self._context = None
        self.events.clear()

    async def submit(self, cart: Cart) -> BatchVoteResult:
        if self.state.in_flight:
            raise RuntimeError("A submission is already in flight")

        self.error = None
        self.current_step = 0
        self.total_steps = 0
        self._context = None
        self.events.clear()
        self._set_state(ExecutionState.VALIDATING)
        try:
            result = await self._submit(cart)
        except BatchVoteError as exc:
            self._fail(exc)
            raise
        except Exception as exc:
            error = LedgerCallError.from_message(str(exc), phase=self.state)
            self._fail(error)
            raise error from exc
        except BaseException:
            self._fail(BatchVoteError(ErrorCode.UNKNOWN, f"Submission cancelled in {self.state}"))
            raise

        self._set_state(ExecutionState.SUCCESS)
        log.info(
            "Batch vote complete: %s transaction(s), %s object(s), %s relationship(s)",
            result.transaction_count,
            result.objects_created,
            result.relationships_created,
        )
        return result

    async def _submit(self, cart: Cart) -> BatchVoteResult:
        ledger, indexer = self.ledger, self.indexer
        if ledger is None or indexer is None:
            raise CartValidationError(ErrorCode.CLIENT_NOT_READY)
        account = ledger.account
        if not account:
            raise CartValidationError(ErrorCode.WALLET_NOT_CONNECTED)
        if not cart.items:
            raise CartValidationError(ErrorCode.EMPTY_CART)

        poller = self._poller or IndexingPoller(
            indexer,
            interval_seconds=self.config.poll_interval_seconds,
            max_attempts=self.config.poll_max_attempts,
            object_max_attempts=self.config.object_poll_max_attempts,
        )
        contract_config, items = await asyncio.gather(
            ledger.read_config(),
            self._reconcile(cart, poller),
        )
        self._check_against_on_new(items)
        items = validate_amounts(items, contract_config, tolerance=self.config.dust_tolerance)
        plan = build_plan(classify_cart(cart.subject_id, items))

        context = self._new_context(cart, ledger, indexer, poller, contract_config, account)
        context.total_steps = count_steps(plan)
        self.total_steps = context.total_steps
        log.info(
            "Submitting %s vote(s) on %s in %s step(s)",
            len(items),
            cart.subject_label or cart.subject_id,
            context.total_steps,
        )

        for phase in self._phases:
            if phase.is_empty(plan):
                continue
            self._set_state(phase.name)
            self.events.publish(
                PhaseStarted(
                    phase=phase.name,
                    step=context.current_step,
                    total_steps=context.total_steps,
                )
            )
            await phase.run(plan, context=context)
            self.events.publish(PhaseCompleted(phase=phase.name))
        return context.result

    async def _reconcile(self, cart: Cart, poller: IndexingPoller) -> list[CartItem]:
        """Re-target items whose "new" relationship already exists on the indexer."""

        candidates = [
            index
            for index, item in enumerate(cart.items)
            if item.object_id is not None and item.needs_relationship
        ]
        items = list(cart.items)
        if not candidates:
            return items

        lookups = await asyncio.gather(
            *(poller.lookup_triple(triple_key(cart.subject_id, items[i])) for i in candidates),
            return_exceptions=True,
        )
        for index, found in zip(candidates, lookups, strict=True):
            item = items[index]
            if isinstance(found, BaseException):
                log.warning(
                    "Could not check whether %r already exists: %s", item.object_label, found
                )
                continue
            if found is None or not found.is_complete:
                continue
            log.info("Relationship to %r already exists; depositing directly", item.object_label)
            info = found.created_info()
            items[index] = item.with_relationship(info.term_id, info.counter_term_id)
        return items

    def _check_against_on_new(self, items: Sequence[CartItem]) -> None:
        if not self.config.reject_against_on_new_relationships:
            return
        for item in items:
            if item.direction is Direction.AGAINST and item.needs_relationship:
                raise CartValidationError(
                    ErrorCode.AGAINST_ON_NEW_RELATIONSHIP,
                    f'Cannot vote AGAINST "{item.object_label}": the relationship does not exist',
                    item_id=item.id,
                )

    def _new_context(
        self,
        cart: Cart,
        ledger: LedgerClient,
        indexer: IndexerClient,
        poller: IndexingPoller,
        contract_config: ContractConfig,
        account: str,
    ) -> SubmissionContext:
        context = SubmissionContext(
            ledger=ledger,
            indexer=indexer,
            poller=poller,
            config=self.config,
            contract_config=contract_config,
            subject_id=cart.subject_id,
            account=account,
            events=self.events,
        )
        self._context = context
        return context

    def _track_progress(self, _event: object) -> None:
        context = self._context
        if context is not None:
            self.current_step = context.current_step
            self.total_steps = context.total_steps

    def _set_state(self, state: ExecutionState) -> None:
        log.debug("State %s -> %s", self.state, state)
        self.state = state

    def _fail(self, error: BatchVoteError) -> None:
        if error.phase is None:
            error.phase = self.state
        failure = error.as_failure()
        self.error = failure
        self._set_state(ExecutionState.ERROR)
        log.error("Batch vote failed in %s: [%s] %s", failure.phase, failure.code, failure.message)
        self.events.publish(SubmissionFailed(failure=failure))
