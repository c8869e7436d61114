"""Shared structures for the batch vote phases (plan, context, result)."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from batchvote.domain.model import CartItem, CreatedTripleInfo, ExecutionState, TripleKey

from .events import EventStream, ItemSkipped, TransactionConfirmed

if TYPE_CHECKING:
    from batchvote.domain.model import ContractConfig, TermId, TransactionReceipt
    from batchvote.domain.ports import IndexerClient, LedgerClient

    from .polling import IndexingPoller
    from .settings import ExecutionConfig

log = getLogger(__name__)

SKIP_AGAINST_ON_NEW_RELATIONSHIP = "against_on_new_relationship"
SKIP_NOT_INDEXED = "not_indexed"


@dataclass(slots=True, frozen=True)
class CategoryLink:
    """Pending ``object -category-> category`` relationship for a new object."""

    object_id: TermId
    category_id: TermId
    object_label: str


@dataclass(slots=True, frozen=True)
class SkippedItem:
    item_id: str
    reason: str
    phase: ExecutionState


@dataclass(slots=True)
class ExecutionPlan:
    """Work slices handed from phase to phase.

    Phases consume their own slice and append to later ones: object creation
    feeds ``relationships``, reconciliation may move items into ``deposits``.
    """

    objects: list[CartItem] = field(default_factory=list[CartItem])
    relationships: list[CartItem] = field(default_factory=list[CartItem])
    redeems: list[CartItem] = field(default_factory=list[CartItem])
    deposits: list[CartItem] = field(default_factory=list[CartItem])
    category_links: list[CategoryLink] = field(default_factory=list[CategoryLink])
    created_triples: dict[TripleKey, CreatedTripleInfo] = field(
        default_factory=dict[TripleKey, CreatedTripleInfo]
    )


@dataclass(slots=True)
class BatchVoteResult:
    """Aggregated outcome of a successful submission."""

    tx_hashes: dict[ExecutionState, list[str]] = field(
        default_factory=dict[ExecutionState, list[str]]
    )
    objects_created: int = 0
    relationships_created: int = 0
    total_withdrawn: int = 0
    total_deposited: int = 0
    skipped: list[SkippedItem] = field(default_factory=list[SkippedItem])

    @property
    def transaction_count(self) -> int:
        return sum(len(hashes) for hashes in self.tx_hashes.values())


@dataclass(slots=True)
class SubmissionContext:
    """Mutable state shared by the phases of one submission."""

    ledger: LedgerClient
    indexer: IndexerClient
    poller: IndexingPoller
    config: ExecutionConfig
    contract_config: ContractConfig
    subject_id: TermId
    account: str
    events: EventStream = field(default_factory=EventStream)
    result: BatchVoteResult = field(default_factory=BatchVoteResult)
    current_step: int = 0
    total_steps: int = 1
    recovery_attempted: bool = False

    def record_transaction(
        self,
        phase: ExecutionState,
        receipt: TransactionReceipt,
        label: str,
    ) -> None:
        self.current_step += 1
        self.total_steps = max(self.total_steps, self.current_step)
        self.result.tx_hashes.setdefault(phase, []).append(receipt.tx_hash)
        log.info(
            "Step %s/%s confirmed (%s): %s",
            self.current_step,
            self.total_steps,
            label,
            receipt.tx_hash,
        )
        self.events.publish(
            TransactionConfirmed(
                phase=phase,
                tx_hash=receipt.tx_hash,
                label=label,
                step=self.current_step,
                total_steps=self.total_steps,
            )
        )

    def skip(self, item: CartItem, reason: str, phase: ExecutionState) -> None:
        self.result.skipped.append(SkippedItem(item_id=item.id, reason=reason, phase=phase))
        self.events.publish(ItemSkipped(item_id=item.id, reason=reason, phase=phase))

    def curve_id(self, item: CartItem) -> int:
        return self.config.curve_ids.for_curve(item.curve)


class ExecutionPhase(Protocol):
    """Contract implemented by each execution phase."""

    name: ExecutionState

    def is_empty(self, plan: ExecutionPlan) -> bool: ...

    async def run(self, plan: ExecutionPlan, *, context: SubmissionContext) -> None: ...
