"""Typed progress events published during a submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from batchvote.domain.model import ExecutionState

    from .errors import BatchVoteFailure


@dataclass(slots=True, frozen=True)
class PhaseStarted:
    phase: ExecutionState
    step: int
    total_steps: int


@dataclass(slots=True, frozen=True)
class TransactionConfirmed:
    """Emitted once per confirmed ledger transaction; drives progress display."""

    phase: ExecutionState
    tx_hash: str
    label: str
    step: int
    total_steps: int


@dataclass(slots=True, frozen=True)
class PhaseCompleted:
    phase: ExecutionState


@dataclass(slots=True, frozen=True)
class ItemSkipped:
    """A cart item was left out without failing the submission."""

    item_id: str
    reason: str
    phase: ExecutionState


@dataclass(slots=True, frozen=True)
class SubmissionFailed:
    failure: BatchVoteFailure


type BatchVoteEvent = (
    PhaseStarted | TransactionConfirmed | PhaseCompleted | ItemSkipped | SubmissionFailed
)
type Listener = Callable[[BatchVoteEvent], None]


@dataclass(slots=True)
class EventStream:
    """Synchronous fan-out of events to subscribed listeners.

    ``history`` keeps every published event until ``clear`` is called; the
    orchestrator clears it when a submission starts and on ``reset``.
    """

    listeners: list[Listener] = field(default_factory=list[Listener])
    history: list[BatchVoteEvent] = field(default_factory=list[BatchVoteEvent])

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def publish(self, event: BatchVoteEvent) -> None:
        self.history.append(event)
        for listener in tuple(self.listeners):
            listener(event)

    def clear(self) -> None:
        self.history.clear()

    def of_type[TEvent](self, event_type: type[TEvent]) -> list[TEvent]:
        return [event for event in self.history if isinstance(event, event_type)]
