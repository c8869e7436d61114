from __future__ import annotations

from batchvote.domain.batch_vote import EventStream, ItemSkipped, PhaseCompleted
from batchvote.domain.model import ExecutionState


def test_unsubscribed_listener_stops_receiving_events() -> None:
    stream = EventStream()
    received: list[object] = []
    unsubscribe = stream.subscribe(received.append)

    stream.publish(PhaseCompleted(phase=ExecutionState.REDEEMING))
    unsubscribe()
    unsubscribe()
    stream.publish(PhaseCompleted(phase=ExecutionState.DEPOSITING))

    assert received == [PhaseCompleted(phase=ExecutionState.REDEEMING)]
    assert len(stream.history) == 2


def test_history_can_be_filtered_and_cleared() -> None:
    stream = EventStream()
    skipped = ItemSkipped(item_id="a", reason="not_indexed", phase=ExecutionState.DEPOSITING)
    stream.publish(skipped)
    stream.publish(PhaseCompleted(phase=ExecutionState.DEPOSITING))

    assert stream.of_type(ItemSkipped) == [skipped]

    stream.clear()

    assert stream.history == []
