from __future__ import annotations

import pytest

from batchvote.domain.batch_vote import ErrorCode, IndexingPoller, NotIndexedError
from batchvote.domain.model import TripleKey
from tests.helpers.batch_vote import PREDICATE_ID, SUBJECT_ID, FakeIndexer, run

KEY = TripleKey(SUBJECT_ID, PREDICATE_ID, "0xobject")
OTHER = TripleKey(SUBJECT_ID, PREDICATE_ID, "0xother")


class _RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _poller(indexer: FakeIndexer, sleep: _RecordingSleep, *, attempts: int = 4) -> IndexingPoller:
    return IndexingPoller(
        indexer,
        interval_seconds=2.0,
        max_attempts=attempts,
        object_max_attempts=attempts,
        sleep=sleep,
    )


def test_wait_for_triple_polls_until_visible() -> None:
    indexer = FakeIndexer(lag=2)
    indexer.add_triple(KEY, "0xterm", "0xcounter")
    sleep = _RecordingSleep()

    triple = run(_poller(indexer, sleep).wait_for_triple(KEY))

    assert triple.term_id == "0xterm"
    assert triple.counter_term_id == "0xcounter"
    assert len(indexer.triple_queries) == 3
    assert sleep.calls == [2.0, 2.0]


def test_wait_for_triple_waits_for_counter_id() -> None:
    indexer = FakeIndexer(counter_lag=2)
    indexer.add_triple(KEY, "0xterm", "0xcounter")
    sleep = _RecordingSleep()

    triple = run(_poller(indexer, sleep).wait_for_triple(KEY))

    assert triple.counter_term_id == "0xcounter"
    assert len(indexer.triple_queries) == 3


def test_wait_for_triple_gives_up_without_trailing_sleep() -> None:
    indexer = FakeIndexer()
    sleep = _RecordingSleep()

    with pytest.raises(NotIndexedError) as excinfo:
        run(_poller(indexer, sleep, attempts=4).wait_for_triple(KEY))

    assert excinfo.value.code is ErrorCode.NOT_INDEXED
    assert excinfo.value.attempts == 4
    assert len(indexer.triple_queries) == 4
    assert sleep.calls == [2.0, 2.0, 2.0]


def test_query_errors_count_as_misses() -> None:
    indexer = FakeIndexer()
    indexer.add_triple(KEY, "0xterm", "0xcounter")
    indexer.failures.append(RuntimeError("indexer unavailable"))
    sleep = _RecordingSleep()

    triple = run(_poller(indexer, sleep).wait_for_triple(KEY))

    assert triple.term_id == "0xterm"
    assert len(indexer.triple_queries) == 2


def test_lookup_triple_does_not_retry() -> None:
    indexer = FakeIndexer(lag=1)
    indexer.add_triple(KEY, "0xterm", "0xcounter")

    assert run(_poller(indexer, _RecordingSleep()).lookup_triple(KEY)) is None
    assert len(indexer.triple_queries) == 1


def test_wait_for_object_resolves_by_label() -> None:
    indexer = FakeIndexer(lag=1)
    indexer.objects["Patience"] = "0xpatience"
    sleep = _RecordingSleep()

    object_id = run(_poller(indexer, sleep).wait_for_object("Patience"))

    assert object_id == "0xpatience"
    assert indexer.object_queries == [["Patience"], ["Patience"]]


def test_wait_for_object_exhausts_budget() -> None:
    indexer = FakeIndexer()
    sleep = _RecordingSleep()

    with pytest.raises(NotIndexedError):
        run(_poller(indexer, sleep, attempts=2).wait_for_object("Ghost"))

    assert sleep.calls == [2.0]


def test_wait_for_triples_returns_partial_map() -> None:
    indexer = FakeIndexer()
    indexer.add_triple(KEY, "0xterm", "0xcounter")
    sleep = _RecordingSleep()

    resolved = run(_poller(indexer, sleep, attempts=2).wait_for_triples([KEY, OTHER, KEY]))

    assert list(resolved) == [KEY]
    assert resolved[KEY].term_id == "0xterm"


def test_poller_requires_at_least_one_attempt() -> None:
    with pytest.raises(ValueError, match="at least 1"):
        IndexingPoller(FakeIndexer(), max_attempts=0)
