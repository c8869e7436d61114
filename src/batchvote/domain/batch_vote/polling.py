"""Bounded polling of the eventually consistent indexer."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import NotIndexedError
from .settings import (
    DEFAULT_OBJECT_POLL_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_ATTEMPTS,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from batchvote.domain.model import IndexedTriple, TermId, TripleKey
    from batchvote.domain.ports import IndexerClient

    type Sleep = Callable[[float], Awaitable[object]]

log = getLogger(__name__)


class IndexingPoller:
    """Resolve ledger writes through the indexer within a fixed attempt budget.

    Total wait is ``attempts * interval``; there is no sleep after the last
    attempt. A query error counts as a miss for that attempt.
    """

    def __init__(
        self,
        indexer: IndexerClient,
        *,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        object_max_attempts: int = DEFAULT_OBJECT_POLL_MAX_ATTEMPTS,
        sleep: Sleep | None = None,
    ) -> None:
        if max_attempts < 1 or object_max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._indexer = indexer
        self._interval = interval_seconds
        self._max_attempts = max_attempts
        self._object_max_attempts = object_max_attempts
        self._sleep: Sleep = sleep or asyncio.sleep

    async def lookup_triple(self, key: TripleKey) -> IndexedTriple | None:
        """Single query without retry; errors propagate to the caller."""

        return await self._indexer.find_triple(key.subject_id, key.predicate_id, key.object_id)

    async def wait_for_triple(self, key: TripleKey) -> IndexedTriple:
        for attempt in range(1, self._max_attempts + 1):
            try:
                triple = await self.lookup_triple(key)
            except Exception:  # noqa: BLE001
                log.warning(
                    "Indexer query failed for %s (attempt %s/%s)",
                    _describe(key),
                    attempt,
                    self._max_attempts,
                    exc_info=True,
                )
                triple = None
            if triple is not None and triple.is_complete:
                log.debug("Triple %s indexed after %s attempt(s)", triple.term_id, attempt)
                return triple
            log.debug(
                "Triple %s not indexed yet (attempt %s/%s)",
                _describe(key),
                attempt,
                self._max_attempts,
            )
            if attempt < self._max_attempts:
                await self._sleep(self._interval)

        raise NotIndexedError(
            f"Triple {_describe(key)} not indexed after {self._max_attempts} attempts",
            attempts=self._max_attempts,
        )

    async def wait_for_object(self, label: str) -> TermId:
        for attempt in range(1, self._object_max_attempts + 1):
            try:
                objects = await self._indexer.find_objects_by_labels([label])
            except Exception:  # noqa: BLE001
                log.warning(
                    "Indexer query failed for object %r (attempt %s/%s)",
                    label,
                    attempt,
                    self._object_max_attempts,
                    exc_info=True,
                )
                objects = []
            for indexed in objects:
                if indexed.label == label:
                    log.debug("Object %r indexed after %s attempt(s)", label, attempt)
                    return indexed.term_id
            if attempt < self._object_max_attempts:
                await self._sleep(self._interval)

        raise NotIndexedError(
            f"Object {label!r} not indexed after {self._object_max_attempts} attempts",
            attempts=self._object_max_attempts,
        )

    async def wait_for_triples(self, keys: Iterable[TripleKey]) -> dict[TripleKey, IndexedTriple]:
        """Poll every key concurrently; keys that never resolve are absent."""

        unique_keys = list(dict.fromkeys(keys))
        outcomes = await asyncio.gather(
            *(self.wait_for_triple(key) for key in unique_keys),
            return_exceptions=True,
        )
        resolved: dict[TripleKey, IndexedTriple] = {}
        for key, outcome in zip(unique_keys, outcomes, strict=True):
            if isinstance(outcome, NotIndexedError):
                log.warning("Giving up on %s: %s", _describe(key), outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            resolved[key] = outcome
        return resolved


def _describe(key: TripleKey) -> str:
    return f"({key.subject_id}, {key.predicate_id}, {key.object_id})"
