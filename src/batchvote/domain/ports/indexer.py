"""Port for the read-only, eventually consistent indexer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from batchvote.domain.model import IndexedObject, IndexedTriple, TermId


@runtime_checkable
class IndexerClient(Protocol):
    async def find_triple(
        self,
        subject_id: TermId,
        predicate_id: TermId,
        object_id: TermId,
    ) -> IndexedTriple | None:
        """Return the indexed triple, or ``None`` while it is not visible yet."""
        ...

    async def find_objects_by_labels(self, labels: Sequence[str]) -> list[IndexedObject]:
        """Return every indexed object whose label exactly matches one of ``labels``."""
        ...
