"""GraphQL indexer response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

log = logging.getLogger(__name__)


class IndexerBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Indexer %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class AtomRef(IndexerBaseModel):
    term_id: str
    label: str | None = None


class CounterTermRef(IndexerBaseModel):
    id: str


class TripleNode(IndexerBaseModel):
    term_id: str
    subject: AtomRef | None = None
    predicate: AtomRef | None = None
    object: AtomRef | None = None
    counter_term: CounterTermRef | None = None


class AtomNode(IndexerBaseModel):
    term_id: str
    label: str


class GraphQLError(IndexerBaseModel):
    message: str


class TriplesData(IndexerBaseModel):
    triples: list[TripleNode] = []


class AtomsData(IndexerBaseModel):
    atoms: list[AtomNode] = []


class TriplesResponse(IndexerBaseModel):
    data: TriplesData | None = None
    errors: list[GraphQLError] | None = None


class AtomsResponse(IndexerBaseModel):
    data: AtomsData | None = None
    errors: list[GraphQLError] | None = None
