"""GraphQL indexer client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from batchvote.adapters.http_resilience import ResilientClient
from batchvote.domain.model import IndexedObject, IndexedTriple

from .schema import AtomsResponse, GraphQLError, TriplesResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from batchvote.config.http_resilience import ResilienceConfig
    from batchvote.config.indexer import IndexerConfig
    from batchvote.domain.model import TermId

log = getLogger(__name__)

TRIPLE_BY_ATOMS_QUERY = """
query GetTripleByAtoms($subjectId: String!, $predicateId: String!, $objectId: String!) {
  triples(
    where: {
      subject_id: { _eq: $subjectId }
      predicate_id: { _eq: $predicateId }
      object_id: { _eq: $objectId }
    }
    limit: 1
  ) {
    term_id
    subject { term_id label }
    predicate { term_id label }
    object { term_id label }
    counter_term { id }
  }
}
"""

ATOMS_BY_LABELS_QUERY = """
query GetAtomsByLabels($labels: [String!]!) {
  atoms(where: { label: { _in: $labels } }) {
    term_id
    label
  }
}
"""


class IndexerAPIError(RuntimeError):
    """Raised when the indexer returns GraphQL errors or an unexpected payload."""


class GraphQLIndexerClient:
    """Read-only access to the indexer through two GraphQL lookups."""

    def __init__(
        self,
        *,
        config: IndexerConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def aclose(self) -> None:
        """Close the HTTP client; the next query opens a new one."""

        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    def _http(self) -> ResilientClient:
        # One client per adapter so the rate limit spans concurrent lookups.
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    async def find_triple(
        self,
        subject_id: TermId,
        predicate_id: TermId,
        object_id: TermId,
    ) -> IndexedTriple | None:
        payload = await self._execute(
            TRIPLE_BY_ATOMS_QUERY,
            {"subjectId": subject_id, "predicateId": predicate_id, "objectId": object_id},
        )
        response = TriplesResponse.model_validate(payload)
        _raise_for_errors(response.errors)
        if response.data is None or not response.data.triples:
            return None

        node = response.data.triples[0]
        return IndexedTriple(
            term_id=node.term_id,
            counter_term_id=node.counter_term.id if node.counter_term else None,
            subject_label=(node.subject.label or "") if node.subject else "",
            predicate_label=(node.predicate.label or "") if node.predicate else "",
            object_label=(node.object.label or "") if node.object else "",
        )

    async def find_objects_by_labels(self, labels: Sequence[str]) -> list[IndexedObject]:
        if not labels:
            return []
        payload = await self._execute(ATOMS_BY_LABELS_QUERY, {"labels": list(labels)})
        response = AtomsResponse.model_validate(payload)
        _raise_for_errors(response.errors)
        if response.data is None:
            return []
        return [
            IndexedObject(term_id=node.term_id, label=node.label) for node in response.data.atoms
        ]

    async def _execute(self, query: str, variables: dict[str, object]) -> dict[str, object]:
        payload = await self._http().post_json(
            self._config.endpoint,
            {"query": query, "variables": variables},
        )
        if not isinstance(payload, dict):
            raise IndexerAPIError("Unexpected indexer response payload")
        return payload


def _raise_for_errors(errors: list[GraphQLError] | None) -> None:
    if not errors:
        return
    message = "; ".join(error.message for error in errors)
    log.warning("Indexer returned GraphQL errors: %s", message)
    raise IndexerAPIError(message)
