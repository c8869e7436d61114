from __future__ import annotations

from .client import GraphQLIndexerClient, IndexerAPIError

__all__ = ["GraphQLIndexerClient", "IndexerAPIError"]
