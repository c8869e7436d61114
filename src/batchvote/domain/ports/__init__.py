"""Domain port definitions for adapters."""

from __future__ import annotations

from .indexer import IndexerClient
from .ledger import LedgerClient

__all__ = ["IndexerClient", "LedgerClient"]
