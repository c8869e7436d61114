from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from batchvote.adapters.cart_storage import CartFileStore
from batchvote.config.storage import StorageConfig
from tests.helpers.batch_vote import FakeIndexer, FakeLedger

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def indexer() -> FakeIndexer:
    return FakeIndexer()


@pytest.fixture
def ledger(indexer: FakeIndexer) -> FakeLedger:
    """Ledger holding an existing relationship on ``0xobject``."""

    ledger = FakeLedger(indexer)
    ledger.add_relationship("0xobject")
    return ledger


@pytest.fixture
def cart_store(tmp_path: Path) -> CartFileStore:
    return CartFileStore(StorageConfig(data_dir=tmp_path))
