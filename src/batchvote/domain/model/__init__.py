"""Public domain model surface."""

from __future__ import annotations

from batchvote.domain.model.cart import (
    Cart,
    CartItem,
    CurrentPosition,
    NewObjectData,
    TermId,
    TripleKey,
    UniqueTriple,
)
from batchvote.domain.model.enums import Curve, CurveMix, Direction, ExecutionState
from batchvote.domain.model.ledger import (
    ContractConfig,
    CreatedTripleInfo,
    CreateTriplesRequest,
    DepositBatchRequest,
    IndexedObject,
    IndexedTriple,
    ObjectReceipt,
    RedeemBatchRequest,
    TransactionReceipt,
)

__all__ = [
    "Cart",
    "CartItem",
    "ContractConfig",
    "CreateTriplesRequest",
    "CreatedTripleInfo",
    "CurrentPosition",
    "Curve",
    "CurveMix",
    "DepositBatchRequest",
    "Direction",
    "ExecutionState",
    "IndexedObject",
    "IndexedTriple",
    "NewObjectData",
    "ObjectReceipt",
    "RedeemBatchRequest",
    "TermId",
    "TransactionReceipt",
    "TripleKey",
    "UniqueTriple",
]
