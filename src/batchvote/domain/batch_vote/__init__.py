"""Batch vote execution engine."""

from __future__ import annotations

from .amounts import adjust_amount, validate_amounts
from .classification import CartClassification, classify_cart, group_triples
from .context import BatchVoteResult, ExecutionPlan, SkippedItem, SubmissionContext
from .deposits import DepositPhase
from .errors import (
    AmountShortfall,
    BatchVoteError,
    BatchVoteFailure,
    CartValidationError,
    ErrorCode,
    LedgerCallError,
    NotIndexedError,
    classify_ledger_error,
)
from .events import (
    EventStream,
    ItemSkipped,
    PhaseCompleted,
    PhaseStarted,
    SubmissionFailed,
    TransactionConfirmed,
)
from .objects import ObjectCreationPhase
from .orchestrator import BatchVoteOrchestrator
from .polling import IndexingPoller
from .redeems import RedeemExecutor, RedeemOutcome, RedeemPhase
from .relationships import DepositMode, RelationshipCreationPhase
from .settings import CurveIds, ExecutionConfig

__all__ = [
    "AmountShortfall",
    "BatchVoteError",
    "BatchVoteFailure",
    "BatchVoteOrchestrator",
    "BatchVoteResult",
    "CartClassification",
    "CartValidationError",
    "CurveIds",
    "DepositMode",
    "DepositPhase",
    "ErrorCode",
    "EventStream",
    "ExecutionConfig",
    "ExecutionPlan",
    "IndexingPoller",
    "ItemSkipped",
    "LedgerCallError",
    "NotIndexedError",
    "ObjectCreationPhase",
    "PhaseCompleted",
    "PhaseStarted",
    "RedeemExecutor",
    "RedeemOutcome",
    "RedeemPhase",
    "RelationshipCreationPhase",
    "SkippedItem",
    "SubmissionContext",
    "SubmissionFailed",
    "TransactionConfirmed",
    "adjust_amount",
    "classify_cart",
    "classify_ledger_error",
    "group_triples",
    "validate_amounts",
]
