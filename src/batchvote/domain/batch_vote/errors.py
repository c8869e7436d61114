"""Typed failures of the batch vote engine.

Raw ledger and wallet error text is interpreted in exactly one place,
``classify_ledger_error``; everything downstream keys off ``ErrorCode``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from batchvote.domain.model import ExecutionState


class ErrorCode(StrEnum):
    EMPTY_CART = "EMPTY_CART"
    WALLET_NOT_CONNECTED = "WALLET_NOT_CONNECTED"
    CLIENT_NOT_READY = "CLIENT_NOT_READY"
    AMOUNT_BELOW_MINIMUM = "AMOUNT_BELOW_MINIMUM"
    AGAINST_ON_NEW_RELATIONSHIP = "AGAINST_ON_NEW_RELATIONSHIP"
    COUNTER_TRIPLE_NOT_INITIALIZABLE = "COUNTER_TRIPLE_NOT_INITIALIZABLE"
    HAS_COUNTER_STAKE = "HAS_COUNTER_STAKE"
    NOT_INDEXED = "NOT_INDEXED"
    USER_REJECTED = "USER_REJECTED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INSUFFICIENT_GAS = "INSUFFICIENT_GAS"
    TRANSACTION_REVERTED = "TRANSACTION_REVERTED"
    UNKNOWN = "UNKNOWN"


DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.EMPTY_CART: "The cart is empty",
    ErrorCode.WALLET_NOT_CONNECTED: "Connect a wallet before submitting votes",
    ErrorCode.CLIENT_NOT_READY: "Ledger client is not ready",
    ErrorCode.AMOUNT_BELOW_MINIMUM: "Some votes are below the minimum amount",
    ErrorCode.AGAINST_ON_NEW_RELATIONSHIP: (
        "A relationship that does not exist yet can only be created with a FOR vote"
    ),
    ErrorCode.COUNTER_TRIPLE_NOT_INITIALIZABLE: (
        "The opposing vault cannot be initialised directly"
    ),
    ErrorCode.HAS_COUNTER_STAKE: "An existing opposing position blocks this vote",
    ErrorCode.NOT_INDEXED: "The indexer has not caught up with the ledger yet",
    ErrorCode.USER_REJECTED: "Transaction rejected in the wallet",
    ErrorCode.INSUFFICIENT_BALANCE: "Insufficient balance",
    ErrorCode.INSUFFICIENT_GAS: "Insufficient funds for gas",
    ErrorCode.TRANSACTION_REVERTED: "The transaction was reverted by the contract",
    ErrorCode.UNKNOWN: "An unexpected error occurred",
}

# Order matters: the most specific revert names come before generic wording.
_PATTERNS: tuple[tuple[re.Pattern[str], ErrorCode], ...] = (
    (
        re.compile(r"CannotDirectlyInitializeCounterTriple", re.IGNORECASE),
        ErrorCode.COUNTER_TRIPLE_NOT_INITIALIZABLE,
    ),
    (re.compile(r"HasCounterStake", re.IGNORECASE), ErrorCode.HAS_COUNTER_STAKE),
    (re.compile(r"user (rejected|denied|cancell?ed)", re.IGNORECASE), ErrorCode.USER_REJECTED),
    (
        re.compile(r"intrinsic gas too low|out of gas|insufficient funds for gas", re.IGNORECASE),
        ErrorCode.INSUFFICIENT_GAS,
    ),
    (re.compile(r"insufficient (funds|balance)", re.IGNORECASE), ErrorCode.INSUFFICIENT_BALANCE),
    (
        re.compile(r"execution reverted|transaction reverted", re.IGNORECASE),
        ErrorCode.TRANSACTION_REVERTED,
    ),
)


def classify_ledger_error(message: str) -> ErrorCode:
    """Map raw ledger/wallet error text to a stable ``ErrorCode``."""

    for pattern, code in _PATTERNS:
        if pattern.search(message):
            return code
    return ErrorCode.UNKNOWN


@dataclass(slots=True, frozen=True)
class BatchVoteFailure:
    """Structured terminal failure exposed to callers."""

    code: ErrorCode
    message: str
    phase: ExecutionState | None
    item_id: str | None = None


class BatchVoteError(RuntimeError):
    """Base class for every failure raised by the engine."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        *,
        phase: ExecutionState | None = None,
        item_id: str | None = None,
    ) -> None:
        self.code = code
        self.message = message or DEFAULT_MESSAGES[code]
        self.phase = phase
        self.item_id = item_id
        super().__init__(self.message)

    def as_failure(self) -> BatchVoteFailure:
        return BatchVoteFailure(
            code=self.code,
            message=self.message,
            phase=self.phase,
            item_id=self.item_id,
        )


@dataclass(slots=True, frozen=True)
class AmountShortfall:
    item_id: str
    label: str
    required: int
    provided: int

    @property
    def missing(self) -> int:
        return self.required - self.provided


class CartValidationError(BatchVoteError):
    """Pre-flight validation failure; ``shortfalls`` lists under-funded items."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        *,
        shortfalls: Sequence[AmountShortfall] = (),
        phase: ExecutionState | None = None,
        item_id: str | None = None,
    ) -> None:
        super().__init__(code, message, phase=phase, item_id=item_id)
        self.shortfalls = tuple(shortfalls)

    @classmethod
    def from_shortfalls(cls, shortfalls: Sequence[AmountShortfall]) -> CartValidationError:
        details = "; ".join(
            f'"{shortfall.label}" is missing {shortfall.missing}' for shortfall in shortfalls
        )
        return cls(
            ErrorCode.AMOUNT_BELOW_MINIMUM,
            f"Amount below minimum: {details}",
            shortfalls=shortfalls,
            item_id=shortfalls[0].item_id if len(shortfalls) == 1 else None,
        )


class LedgerCallError(BatchVoteError):
    """A ledger read or write call failed; ``raw_message`` keeps the original text."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        *,
        raw_message: str = "",
        phase: ExecutionState | None = None,
    ) -> None:
        super().__init__(code, message, phase=phase)
        self.raw_message = raw_message

    @classmethod
    def from_message(
        cls,
        raw_message: str,
        *,
        phase: ExecutionState | None = None,
    ) -> LedgerCallError:
        code = classify_ledger_error(raw_message)
        message = raw_message if code is ErrorCode.UNKNOWN and raw_message else None
        return cls(code, message, raw_message=raw_message, phase=phase)


class NotIndexedError(BatchVoteError):
    """The indexer did not expose the awaited record within the attempt budget."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(ErrorCode.NOT_INDEXED, message)
        self.attempts = attempts
