"""Value objects exchanged with the ledger and the indexer."""

from __future__ import annotations

from dataclasses import dataclass

from .cart import TermId


@dataclass(slots=True, frozen=True)
class ContractConfig:
    """Protocol-wide constants, re-read at the start of every submission."""

    triple_cost: int
    min_deposit: int

    @property
    def min_required_amount(self) -> int:
        """Minimum for creating a relationship and depositing on it at once."""

        return self.triple_cost + self.min_deposit


@dataclass(slots=True, frozen=True)
class CreatedTripleInfo:
    term_id: TermId
    counter_term_id: TermId


@dataclass(slots=True, frozen=True)
class IndexedTriple:
    term_id: TermId
    counter_term_id: TermId | None
    subject_label: str = ""
    predicate_label: str = ""
    object_label: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.counter_term_id)

    def created_info(self) -> CreatedTripleInfo:
        if not self.counter_term_id:
            raise ValueError(f"Triple {self.term_id} has no counter id yet")
        return CreatedTripleInfo(term_id=self.term_id, counter_term_id=self.counter_term_id)


@dataclass(slots=True, frozen=True)
class IndexedObject:
    term_id: TermId
    label: str


@dataclass(slots=True, frozen=True)
class TransactionReceipt:
    tx_hash: str
    block_number: int | None = None


@dataclass(slots=True, frozen=True)
class ObjectReceipt:
    """Outcome of a get-or-create object call.

    ``object_id`` is ``None`` when the ledger acknowledged the object but the
    receipt did not carry its id; ``tx_hash`` is ``None`` when nothing was sent.
    """

    label: str
    object_id: TermId | None
    created: bool
    tx_hash: str | None = None


@dataclass(slots=True, frozen=True)
class CreateTriplesRequest:
    subject_ids: tuple[TermId, ...]
    predicate_ids: tuple[TermId, ...]
    object_ids: tuple[TermId, ...]
    assets: tuple[int, ...]

    def __post_init__(self) -> None:
        lengths = {
            len(self.subject_ids),
            len(self.predicate_ids),
            len(self.object_ids),
            len(self.assets),
        }
        if len(lengths) != 1:
            raise ValueError("CreateTriplesRequest lists must have equal length")

    @property
    def value(self) -> int:
        return sum(self.assets)


@dataclass(slots=True, frozen=True)
class DepositBatchRequest:
    receiver: str
    term_ids: tuple[TermId, ...]
    curve_ids: tuple[int, ...]
    amounts: tuple[int, ...]
    min_shares: tuple[int, ...]

    def __post_init__(self) -> None:
        lengths = {len(self.term_ids), len(self.curve_ids), len(self.amounts), len(self.min_shares)}
        if len(lengths) != 1:
            raise ValueError("DepositBatchRequest lists must have equal length")

    @property
    def value(self) -> int:
        return sum(self.amounts)


@dataclass(slots=True, frozen=True)
class RedeemBatchRequest:
    receiver: str
    term_ids: tuple[TermId, ...]
    curve_ids: tuple[int, ...]
    shares: tuple[int, ...]
    min_assets: tuple[int, ...]

    def __post_init__(self) -> None:
        lengths = {len(self.term_ids), len(self.curve_ids), len(self.shares), len(self.min_assets)}
        if len(lengths) != 1:
            raise ValueError("RedeemBatchRequest lists must have equal length")

    @property
    def value(self) -> int:
        return 0
