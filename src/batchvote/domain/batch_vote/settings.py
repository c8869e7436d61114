"""Execution defaults for the batch vote engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from batchvote.domain.model import Curve

if TYPE_CHECKING:
    from batchvote.domain.model import TermId

# 1 gwei: covers rounding dust introduced by decimal display of amounts.
DEFAULT_DUST_TOLERANCE = 1_000_000_000
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_POLL_MAX_ATTEMPTS = 15
DEFAULT_OBJECT_POLL_MAX_ATTEMPTS = 10


@dataclass(slots=True, frozen=True)
class CurveIds:
    """Mapping between the ``Curve`` enumeration and ledger curve codes."""

    linear: int = 1
    progressive: int = 2

    def for_curve(self, curve: Curve) -> int:
        return self.linear if curve is Curve.LINEAR else self.progressive


@dataclass(slots=True, frozen=True)
class ExecutionConfig:
    dust_tolerance: int = DEFAULT_DUST_TOLERANCE
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    poll_max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS
    object_poll_max_attempts: int = DEFAULT_OBJECT_POLL_MAX_ATTEMPTS
    curve_ids: CurveIds = field(default_factory=CurveIds)
    # Predicate linking a newly created object to its category; no link when unset.
    category_predicate_id: TermId | None = None
    reject_against_on_new_relationships: bool = False

    def __post_init__(self) -> None:
        if self.dust_tolerance < 0:
            raise ValueError("dust_tolerance must be non-negative")
        if self.poll_max_attempts < 1 or self.object_poll_max_attempts < 1:
            raise ValueError("poll attempts must be at least 1")
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must be non-negative")
