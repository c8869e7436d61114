"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Direction(StrEnum):
    FOR = "for"
    AGAINST = "against"

    @property
    def opposite(self) -> Direction:
        return Direction.AGAINST if self is Direction.FOR else Direction.FOR


class Curve(StrEnum):
    """Bonding curve governing a vault's share price."""

    LINEAR = "linear"
    PROGRESSIVE = "progressive"


class CurveMix(StrEnum):
    LINEAR_ONLY = "linear_only"
    PROGRESSIVE_ONLY = "progressive_only"
    MIXED = "mixed"


class ExecutionState(StrEnum):
    """Lifecycle of a single submission; the middle four are also phase names."""

    IDLE = "idle"
    VALIDATING = "validating"
    CREATING_OBJECTS = "creating_objects"
    CREATING_RELATIONSHIPS = "creating_relationships"
    REDEEMING = "redeeming"
    DEPOSITING = "depositing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def in_flight(self) -> bool:
        return self not in {ExecutionState.IDLE, ExecutionState.SUCCESS, ExecutionState.ERROR}
