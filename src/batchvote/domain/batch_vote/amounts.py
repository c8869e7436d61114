"""Minimum-amount enforcement with dust absorption."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import AmountShortfall, CartValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from batchvote.domain.model import CartItem, ContractConfig

log = getLogger(__name__)


def minimum_amount(item: CartItem, config: ContractConfig) -> int:
    if item.needs_relationship:
        return config.min_required_amount
    return config.min_deposit


def adjust_amount(amount: int, minimum: int, tolerance: int) -> int:
    """Raise ``amount`` to ``minimum`` when it falls short by at most ``tolerance``."""

    if amount < minimum and minimum - amount <= tolerance:
        return minimum
    return amount


def validate_amounts(
    items: Iterable[CartItem],
    config: ContractConfig,
    *,
    tolerance: int,
) -> list[CartItem]:
    """Return a validated copy of ``items`` with dust deficits rounded up.

    Raises ``CartValidationError`` listing every item still below its minimum.
    The input items are never modified; running the function on its own output
    is a no-op.
    """

    validated: list[CartItem] = []
    shortfalls: list[AmountShortfall] = []
    for item in items:
        required = minimum_amount(item, config)
        adjusted = adjust_amount(item.amount, required, tolerance)
        if adjusted != item.amount:
            log.info(
                "Auto-adjusting amount for %s: %s -> %s (missing %s)",
                item.object_label,
                item.amount,
                adjusted,
                adjusted - item.amount,
            )
            item = item.with_amount(adjusted)  # noqa: PLW2901
        if item.amount < required:
            shortfalls.append(
                AmountShortfall(
                    item_id=item.id,
                    label=item.object_label,
                    required=required,
                    provided=item.amount,
                )
            )
        validated.append(item)

    if shortfalls:
        raise CartValidationError.from_shortfalls(shortfalls)
    return validated
