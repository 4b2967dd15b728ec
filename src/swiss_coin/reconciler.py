"""Remainder reconciliation: make per-participant shares sum exactly to the total."""

import logging
from decimal import Decimal
from enum import Enum
from typing import TypeVar

from .exceptions import NegativeShareError, NoParticipantsError
from .money import from_cents, round2, to_cents

logger = logging.getLogger(__name__)

K = TypeVar("K")


class ResidualPolicy(str, Enum):
    """Where rounding residual cents are placed."""

    FIRST = "first"  # the first participant absorbs the whole residual
    ROUND_ROBIN = "round_robin"  # one cent at a time, in participant order


def residual_cents(total: Decimal, shares: dict[K, Decimal]) -> int:
    """Return total - sum(shares) in integer cents."""
    return to_cents(total) - sum(to_cents(amount) for amount in shares.values())


def reconcile(
    total: Decimal,
    shares: dict[K, Decimal],
    policy: ResidualPolicy = ResidualPolicy.FIRST,
) -> dict[K, Decimal]:
    """
    Distribute rounding residual so the shares sum exactly to `total`.

    Steps:
    1. Convert each share to integer cents
    2. Compute residual = total - sum(shares)
    3. Place the residual according to `policy`, walking participants in the
       order of `shares` (callers pass a stable order)
    4. Verify the invariant

    Args:
        total: Expected total
        shares: Rounded share per participant, in stable order
        policy: Residual placement policy

    Returns:
        New mapping with the residual applied

    Raises:
        NoParticipantsError: If there is nobody to place a non-zero total on
        NegativeShareError: If a share ends up below zero
    """
    if not shares:
        if to_cents(total) != 0:
            raise NoParticipantsError()
        return {}

    cents = {key: to_cents(amount) for key, amount in shares.items()}
    residual = to_cents(total) - sum(cents.values())

    if residual != 0:
        keys = list(cents)
        if policy == ResidualPolicy.ROUND_ROBIN:
            step = 1 if residual > 0 else -1
            for i in range(abs(residual)):
                cents[keys[i % len(keys)]] += step
        else:
            cents[keys[0]] += residual

        logger.info(
            f"Applied rounding adjustment: {residual} cent(s) "
            f"({policy.value}) starting at participant {keys[0]}"
        )

    negative = [key for key, value in cents.items() if value < 0]
    if negative:
        raise NegativeShareError(
            f"Split would leave participant {negative[0]} owing a negative amount"
        )

    result = {key: from_cents(value) for key, value in cents.items()}

    final_total = sum(cents.values())
    assert final_total == to_cents(total), "Adjustment failed"

    return result


def rescale(
    shares: dict[K, Decimal],
    old_total: Decimal,
    new_total: Decimal,
    policy: ResidualPolicy = ResidualPolicy.FIRST,
) -> dict[K, Decimal]:
    """
    Proportionally rescale persisted shares to a new total.

    Each share becomes round2(share * new_total / old_total), then the
    result is reconciled against `new_total`. The original split method is
    not re-run.
    """
    if old_total == 0:
        raise ValueError("Cannot rescale from a zero total")

    factor = new_total / old_total
    scaled = {key: round2(amount * factor) for key, amount in shares.items()}
    logger.debug(f"Rescaled {len(scaled)} share(s) by {factor}")
    return reconcile(new_total, scaled, policy=policy)
