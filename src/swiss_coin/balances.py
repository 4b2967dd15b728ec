"""Net-position balances between two people across transactions."""

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from .models import Payer, Split
from .money import MIN_TOTAL

_ZERO = Decimal("0")


def net_positions(payers: Iterable[Payer], splits: Iterable[Split]) -> dict[UUID, Decimal]:
    """Net position per person for one transaction: paid - owed."""
    positions: dict[UUID, Decimal] = {}
    for payer in payers:
        positions[payer.person_id] = positions.get(payer.person_id, _ZERO) + payer.amount
    for split in splits:
        positions[split.owed_by_id] = positions.get(split.owed_by_id, _ZERO) - split.amount
    return positions


def pairwise_balance(
    payers: Iterable[Payer],
    splits: Iterable[Split],
    person_a: UUID,
    person_b: UUID,
) -> Decimal:
    """
    Balance between two people for one transaction.

    Positive means B owes A, negative means A owes B. A debtor's debt is
    allocated across creditors in proportion to each creditor's share of the
    total credit, which handles multi-payer transactions. The result is not
    rounded; callers summing several transactions round the total once.
    """
    positions = net_positions(payers, splits)
    net_a = positions.get(person_a, _ZERO)
    net_b = positions.get(person_b, _ZERO)

    total_credit = sum((v for v in positions.values() if v > MIN_TOTAL), _ZERO)
    if total_credit <= MIN_TOTAL:
        return _ZERO

    if net_a > MIN_TOTAL and net_b < -MIN_TOTAL:
        return abs(net_b) * net_a / total_credit
    if net_a < -MIN_TOTAL and net_b > MIN_TOTAL:
        return -(abs(net_a) * net_b / total_credit)
    return _ZERO
