"""Split method policies: turn raw per-participant inputs into owed amounts."""

import logging
from collections.abc import Callable, Iterable
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from .models import RawInputs, Split, SplitMethod
from .money import parse_decimal, round2
from .reconciler import ResidualPolicy, reconcile

logger = logging.getLogger(__name__)

ShareMap = dict[UUID, Decimal]

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")


def stable_order(participants: Iterable[UUID]) -> list[UUID]:
    """Deterministic participant order used for penny placement."""
    return sorted(set(participants), key=str)


def parse_share_weight(raw: str | None) -> int:
    """
    Parse a share count.

    Empty or non-numeric input counts as 1 share; fractions are truncated and
    negative weights count as 0.
    """
    value = parse_decimal(raw, _ONE)
    return max(int(value), 0)


# ============================================================================
# Per-method policies
# ============================================================================


def equal_shares(total: Decimal, participants: list[UUID], raw_inputs: RawInputs) -> ShareMap:
    """Everyone owes round2(total / N)."""
    divisor = max(1, len(participants))
    share = round2(total / divisor)
    return {pid: share for pid in participants}


def percentage_shares(
    total: Decimal, participants: list[UUID], raw_inputs: RawInputs
) -> ShareMap:
    """Each participant owes total * p_i / 100."""
    return {
        pid: round2(total * parse_decimal(raw_inputs.get(pid), _ZERO) / _HUNDRED)
        for pid in participants
    }


def amount_shares(total: Decimal, participants: list[UUID], raw_inputs: RawInputs) -> ShareMap:
    """Each participant owes the literal amount they were assigned."""
    return {pid: round2(parse_decimal(raw_inputs.get(pid), _ZERO)) for pid in participants}


def adjustment_shares(
    total: Decimal, participants: list[UUID], raw_inputs: RawInputs
) -> ShareMap:
    """Each participant owes an equal base share plus their signed delta."""
    base = total / max(1, len(participants))
    return {
        pid: round2(base + parse_decimal(raw_inputs.get(pid), _ZERO))
        for pid in participants
    }


def shares_shares(total: Decimal, participants: list[UUID], raw_inputs: RawInputs) -> ShareMap:
    """Each participant owes total * s_i / sum(s)."""
    weights = {pid: parse_share_weight(raw_inputs.get(pid)) for pid in participants}
    total_weight = sum(weights.values())
    if total_weight == 0:
        return {pid: _ZERO for pid in participants}
    return {pid: round2(total * weight / total_weight) for pid, weight in weights.items()}


_POLICIES: dict[SplitMethod, Callable[[Decimal, list[UUID], RawInputs], ShareMap]] = {
    SplitMethod.EQUAL: equal_shares,
    SplitMethod.PERCENTAGE: percentage_shares,
    SplitMethod.AMOUNT: amount_shares,
    SplitMethod.ADJUSTMENT: adjustment_shares,
    SplitMethod.SHARES: shares_shares,
}


def compute_splits(
    total: Decimal,
    participants: Iterable[UUID],
    raw_inputs: RawInputs,
    method: SplitMethod,
    policy: ResidualPolicy = ResidualPolicy.FIRST,
) -> ShareMap:
    """
    Compute reconciled owed amounts for every participant.

    This is a pure function: it does not validate the inputs (see
    validation.validate_split_inputs) so it can be used for live previews.

    Args:
        total: Transaction total
        participants: Person ids taking part in the split
        raw_inputs: Raw Input Map for the active method
        method: Split method
        policy: Where rounding residual cents are placed

    Returns:
        Owed amount per participant in stable order; sums exactly to `total`
        (an empty map only for an empty participant set with a zero total)

    Raises:
        NoParticipantsError: If there are no participants and the total is not zero
        NegativeShareError: If an input would make someone owe a negative amount
    """
    ordered = stable_order(participants)
    if not ordered:
        logger.debug("No participants selected")

    raw_shares = _POLICIES[method](total, ordered, raw_inputs)
    return reconcile(total, raw_shares, policy=policy)


# ============================================================================
# Raw input seeding
# ============================================================================


def seed_raw_inputs(
    method: SplitMethod, participants: Iterable[UUID], total: Decimal
) -> RawInputs:
    """
    Default raw inputs used when a method is selected or participants change.

    Percentage seeds 100/N to one decimal, amount seeds total/N, adjustment
    seeds 0 and shares seeds 1. Equal split needs no inputs.
    """
    ordered = stable_order(participants)
    count = max(1, len(ordered))

    if method == SplitMethod.EQUAL:
        return {}
    if method == SplitMethod.PERCENTAGE:
        percent = (_HUNDRED / count).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return {pid: str(percent) for pid in ordered}
    if method == SplitMethod.AMOUNT:
        return {pid: str(round2(total / count)) for pid in ordered}
    if method == SplitMethod.ADJUSTMENT:
        return {pid: "0" for pid in ordered}
    return {pid: "1" for pid in ordered}


def format_raw_value(value: Decimal, method: SplitMethod) -> str:
    """Render a stored raw value back into an input string."""
    if method == SplitMethod.SHARES:
        return str(int(value))
    if method == SplitMethod.PERCENTAGE:
        if value == value.to_integral_value():
            return str(int(value))
        return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    if value == 0:
        return "0"
    return str(round2(value))


def raw_inputs_from_splits(
    method: SplitMethod, splits: Iterable[Split], total: Decimal
) -> RawInputs:
    """
    Rebuild the Raw Input Map from persisted splits so a transaction can be edited.

    Percentages fall back to amount / total when no raw value was kept, and
    shares fall back to a single share.
    """
    raw_inputs: RawInputs = {}
    for split in splits:
        pid = split.owed_by_id
        if method == SplitMethod.EQUAL:
            continue
        if method == SplitMethod.PERCENTAGE:
            if split.raw_amount is not None and split.raw_amount > 0:
                raw_inputs[pid] = format_raw_value(split.raw_amount, method)
            elif total > 0:
                raw_inputs[pid] = format_raw_value(split.amount / total * _HUNDRED, method)
        elif method == SplitMethod.SHARES:
            if split.raw_amount is not None and split.raw_amount > 0:
                raw_inputs[pid] = format_raw_value(split.raw_amount, method)
            else:
                raw_inputs[pid] = "1"
        elif method == SplitMethod.ADJUSTMENT:
            raw_inputs[pid] = format_raw_value(split.raw_amount or _ZERO, method)
        else:
            raw_inputs[pid] = str(round2(split.amount))
    return raw_inputs


def raw_amount_for(raw: str | None) -> Decimal | None:
    """Raw value to persist alongside a split, or None if it is not numeric."""
    if raw is None:
        return None
    value = parse_decimal(raw, _ZERO)
    if value == 0 and parse_decimal(raw, _ONE) == 1:
        # input did not parse
        return None
    return value
