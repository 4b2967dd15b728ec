"""Pre-commit validation of a transaction draft."""

from decimal import Decimal
from uuid import UUID

from .config import Settings
from .exceptions import (
    AmountsDoNotMatchTotalError,
    AmountTooLargeError,
    EmptyTitleError,
    InvalidSharesError,
    NonPositiveAmountError,
    PayerAmountsMismatchError,
    PercentagesNotFullError,
)
from .models import RawInputs, SplitDraft, SplitMethod
from .money import AMOUNT_EPSILON, MAX_AMOUNT, MIN_TOTAL, parse_decimal

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def validate_title(title: str) -> str:
    """Return the trimmed title, or raise EmptyTitleError."""
    cleaned = title.strip()
    if not cleaned:
        raise EmptyTitleError()
    return cleaned


def validate_total(total: Decimal, max_amount: Decimal = MAX_AMOUNT) -> None:
    """Total must be greater than 0.001 and not above the maximum."""
    if total <= MIN_TOTAL:
        raise NonPositiveAmountError()
    if total > max_amount:
        raise AmountTooLargeError()


def validate_payers(
    total: Decimal,
    payer_inputs: dict[UUID, str],
    tolerance: Decimal = AMOUNT_EPSILON,
) -> None:
    """With several payers, their contributions must add up to the total."""
    if len(payer_inputs) <= 1:
        return  # a single payer is auto-filled to the total

    paid = sum((parse_decimal(raw, _ZERO) for raw in payer_inputs.values()), _ZERO)
    if abs(paid - total) > tolerance:
        raise PayerAmountsMismatchError(paid, total)


def validate_split_inputs(
    total: Decimal,
    participants: list[UUID],
    raw_inputs: RawInputs,
    method: SplitMethod,
    percentage_tolerance: Decimal = Decimal("0.1"),
    amount_tolerance: Decimal = AMOUNT_EPSILON,
) -> None:
    """
    Method-specific input checks.

    - Percentage: sum within `percentage_tolerance` of 100
    - Amount: sum within `amount_tolerance` of the total
    - Shares: every weight a whole number of at least 1
    - Equal and adjustment need no sum check; reconciliation absorbs drift

    Raises:
        PercentagesNotFullError, AmountsDoNotMatchTotalError, InvalidSharesError
    """
    if method == SplitMethod.PERCENTAGE:
        total_percent = sum(
            (parse_decimal(raw_inputs.get(pid), _ZERO) for pid in participants), _ZERO
        )
        if abs(total_percent - _HUNDRED) > percentage_tolerance:
            raise PercentagesNotFullError(total_percent)

    elif method == SplitMethod.AMOUNT:
        entered = sum(
            (parse_decimal(raw_inputs.get(pid), _ZERO) for pid in participants), _ZERO
        )
        if abs(entered - total) > amount_tolerance:
            raise AmountsDoNotMatchTotalError(entered, total)

    elif method == SplitMethod.SHARES:
        for pid in participants:
            raw = raw_inputs.get(pid)
            if raw is None or not raw.strip():
                continue  # blank counts as one share
            weight = parse_decimal(raw, _ZERO)
            if weight < 1 or weight != weight.to_integral_value():
                raise InvalidSharesError(
                    f"Shares must be whole numbers of at least 1 (got '{raw}')"
                )


def validate_draft(draft: SplitDraft, settings: Settings | None = None) -> str:
    """
    Run every pre-commit check in order, stopping at the first failure.

    Order: title, amount, payer amounts, split inputs.

    Args:
        draft: The draft being committed
        settings: Tolerances and limits (defaults when omitted)

    Returns:
        The trimmed title
    """
    settings = settings or Settings()
    title = validate_title(draft.title)
    total = draft.total
    validate_total(total, settings.max_amount)
    validate_payers(total, draft.payer_inputs, settings.amount_tolerance)
    validate_split_inputs(
        total,
        draft.participants,
        draft.raw_inputs,
        draft.split_method,
        percentage_tolerance=settings.percentage_tolerance,
        amount_tolerance=settings.amount_tolerance,
    )
    return title
