"""Minor-unit money helpers shared by every split method."""

import re
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError

CENT = Decimal("0.01")
AMOUNT_EPSILON = Decimal("0.01")
MIN_TOTAL = Decimal("0.001")
MAX_AMOUNT = Decimal("999999999.99")
# Largest magnitude accepted while typing; keeps products with any total within
# the default Decimal context precision
PARSE_LIMIT = Decimal("1e15")

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥₹]")
_CURRENCY_PREFIXES = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "INR": "₹"}


def round2(amount: Decimal) -> Decimal:
    """
    Round an amount to the minor currency unit.

    Uses ROUND_HALF_UP for consistency with cent conversion.

    Args:
        amount: Amount as Decimal

    Returns:
        Amount quantized to 2 decimal places
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    """Convert a Decimal amount to integer cents (ROUND_HALF_UP)."""
    cents = amount * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a 2dp Decimal amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def _normalize(raw: str) -> str:
    cleaned = _CURRENCY_SYMBOLS.sub("", raw.strip())
    return cleaned.replace(",", "").strip()


def parse_decimal(
    raw: str | None, default: Decimal, limit: Decimal | None = PARSE_LIMIT
) -> Decimal:
    """
    Leniently parse a raw input string while the user is still typing.

    Empty, non-numeric, non-finite and out-of-range input yields `default`
    instead of raising, so previews stay responsive. Commit-time validation
    is what rejects bad totals.

    Args:
        raw: User-entered string (may be None)
        default: Value to use when the string cannot be parsed
        limit: Largest accepted magnitude, or None for no bound

    Returns:
        Parsed Decimal, or `default`
    """
    if raw is None:
        return default

    cleaned = _normalize(raw)
    if not cleaned:
        return default

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return default

    if not value.is_finite() or (limit is not None and abs(value) > limit):
        return default
    return value


def parse_amount(raw: str) -> Decimal:
    """
    Strictly parse a money amount such as "12.50", "$1,234.56" or "(3.00)".

    Raises:
        InvalidAmountError: If the string is empty or not a number
    """
    if not raw or not raw.strip():
        raise InvalidAmountError("Empty amount string")

    text = raw.strip()
    is_negative = text.startswith("(") and text.endswith(")")
    if is_negative:
        text = text[1:-1]

    cleaned = _normalize(text)
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise InvalidAmountError(f"Could not parse amount '{raw}'") from e

    if not value.is_finite():
        raise InvalidAmountError(f"Could not parse amount '{raw}'")

    return -value if is_negative else value


def sanitize_amount_input(raw: str, max_amount: Decimal = MAX_AMOUNT) -> str:
    """
    Strip everything but digits and a single decimal point.

    At most two decimals are kept and the value is capped at `max_amount`.
    """
    result = []
    has_point = False
    decimals = 0

    for char in raw:
        if char.isdigit():
            if has_point:
                if decimals < 2:
                    result.append(char)
                    decimals += 1
            else:
                result.append(char)
        elif char == "." and not has_point:
            has_point = True
            result.append(char)

    text = "".join(result)
    try:
        value = Decimal(text)
    except InvalidOperation:
        value = Decimal("0")
    if value > max_amount:
        return str(max_amount.quantize(CENT, rounding=ROUND_DOWN))
    return text


def format_money(amount: Decimal, currency: str = "USD") -> str:
    """
    Format money in accounting style for display.

    Negative amounts use parentheses: ($85.02)
    """
    symbol = _CURRENCY_PREFIXES.get(currency.upper(), f"{currency.upper()} ")
    abs_amount = abs(round2(amount))
    if amount < 0:
        return f"({symbol}{abs_amount:,.2f})"
    return f"{symbol}{abs_amount:,.2f}"
