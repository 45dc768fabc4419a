"""Fixed-precision price conversion shared by every conversion entry point.

Rates are "units of vendor currency per 1 unit of base currency", so a
vendor-currency amount becomes a base-currency amount by division. Results
are rounded half-up and rendered as fixed-point strings, never floats.
"""

from decimal import (
    MAX_EMAX,
    MIN_EMIN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    InvalidOperation,
    getcontext,
    localcontext,
)

DEFAULT_DECIMALS = 2

_ONE = Decimal("1")
_GUARD_DIGITS = 10


def _quantum(decimals: int) -> Decimal:
    return Decimal(1).scaleb(-decimals)


def _working_context(integer_digits: int, decimals: int) -> Context:
    """Context wide enough to hold every integer digit plus the minor units."""
    context = getcontext().copy()
    context.prec = max(context.prec, integer_digits + decimals + _GUARD_DIGITS)
    context.Emax = MAX_EMAX
    context.Emin = MIN_EMIN
    return context


def format_price(amount: Decimal) -> str:
    """Render a Decimal as a plain fixed-point string (no exponent)."""
    text = format(amount, "f")
    if text.startswith("-") and Decimal(text) == 0:
        return text[1:]
    return text


def round_price(amount: Decimal, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    with localcontext(_working_context(amount.adjusted() + 1, decimals)):
        return amount.quantize(_quantum(decimals), rounding=ROUND_HALF_UP)


def parse_price(value: object) -> Decimal | None:
    """Parse a stored or submitted price.

    Returns None for absent, empty, non-numeric, non-finite or negative
    input; callers skip such fields instead of failing.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def convert_to_base(
    amount: Decimal, rate: Decimal, decimals: int = DEFAULT_DECIMALS
) -> str:
    """Convert a vendor-currency amount into the base currency.

    Args:
        amount: Non-negative amount in the vendor currency.
        rate: Units of vendor currency per 1 unit of base currency.
        decimals: Minor-unit precision of the base currency.

    Returns:
        The converted amount as a fixed-point string, e.g. ``"85.47"``.
        A rate of exactly 1 passes the amount through unrounded.

    Raises:
        ValueError: If ``rate`` is not positive.
    """
    if rate <= 0:
        raise ValueError(f"Exchange rate must be positive, got {rate}")
    if rate == _ONE:
        return format_price(amount)
    integer_digits = amount.adjusted() - rate.adjusted() + 1
    with localcontext(_working_context(integer_digits, decimals)):
        quotient = amount / rate
    return format_price(round_price(quotient, decimals))


def prices_match(
    candidate: Decimal | str | None,
    baseline: Decimal | str | None,
    decimals: int = DEFAULT_DECIMALS,
) -> bool:
    """Compare two prices at the base currency's fixed precision."""
    left = parse_price(candidate)
    right = parse_price(baseline)
    if left is None or right is None:
        return False
    return round_price(left, decimals) == round_price(right, decimals)
