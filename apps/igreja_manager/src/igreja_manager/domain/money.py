"""Money helpers using Decimal with BRL precision rules."""

from decimal import ROUND_HALF_UP, Decimal

MONEY_PRECISION = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Return value rounded to two decimal places with HALF_UP strategy."""

    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def to_money(value: object) -> Decimal:
    """Normalize a database aggregate (Decimal, float, int or None) into money."""

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return quantize_money(value)
    return quantize_money(Decimal(str(value)))


def format_money(value: Decimal) -> str:
    """Render money as string with exactly two decimal places."""

    return f"{quantize_money(value):.2f}"
