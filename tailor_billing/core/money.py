"""Bill arithmetic.

Everything here works on ``Decimal`` so long item lists do not pick up
binary floating point error. Nothing rounds; rounding belongs to
``format_money`` and happens only when an amount is shown.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")


def compute_subtotal(items) -> Decimal:
    """Sum of quantity * unit price. Negative inputs are not clamped here."""
    return sum(
        (to_decimal(item.quantity) * to_decimal(item.unit_price) for item in items),
        ZERO,
    )


def compute_total(subtotal, discount) -> Decimal:
    return max(to_decimal(subtotal) - to_decimal(discount), ZERO)


def compute_balance(total, advance) -> Decimal:
    return max(to_decimal(total) - to_decimal(advance), ZERO)


def quantize(amount) -> Decimal:
    return to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount, symbol="₹") -> str:
    return f"{symbol}{quantize(amount):,.2f}"
