# invoicing/services/money.py

"""
MONEY & QUANTITY HELPERS

- Everything is Decimal; floats go through str() first
- ROUND_HALF_UP (half away from zero) at 2 dp for money, 3 dp for quantities
- Rounding never raises: bad input becomes 0
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
THREEPLACES = Decimal("0.001")

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(v) -> Decimal:
    if isinstance(v, Decimal):
        return v if v.is_finite() else Decimal("0")
    if v is None or v == "":
        return Decimal("0")
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return d if d.is_finite() else Decimal("0")


def round2(v) -> Decimal:
    return to_decimal(v).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def round3(v) -> Decimal:
    return to_decimal(v).quantize(THREEPLACES, rounding=ROUND_HALF_UP)


def clamp_percent(v) -> Decimal:
    d = to_decimal(v)
    if d < 0:
        return Decimal("0")
    if d > HUNDRED:
        return HUNDRED
    return d
