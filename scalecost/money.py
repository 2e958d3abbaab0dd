"""Currency rounding shared by every cost component."""
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext

_CENT = Decimal("0.01")
# Enough digits to quantize any finite float (max ~1.8e308) to cents
_PRECISION = 400


def _quantize(value: float, exp: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(repr(float(value))).quantize(exp, rounding=ROUND_HALF_UP)


def round_cents(value: float) -> float:
    """
    Round to cents, half-up on the cent boundary.
    Works on the shortest decimal repr of the float so 1.005 -> 1.01, not 1.00.
    Non-finite values (an overflowed product) are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    return float(_quantize(value, _CENT))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(_quantize(value, Decimal(1)))
