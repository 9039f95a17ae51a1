"""Fixed-point integer arithmetic with explicit floor rounding.

All share and exchange-rate math runs on unsigned integers scaled by SCALE.
Values are bounded to the unsigned 256-bit range; any intermediate product
that would not fit raises ArithmeticOverflowError instead of wrapping.
"""

from decimal import ROUND_FLOOR, Decimal, localcontext

from ..exceptions import ArithmeticOverflowError

SCALE = 10 ** 18
MAX_UINT256 = 2 ** 256 - 1
SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def _check_range(value: int, operation: str) -> int:
    if value < 0 or value > MAX_UINT256:
        raise ArithmeticOverflowError(operation, value)
    return value


def checked_mul(*factors: int) -> int:
    """Multiply unsigned factors, checking every partial product."""
    result = 1
    for factor in factors:
        _check_range(factor, "mul")
        result = _check_range(result * factor, "mul")
    return result


def checked_add(a: int, b: int) -> int:
    """Add two unsigned values."""
    _check_range(a, "add")
    _check_range(b, "add")
    return _check_range(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    """Subtract b from a; underflow is an error."""
    _check_range(a, "sub")
    _check_range(b, "sub")
    return _check_range(a - b, "sub")


def mul_div_down(a: int, b: int, denominator: int) -> int:
    """
    Compute floor(a * b / denominator).

    The product is range-checked before dividing.

    Raises:
        ArithmeticOverflowError: If a * b exceeds MAX_UINT256
        ZeroDivisionError: If denominator is zero
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div_down denominator is zero")
    return checked_mul(a, b) // _check_range(denominator, "div")


def mul_scale_down(a: int, b: int) -> int:
    """floor(a * b / SCALE)."""
    return mul_div_down(a, b, SCALE)


def div_scale_down(a: int, b: int) -> int:
    """floor(a * SCALE / b)."""
    return mul_div_down(a, SCALE, b)


def rate_per_second_from_annual(annual_rate: float) -> int:
    """
    Convert a simple annual rate (0.05 = 5%) to a per-second coefficient.

    The result is floored, so the configured rate is never exceeded.

    Args:
        annual_rate: Non-negative annual growth rate

    Returns:
        Per-second growth coefficient scaled by SCALE
    """
    if annual_rate < 0:
        raise ValueError(f"annual_rate must be non-negative, got {annual_rate}")
    with localcontext() as ctx:
        ctx.prec = 60
        per_second = Decimal(str(annual_rate)) * SCALE / SECONDS_PER_YEAR
        return int(per_second.to_integral_value(rounding=ROUND_FLOOR))


def to_decimal(value: int) -> Decimal:
    """Render a scaled value as a Decimal for display (1.5 * SCALE -> 1.5)."""
    with localcontext() as ctx:
        ctx.prec = 80
        return Decimal(value) / SCALE
