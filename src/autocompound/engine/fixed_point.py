"""Basis-point fixed-point arithmetic on unsigned integers.

All monetary and rate values are unsigned 64-bit integers. Products are formed
in a widened 128-bit intermediate and narrowed back, truncating toward zero.
"""

from ..errors import ArithmeticOverflow, InvalidArgument

BPS_SCALE = 10_000  # 10_000 bps = 100%

U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


def require_uint(value: int, name: str = "value") -> int:
    """Validate that value is an integer in [0, U64_MAX]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")
    if value > U64_MAX:
        raise ArithmeticOverflow(f"{name}={value} exceeds uint64 range")
    return value


def _narrow(value: int, what: str) -> int:
    if value > U64_MAX:
        raise ArithmeticOverflow(f"{what} result {value} exceeds uint64 range")
    return value


def checked_add(a: int, b: int) -> int:
    return _narrow(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflow(f"subtract underflow: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    return _narrow(a * b, "multiply")


def mul_div(a: int, b: int, d: int) -> int:
    """floor(a * b / d) with a 128-bit intermediate and a uint64 result."""
    if d == 0:
        raise InvalidArgument("division by zero")
    product = a * b
    if product > U128_MAX:
        raise ArithmeticOverflow(f"intermediate {a} * {b} exceeds 128-bit range")
    return _narrow(product // d, "mul_div")


def apply_rate_once(amount: int, rate_bps: int) -> int:
    """
    Apply a basis-point rate to an amount.

    Args:
        amount: Unsigned amount
        rate_bps: Rate scaled by BPS_SCALE

    Returns:
        floor(amount * rate_bps / BPS_SCALE)
    """
    require_uint(amount, "amount")
    require_uint(rate_bps, "rate_bps")
    return mul_div(amount, rate_bps, BPS_SCALE)
