"""Discrete compounding on basis-point fixed-point integers.

Key Concepts:
- Growth factor per period: base = BPS_SCALE + rate_bps (10_100 = +1%)
- growth_factor(): (1 + rate)^n by squaring, truncated to bps (a lower bound)
- compound(): one floor(x * base / BPS_SCALE) step per period on the amount
- Iteration is bounded by MAX_COMPOUND_PERIODS
"""

from typing import Sequence

from ..errors import InvalidArgument
from .fixed_point import BPS_SCALE, checked_add, checked_sub, mul_div, require_uint

MAX_COMPOUND_PERIODS = 10_000

# Rule of 72 expressed in bps: 72% -> 7_200
RULE_OF_72_BPS = 7_200


def _check_periods(periods: int) -> int:
    require_uint(periods, "periods")
    if periods > MAX_COMPOUND_PERIODS:
        raise InvalidArgument(
            f"periods={periods} exceeds maximum of {MAX_COMPOUND_PERIODS}"
        )
    return periods


def growth_factor(rate_per_period_bps: int, periods: int) -> int:
    """
    Compute (1 + rate)^periods in bps fixed point by squaring.

    Each multiply is truncated back to bps precision, so the factor is a
    lower bound on the exact value.
    """
    require_uint(rate_per_period_bps, "rate_per_period_bps")
    _check_periods(periods)

    factor = BPS_SCALE
    base = BPS_SCALE + rate_per_period_bps
    exp = periods
    while exp > 0:
        if exp & 1:
            factor = mul_div(factor, base, BPS_SCALE)
        exp >>= 1
        if exp:
            base = mul_div(base, base, BPS_SCALE)
    return factor


def compound(principal: int, rate_per_period_bps: int, periods: int) -> int:
    """
    Compound a principal over integer periods.

    Each period applies floor(x * (BPS_SCALE + rate) / BPS_SCALE) to the
    running amount, so truncation happens on the amount at every step.

    Args:
        principal: Amount compounding is applied to
        rate_per_period_bps: Per-period rate in basis points
        periods: Number of periods (<= MAX_COMPOUND_PERIODS)

    Returns:
        Compounded amount

    Raises:
        InvalidArgument: If periods exceeds the cap
        ArithmeticOverflow: If an intermediate leaves the supported width
    """
    require_uint(principal, "principal")
    require_uint(rate_per_period_bps, "rate_per_period_bps")
    _check_periods(periods)

    if periods == 0 or rate_per_period_bps == 0:
        return principal

    base = BPS_SCALE + rate_per_period_bps
    amount = principal
    for _ in range(periods):
        amount = mul_div(amount, base, BPS_SCALE)
    return amount


def effective_annual_rate(nominal_rate_bps: int, periods_per_year: int) -> int:
    """
    Convert a nominal annual rate (APR) to an effective annual rate (APY).

    Args:
        nominal_rate_bps: Nominal annual rate in bps
        periods_per_year: Compounding periods per year

    Returns:
        Effective annual rate in bps
    """
    require_uint(nominal_rate_bps, "nominal_rate_bps")
    if periods_per_year == 0:
        raise InvalidArgument("periods_per_year must be positive")

    rate_per_period = nominal_rate_bps // periods_per_year
    grown = compound(BPS_SCALE, rate_per_period, periods_per_year)
    return checked_sub(grown, BPS_SCALE)


def variable_rate_compounding(
    principal: int,
    rates_bps: Sequence[int],
    periods: Sequence[int],
) -> int:
    """Compound through consecutive (rate, periods) segments."""
    if len(rates_bps) != len(periods):
        raise InvalidArgument(
            f"rates and periods must have equal length ({len(rates_bps)} vs {len(periods)})"
        )
    total_periods = 0
    amount = require_uint(principal, "principal")
    for rate, n in zip(rates_bps, periods):
        total_periods += n
        if total_periods > MAX_COMPOUND_PERIODS:
            raise InvalidArgument(
                f"total periods {total_periods} exceeds maximum of {MAX_COMPOUND_PERIODS}"
            )
        amount = compound(amount, rate, n)
    return amount


def doubling_periods(rate_per_period_bps: int) -> int:
    """Approximate periods to double at a rate (rule of 72). Zero rate returns 0."""
    require_uint(rate_per_period_bps, "rate_per_period_bps")
    if rate_per_period_bps == 0:
        return 0
    return RULE_OF_72_BPS // rate_per_period_bps


def annuity_future_value(payment: int, rate_per_period_bps: int, periods: int) -> int:
    """
    Future value of a payment deposited at the end of every period.

    The running balance grows one period at a time with the same truncation
    as compound().
    """
    require_uint(payment, "payment")
    require_uint(rate_per_period_bps, "rate_per_period_bps")
    _check_periods(periods)

    base = BPS_SCALE + rate_per_period_bps
    balance = 0
    for _ in range(periods):
        balance = checked_add(mul_div(balance, base, BPS_SCALE), payment)
    return balance
