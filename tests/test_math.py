"""Unit tests for fixed-point arithmetic, compounding and efficiency.

Tests verify:
- Basis-point rounding (floor) and overflow policy
- Compounding identities, monotonicity and regression values
- Supplementary compounding helpers (APY, variable rates, annuity, rule of 72)
- Efficiency bounds, net-reward floor and the worked example
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from autocompound.engine.fixed_point import (
    BPS_SCALE,
    U64_MAX,
    apply_rate_once,
    checked_add,
    checked_sub,
    mul_div,
    require_uint,
)
from autocompound.engine.compounding import (
    MAX_COMPOUND_PERIODS,
    annuity_future_value,
    compound,
    doubling_periods,
    effective_annual_rate,
    growth_factor,
    variable_rate_compounding,
)
from autocompound.engine.efficiency import evaluate_compound
from autocompound.errors import ArithmeticOverflow, InvalidArgument


class TestFixedPoint:
    """Tests for basis-point arithmetic."""

    @pytest.mark.parametrize("amount", [0, 1, 7, 9_999, 1_000_000, 123_456_789, U64_MAX])
    def test_zero_and_full_rate(self, amount):
        """0 bps yields zero; 10_000 bps yields the amount back."""
        assert apply_rate_once(amount, 0) == 0
        assert apply_rate_once(amount, BPS_SCALE) == amount

    def test_truncates_toward_zero(self):
        """Fractions of a unit are dropped."""
        assert apply_rate_once(999, 50) == 4  # 4.995
        assert apply_rate_once(1, 9_999) == 0
        assert apply_rate_once(19_999, 5_000) == 9_999  # 9_999.5

    def test_deterministic(self):
        assert apply_rate_once(1_234_567, 321) == apply_rate_once(1_234_567, 321)

    def test_widened_intermediate(self):
        """amount * rate may exceed 64 bits as long as the result fits."""
        assert apply_rate_once(U64_MAX, 5_000) == U64_MAX // 2

    def test_result_overflow(self):
        """A rate above 100% can push the result out of uint64."""
        with pytest.raises(ArithmeticOverflow):
            apply_rate_once(U64_MAX, 20_000)

    def test_rejects_negative_and_non_integer(self):
        with pytest.raises(InvalidArgument):
            apply_rate_once(-1, 100)
        with pytest.raises(InvalidArgument):
            apply_rate_once(1.5, 100)
        with pytest.raises(InvalidArgument):
            require_uint(True)

    def test_checked_helpers(self):
        assert checked_add(U64_MAX - 1, 1) == U64_MAX
        with pytest.raises(ArithmeticOverflow):
            checked_add(U64_MAX, 1)
        with pytest.raises(ArithmeticOverflow):
            checked_sub(1, 2)
        with pytest.raises(InvalidArgument):
            mul_div(1, 1, 0)

    def test_intermediate_beyond_128_bits(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div(2**70, 2**70, 2**100)


class TestCompounding:
    """Tests for discrete compounding."""

    @pytest.mark.parametrize("principal", [0, 1, 100_000_000])
    @pytest.mark.parametrize("rate", [0, 1, 100, 10_000])
    def test_zero_periods_is_identity(self, principal, rate):
        assert compound(principal, rate, 0) == principal

    @pytest.mark.parametrize("periods", [0, 1, 12, MAX_COMPOUND_PERIODS])
    def test_zero_rate_is_identity(self, periods):
        assert compound(100_000_000, 0, periods) == 100_000_000

    @pytest.mark.parametrize("rate", [100, 500])
    def test_monotonic_in_periods(self, rate):
        """For a positive rate, more periods never compound to less."""
        previous = compound(1_000_000, rate, 0)
        for periods in range(1, 41):
            current = compound(1_000_000, rate, periods)
            assert current >= previous
            previous = current

    def test_growth_factor_by_squaring(self):
        """12 periods at 1%: 10_100 -> 10_201 -> 10_406 -> 10_828; factor 10_406 * 10_828 -> 11_267."""
        assert growth_factor(100, 12) == 11_267

    def test_compound_matches_repeated_floor(self):
        """Twelve applications of floor(x * 10_100 / 10_000) from 100_000_000."""
        expected = 100_000_000
        for _ in range(12):
            expected = expected * 10_100 // 10_000
        assert expected == 112_682_501
        assert compound(100_000_000, 100, 12) == expected

    def test_small_rate_keeps_precision(self):
        """1 bps over 1000 periods must not lose the sub-bps part of the growth."""
        expected = 10**12
        for _ in range(1_000):
            expected = expected * 10_001 // 10_000
        assert compound(10**12, 1, 1_000) == expected
        assert expected > mul_div(10**12, growth_factor(1, 1_000), BPS_SCALE)

    def test_factor_path_never_exceeds_compound(self):
        """Truncating the factor loses at least as much as truncating the amount."""
        for periods in (1, 2, 5, 12, 30):
            factor = growth_factor(100, periods)
            assert mul_div(100_000_000, factor, BPS_SCALE) <= compound(100_000_000, 100, periods)

    def test_single_period_exact(self):
        assert compound(100_000_000, 100, 1) == 101_000_000

    def test_period_cap(self):
        with pytest.raises(InvalidArgument):
            compound(1, 1, MAX_COMPOUND_PERIODS + 1)
        with pytest.raises(InvalidArgument):
            growth_factor(1, MAX_COMPOUND_PERIODS + 1)

    def test_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            compound(U64_MAX, 10_000, 2)
        with pytest.raises(ArithmeticOverflow):
            compound(1, 10_000, 200)

    def test_effective_annual_rate(self):
        """Monthly compounding of 12% APR."""
        # 100 bps per month, floored each month: 10_000 -> 11_266
        assert effective_annual_rate(1_200, 12) == 1_266
        assert effective_annual_rate(1_200, 1) == 1_200
        assert effective_annual_rate(0, 365) == 0
        with pytest.raises(InvalidArgument):
            effective_annual_rate(1_200, 0)

    def test_variable_rate_compounding(self):
        assert variable_rate_compounding(1_000_000, [100, 200], [1, 1]) == 1_030_200
        assert variable_rate_compounding(1_000_000, [], []) == 1_000_000
        with pytest.raises(InvalidArgument):
            variable_rate_compounding(1_000_000, [100], [1, 2])
        with pytest.raises(InvalidArgument):
            variable_rate_compounding(1, [1, 1], [MAX_COMPOUND_PERIODS, 1])

    def test_doubling_periods(self):
        assert doubling_periods(0) == 0
        assert doubling_periods(100) == 72
        assert doubling_periods(800) == 9

    def test_annuity_future_value(self):
        assert annuity_future_value(1_000, 0, 5) == 5_000
        # 1_000 -> 1_010 + 1_000 = 2_010 -> 2_030 + 1_000 = 3_030
        assert annuity_future_value(1_000, 100, 3) == 3_030
        assert annuity_future_value(1_000, 100, 0) == 0


class TestEfficiency:
    """Tests for compound efficiency evaluation."""

    def test_worked_example(self):
        result = evaluate_compound(1_000_000, 50, 3_000)
        assert result.fee == 5_000
        assert result.total_cost == 8_000
        assert result.net_reward == 992_000
        assert result.efficiency_bps == 9_920

    def test_zero_gross_reward(self):
        result = evaluate_compound(0, 50, 3_000)
        assert result.net_reward == 0
        assert result.efficiency_bps == 0

    def test_cost_equal_to_reward_floors_at_zero(self):
        result = evaluate_compound(8_000, 0, 8_000)
        assert result.net_reward == 0
        assert result.efficiency_bps == 0

    def test_cost_above_reward_floors_at_zero(self):
        result = evaluate_compound(1_000, 1_000, 5_000)
        assert result.net_reward == 0
        assert result.efficiency_bps == 0

    def test_no_costs_is_full_efficiency(self):
        result = evaluate_compound(123_456, 0, 0)
        assert result.net_reward == 123_456
        assert result.efficiency_bps == BPS_SCALE

    @pytest.mark.parametrize("gross", [0, 1, 3_001, 99_999, 1_000_000, 10**15])
    @pytest.mark.parametrize("fee_bps", [0, 1, 50, 1_000, 10_000])
    @pytest.mark.parametrize("cost", [0, 3_000, 10**12])
    def test_efficiency_bounds(self, gross, fee_bps, cost):
        result = evaluate_compound(gross, fee_bps, cost)
        assert 0 <= result.efficiency_bps <= BPS_SCALE
        assert 0 <= result.net_reward <= gross

    def test_total_cost_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            evaluate_compound(U64_MAX, 10_000, 1)
