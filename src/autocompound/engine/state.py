"""Engine state records: per-account settings, compound history, global stats, fees.

GlobalStats average semantics:
- average_efficiency_bps is a running integer mean recomputed from the previous
  mean and count: floor((avg * (n - 1) + eff) / n)
- Each step truncates, so the value can drift below the exact mean of history.
  The drift is kept as-is; validate_engine_ledger() reports it.
"""

from dataclasses import dataclass, replace

from .fixed_point import checked_add, checked_mul, require_uint

MIN_FREQUENCY_SECONDS = 3_600  # 1 hour between compounds
MAX_SLIPPAGE_BPS = 1_000  # 10%
MAX_FEE_BPS = 1_000  # 10%


@dataclass(frozen=True)
class AccountCompoundState:
    """Auto-compound settings and timing for one account."""
    account: str
    enabled: bool
    frequency_seconds: int
    threshold_amount: int
    max_operational_cost: int
    slippage_tolerance_bps: int
    last_compound_timestamp: int = 0  # 0 until first compound

    @property
    def next_eligible_time(self) -> int:
        """Earliest time the frequency constraint allows another compound."""
        return self.last_compound_timestamp + self.frequency_seconds


@dataclass(frozen=True)
class CompoundHistoryEntry:
    """Immutable audit record of one successful compound."""
    account: str
    timestamp: int
    gross_reward: int
    net_compounded: int
    operational_cost: int
    fee: int
    efficiency_bps: int


@dataclass(frozen=True)
class GlobalStats:
    """Process-wide compounding statistics."""
    users_enabled: int = 0
    total_compounds: int = 0
    total_rewards_compounded: int = 0
    last_global_compound_time: int = 0
    average_efficiency_bps: int = 0
    best_efficiency_bps: int = 0
    total_fees_collected: int = 0


@dataclass(frozen=True)
class FeeConfig:
    """Compound fee rate and its recipient."""
    compound_fee_bps: int
    fee_collector: str


def apply_compound_to_stats(
    stats: GlobalStats,
    net_compounded: int,
    efficiency_bps: int,
    fee: int,
    current_time: int,
) -> GlobalStats:
    """
    Return the stats after one more successful compound.

    Pure: the input is never mutated, so a raised ArithmeticOverflow leaves
    the caller's stats untouched.
    """
    require_uint(current_time, "current_time")
    total_compounds = checked_add(stats.total_compounds, 1)
    total_rewards = checked_add(stats.total_rewards_compounded, net_compounded)
    total_fees = checked_add(stats.total_fees_collected, fee)
    weighted = checked_add(
        checked_mul(stats.average_efficiency_bps, total_compounds - 1),
        efficiency_bps,
    )
    return replace(
        stats,
        total_compounds=total_compounds,
        total_rewards_compounded=total_rewards,
        total_fees_collected=total_fees,
        last_global_compound_time=current_time,
        best_efficiency_bps=max(stats.best_efficiency_bps, efficiency_bps),
        average_efficiency_bps=weighted // total_compounds,
    )
