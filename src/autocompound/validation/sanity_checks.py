"""Sanity checks for configuration inputs and engine ledger consistency."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config.schema import Config
from ..engine.compounder import AutoCompounder
from ..engine.efficiency import evaluate_compound
from ..engine.fixed_point import apply_rate_once
from ..engine.state import CompoundHistoryEntry

SECONDS_PER_DAY = 86_400


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "ledger", "drift"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on configuration."""

    def __init__(self, config: Config):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        warnings = []
        fees = self.config.fees
        engine = self.config.engine
        defaults = self.config.account_defaults
        sim = self.config.simulation

        # Default accounts must be able to afford the estimated cost
        if engine.estimated_operational_cost > defaults.max_operational_cost:
            warnings.append(ValidationWarning(
                severity="error",
                category="input",
                message="Estimated operational cost exceeds the default cost cap; accounts can never compound",
                details=f"Cost: {engine.estimated_operational_cost:,}, cap: {defaults.max_operational_cost:,}"
            ))

        # Compounding exactly at threshold should retain something
        at_threshold = evaluate_compound(
            defaults.threshold_amount,
            fees.compound_fee_bps,
            engine.estimated_operational_cost,
        )
        if at_threshold.net_reward == 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="input",
                message="Fee plus operational cost consumes the whole reward at the default threshold",
                details=f"Threshold: {defaults.threshold_amount:,}, total cost: {at_threshold.total_cost:,}"
            ))
        elif at_threshold.efficiency_bps < 5_000:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Compounding at the default threshold retains less than 50% of the reward",
                details=f"Efficiency at threshold: {at_threshold.efficiency_bps / 100:.2f}%"
            ))

        # Ticks closer together than the frequency are mostly skipped
        if sim.timestep_seconds < defaults.frequency_seconds:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Simulation timestep is shorter than the compound frequency",
                details=f"Timestep: {sim.timestep_seconds}s, frequency: {defaults.frequency_seconds}s"
            ))

        # Median account should reach threshold within the horizon
        reward_per_step = apply_rate_once(int(sim.principal_median), sim.reward_rate_per_step_bps)
        num_steps = (sim.horizon_days * SECONDS_PER_DAY) // sim.timestep_seconds
        if reward_per_step * num_steps < defaults.threshold_amount:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Median account never reaches the compound threshold within the horizon",
                details=f"Accrued: {reward_per_step * num_steps:,}, threshold: {defaults.threshold_amount:,}"
            ))

        return warnings


def exact_average_efficiency(history: Sequence[CompoundHistoryEntry]) -> float:
    """Exact arithmetic mean of efficiency over history (0.0 when empty)."""
    if not history:
        return 0.0
    return sum(entry.efficiency_bps for entry in history) / len(history)


def validate_engine_ledger(engine: AutoCompounder, drift_tolerance_bps: float = 1.0) -> List[ValidationWarning]:
    """
    Check GlobalStats against the compound history.

    Totals must match exactly. The running average may drift below the exact
    mean because every update truncates; drift above the tolerance is reported
    as a warning rather than an error.

    Args:
        engine: Engine to audit
        drift_tolerance_bps: Allowed gap between running and exact mean

    Returns:
        List of validation warnings
    """
    warnings = []
    stats = engine.get_global_stats()
    history = engine.get_all_history()

    if stats.total_compounds != len(history):
        warnings.append(ValidationWarning(
            severity="error",
            category="ledger",
            message="total_compounds does not match history length",
            details=f"Stats: {stats.total_compounds}, history: {len(history)}"
        ))

    net_sum = sum(entry.net_compounded for entry in history)
    if stats.total_rewards_compounded != net_sum:
        warnings.append(ValidationWarning(
            severity="error",
            category="ledger",
            message="total_rewards_compounded does not match history",
            details=f"Stats: {stats.total_rewards_compounded:,}, history: {net_sum:,}"
        ))

    fee_sum = sum(entry.fee for entry in history)
    if stats.total_fees_collected != fee_sum:
        warnings.append(ValidationWarning(
            severity="error",
            category="ledger",
            message="total_fees_collected does not match history",
            details=f"Stats: {stats.total_fees_collected:,}, history: {fee_sum:,}"
        ))

    if history:
        best = max(entry.efficiency_bps for entry in history)
        if stats.best_efficiency_bps != best:
            warnings.append(ValidationWarning(
                severity="error",
                category="ledger",
                message="best_efficiency_bps does not match history",
                details=f"Stats: {stats.best_efficiency_bps}, history: {best}"
            ))

    exact = exact_average_efficiency(history)
    drift = exact - stats.average_efficiency_bps
    if abs(drift) > drift_tolerance_bps:
        warnings.append(ValidationWarning(
            severity="warning",
            category="drift",
            message="Running average efficiency has drifted from the exact mean",
            details=f"Running: {stats.average_efficiency_bps} bps, exact: {exact:.2f} bps, drift: {drift:.2f} bps"
        ))

    return warnings
