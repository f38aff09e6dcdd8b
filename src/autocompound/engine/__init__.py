"""Yield accounting engine: fixed-point math, compounding, efficiency, eligibility."""

from .compounder import DEFAULT_MAX_BATCH_SIZE, AutoCompounder
from .compounding import (
    MAX_COMPOUND_PERIODS,
    annuity_future_value,
    compound,
    doubling_periods,
    effective_annual_rate,
    growth_factor,
    variable_rate_compounding,
)
from .efficiency import CompoundEvaluation, evaluate_compound
from .eligibility import ineligibility_reason, is_eligible
from .fixed_point import BPS_SCALE, U64_MAX, apply_rate_once
from .oracles import CostEstimator, FixedCostEstimator, RewardOracle, StaticRewardOracle
from .state import (
    AccountCompoundState,
    CompoundHistoryEntry,
    FeeConfig,
    GlobalStats,
    apply_compound_to_stats,
)

__all__ = [
    # Fixed point
    "BPS_SCALE",
    "U64_MAX",
    "apply_rate_once",
    # Compounding
    "MAX_COMPOUND_PERIODS",
    "compound",
    "growth_factor",
    "effective_annual_rate",
    "variable_rate_compounding",
    "doubling_periods",
    "annuity_future_value",
    # Efficiency
    "CompoundEvaluation",
    "evaluate_compound",
    # Eligibility
    "is_eligible",
    "ineligibility_reason",
    # State
    "AccountCompoundState",
    "CompoundHistoryEntry",
    "FeeConfig",
    "GlobalStats",
    "apply_compound_to_stats",
    # Oracles
    "CostEstimator",
    "RewardOracle",
    "FixedCostEstimator",
    "StaticRewardOracle",
    # Engine
    "AutoCompounder",
    "DEFAULT_MAX_BATCH_SIZE",
]
