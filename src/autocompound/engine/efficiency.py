"""Compound efficiency evaluation - net reward after fees and operational cost."""

from dataclasses import dataclass

from .fixed_point import BPS_SCALE, apply_rate_once, checked_add, mul_div, require_uint


@dataclass(frozen=True)
class CompoundEvaluation:
    """Result of evaluating one compound."""
    net_reward: int  # Amount re-staked after fee and cost
    efficiency_bps: int  # Share of gross reward retained, in bps
    fee: int  # Compound fee owed to the fee collector
    total_cost: int  # fee + operational cost


def evaluate_compound(gross_reward: int, fee_bps: int, operational_cost: int) -> CompoundEvaluation:
    """
    Evaluate net reward and efficiency for a compound.

    Net reward floors at zero: when fee + cost >= gross reward nothing is
    compounded and efficiency is zero. A zero gross reward yields zero
    efficiency rather than a division error.

    Args:
        gross_reward: Pending reward claimed by the compound
        fee_bps: Compound fee rate in bps
        operational_cost: Cost of executing the compound

    Returns:
        CompoundEvaluation
    """
    require_uint(gross_reward, "gross_reward")
    require_uint(fee_bps, "fee_bps")
    require_uint(operational_cost, "operational_cost")

    fee = apply_rate_once(gross_reward, fee_bps)
    total_cost = checked_add(fee, operational_cost)
    net_reward = gross_reward - total_cost if gross_reward > total_cost else 0

    if gross_reward == 0:
        efficiency_bps = 0
    else:
        efficiency_bps = mul_div(net_reward, BPS_SCALE, gross_reward)

    return CompoundEvaluation(
        net_reward=net_reward,
        efficiency_bps=efficiency_bps,
        fee=fee,
        total_cost=total_cost,
    )
