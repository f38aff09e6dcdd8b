"""Eligibility rules for triggering a compound."""

from typing import Optional

from .state import AccountCompoundState

REASON_DISABLED = "disabled"
REASON_TOO_EARLY = "too_early"
REASON_BELOW_THRESHOLD = "below_threshold"
REASON_COST_EXCEEDED = "cost_exceeded"


def ineligibility_reason(
    state: AccountCompoundState,
    pending_reward: int,
    current_time: int,
    estimated_cost: int,
) -> Optional[str]:
    """
    Return the first failing eligibility condition, or None if eligible.

    Checked in order: enabled, frequency elapsed, threshold met, cost cap.
    """
    if not state.enabled:
        return REASON_DISABLED
    if current_time < state.last_compound_timestamp + state.frequency_seconds:
        return REASON_TOO_EARLY
    if pending_reward < state.threshold_amount:
        return REASON_BELOW_THRESHOLD
    if estimated_cost > state.max_operational_cost:
        return REASON_COST_EXCEEDED
    return None


def is_eligible(
    state: AccountCompoundState,
    pending_reward: int,
    current_time: int,
    estimated_cost: int,
) -> bool:
    """True iff the account is enabled, due, above threshold and within its cost cap."""
    return ineligibility_reason(state, pending_reward, current_time, estimated_cost) is None
