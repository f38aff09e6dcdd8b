"""Reward and cost providers injected into the engine.

Pending rewards and operational costs are resolved outside the engine. These
protocols make that trust boundary explicit: the engine only evaluates the
figures a provider attests.
"""

from typing import Mapping, Protocol

from .fixed_point import require_uint

# Conservative per-compound cost: one payment plus one app call
DEFAULT_OPERATIONAL_COST = 3_000


class CostEstimator(Protocol):
    """Estimates the operational cost of compounding one account."""

    def estimate(self, account: str) -> int:
        ...


class RewardOracle(Protocol):
    """Attests the pending reward for an account."""

    def pending_reward(self, account: str) -> int:
        ...


class FixedCostEstimator:
    """Same cost for every account."""

    def __init__(self, cost: int = DEFAULT_OPERATIONAL_COST):
        self.cost = require_uint(cost, "cost")

    def estimate(self, account: str) -> int:
        return self.cost


class StaticRewardOracle:
    """In-memory reward oracle backed by a mapping; unknown accounts report 0."""

    def __init__(self, rewards: Mapping[str, int] = None):
        self._rewards = dict(rewards or {})

    def set_reward(self, account: str, amount: int):
        self._rewards[account] = require_uint(amount, "amount")

    def pending_reward(self, account: str) -> int:
        return self._rewards.get(account, 0)
