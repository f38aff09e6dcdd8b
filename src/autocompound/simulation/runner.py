"""Simulation runner - drive the auto-compounder over a population of accounts.

Key Features:
- Lognormal principal distribution drawn from a seeded numpy Generator
- Rewards accrue per timestep on each account's principal and are attested
  through a StaticRewardOracle
- Eligible accounts are compounded in bounded batches; net amounts are re-staked
- Deterministic for a given config and seed
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from ..config.schema import Config
from ..engine.compounder import AutoCompounder
from ..engine.fixed_point import BPS_SCALE, apply_rate_once, mul_div
from ..engine.oracles import StaticRewardOracle
from ..engine.state import CompoundHistoryEntry

SECONDS_PER_DAY = 86_400


@dataclass
class SimulationResult:
    """Complete simulation result."""
    config: Config
    accounts: List[str]
    initial_principals: Dict[str, int]
    final_principals: Dict[str, int]
    metrics_over_time: List[Dict[str, Any]]
    final_metrics: Dict[str, Any]
    history: List[CompoundHistoryEntry] = field(default_factory=list)


class SimulationRunner:
    """Run the auto-compounder against simulated reward accrual."""

    def __init__(self, config: Config):
        """
        Initialize simulation runner.

        Args:
            config: Simulation configuration
        """
        self.config = config
        self.engine: Optional[AutoCompounder] = None
        self.oracle: Optional[StaticRewardOracle] = None

    def run(self, random_seed: int = None) -> SimulationResult:
        """
        Run the simulation.

        Args:
            random_seed: Seed for the principal draw (defaults to config value)

        Returns:
            SimulationResult
        """
        sim = self.config.simulation
        defaults = self.config.account_defaults
        if random_seed is None:
            random_seed = sim.random_seed

        self.oracle = StaticRewardOracle()
        self.engine = AutoCompounder.from_config(
            self.config,
            reward_oracle=self.oracle,
            current_time=sim.start_time,
        )

        accounts = [f"ACCT{i:04d}" for i in range(sim.num_accounts)]
        principals = self._draw_principals(random_seed)
        initial_principals = dict(principals)
        pending = {account: 0 for account in accounts}

        for account in accounts:
            self.engine.set_account_settings(
                account,
                defaults.frequency_seconds,
                defaults.threshold_amount,
                defaults.max_operational_cost,
                defaults.slippage_tolerance_bps,
                sender=account,
            )

        num_steps = (sim.horizon_days * SECONDS_PER_DAY) // sim.timestep_seconds
        batch_size = self.engine.max_batch_size
        metrics_over_time = []

        for step in range(1, num_steps + 1):
            now = sim.start_time + step * sim.timestep_seconds

            for account in accounts:
                pending[account] += apply_rate_once(principals[account], sim.reward_rate_per_step_bps)
                self.oracle.set_reward(account, pending[account])

            step_compounded = 0
            for start in range(0, len(accounts), batch_size):
                batch = accounts[start:start + batch_size]
                step_compounded += self.engine.batch_trigger(batch, current_time=now)

            step_compounds = 0
            for account in accounts:
                state = self.engine.get_account_settings(account)
                if state.last_compound_timestamp == now:
                    entry = self.engine.get_compound_history(account)[-1]
                    principals[account] += entry.net_compounded
                    pending[account] = 0
                    self.oracle.set_reward(account, 0)
                    step_compounds += 1

            metrics_over_time.append(self._step_metrics(step, now, principals, pending, step_compounds, step_compounded))

        final_metrics = self._compute_final_metrics(initial_principals, principals)

        return SimulationResult(
            config=self.config,
            accounts=accounts,
            initial_principals=initial_principals,
            final_principals=dict(principals),
            metrics_over_time=metrics_over_time,
            final_metrics=final_metrics,
            history=self.engine.get_all_history(),
        )

    def _draw_principals(self, random_seed: int) -> Dict[str, int]:
        """Draw integer principals from a lognormal around the configured median."""
        sim = self.config.simulation
        rng = np.random.default_rng(random_seed)
        draws = rng.lognormal(mean=np.log(sim.principal_median), sigma=sim.principal_sigma, size=sim.num_accounts)
        return {
            f"ACCT{i:04d}": max(1, int(np.floor(value)))
            for i, value in enumerate(draws)
        }

    def _step_metrics(
        self,
        step: int,
        now: int,
        principals: Dict[str, int],
        pending: Dict[str, int],
        step_compounds: int,
        step_compounded: int,
    ) -> Dict[str, Any]:
        stats = self.engine.get_global_stats()
        return {
            'step': step,
            'time': now,
            't_days': (now - self.config.simulation.start_time) / SECONDS_PER_DAY,
            'total_principal': sum(principals.values()),
            'total_pending': sum(pending.values()),
            'compounds': step_compounds,
            'compounded': step_compounded,
            'total_compounds': stats.total_compounds,
            'total_rewards_compounded': stats.total_rewards_compounded,
            'total_fees_collected': stats.total_fees_collected,
            'average_efficiency_bps': stats.average_efficiency_bps,
            'best_efficiency_bps': stats.best_efficiency_bps,
        }

    def _compute_final_metrics(
        self,
        initial_principals: Dict[str, int],
        final_principals: Dict[str, int],
    ) -> Dict[str, Any]:
        stats = self.engine.get_global_stats()
        initial_total = sum(initial_principals.values())
        final_total = sum(final_principals.values())
        never_compounded = sum(
            1 for account in final_principals
            if not self.engine.get_compound_history(account)
        )
        return {
            'initial_total_principal': initial_total,
            'final_total_principal': final_total,
            'realized_growth_bps': mul_div(final_total - initial_total, BPS_SCALE, initial_total),
            'total_compounds': stats.total_compounds,
            'total_rewards_compounded': stats.total_rewards_compounded,
            'total_fees_collected': stats.total_fees_collected,
            'average_efficiency_bps': stats.average_efficiency_bps,
            'best_efficiency_bps': stats.best_efficiency_bps,
            'accounts_never_compounded': never_compounded,
        }
