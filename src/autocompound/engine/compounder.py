"""Auto-compounder engine - per-account compound triggering with global bookkeeping.

Key Concepts:
- Accounts opt in with set_account_settings() and are compounded when eligible
- Pending rewards and operational costs come from outside the engine
  (caller arguments, a RewardOracle, a CostEstimator)
- Every mutating operation runs under one lock; trigger_compound computes the
  new state first and commits only when nothing can fail any more
- batch_trigger skips ineligible accounts but aborts on any other error
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import (
    AlreadyInitialized,
    CompounderError,
    CostExceeded,
    InvalidArgument,
    NotEligible,
    NotInitialized,
    Paused,
    Unauthorized,
)
from .compounding import compound
from .efficiency import evaluate_compound
from .eligibility import REASON_COST_EXCEEDED, ineligibility_reason
from .fixed_point import checked_add, checked_sub, require_uint
from .oracles import CostEstimator, FixedCostEstimator, RewardOracle
from .state import (
    MAX_FEE_BPS,
    MAX_SLIPPAGE_BPS,
    MIN_FREQUENCY_SECONDS,
    AccountCompoundState,
    CompoundHistoryEntry,
    FeeConfig,
    GlobalStats,
    apply_compound_to_stats,
)

logger = logging.getLogger("autocompound.engine.compounder")

DEFAULT_MAX_BATCH_SIZE = 10

REASON_UNKNOWN_ACCOUNT = "unknown_account"


def _validate_fee_bps(fee_bps: int) -> int:
    require_uint(fee_bps, "fee_bps")
    if fee_bps > MAX_FEE_BPS:
        raise InvalidArgument(f"fee_bps={fee_bps} exceeds maximum of {MAX_FEE_BPS}")
    return fee_bps


def _validate_address(address: str, name: str) -> str:
    if not isinstance(address, str) or not address:
        raise InvalidArgument(f"{name} must be a non-empty string")
    return address


class AutoCompounder:
    """Yield accounting engine for an auto-compounding vault."""

    def __init__(
        self,
        cost_estimator: Optional[CostEstimator] = None,
        reward_oracle: Optional[RewardOracle] = None,
        clock: Callable[[], float] = time.time,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        """
        Initialize an empty, uninitialized engine.

        Args:
            cost_estimator: Operational cost provider (defaults to a fixed 3000)
            reward_oracle: Optional attested pending-reward provider
            clock: Source of the current time when callers omit it
            max_batch_size: Maximum accounts processed per batch_trigger call
        """
        require_uint(max_batch_size, "max_batch_size")
        if max_batch_size < 1:
            raise InvalidArgument(f"max_batch_size must be positive, got {max_batch_size}")

        self.cost_estimator = cost_estimator or FixedCostEstimator()
        self.reward_oracle = reward_oracle
        self.max_batch_size = max_batch_size
        self._clock = clock
        self._lock = threading.RLock()

        self._initialized = False
        self._paused = False
        self._admin: Optional[str] = None
        self._fee_config: Optional[FeeConfig] = None
        self._stats = GlobalStats()
        self._accounts: Dict[str, AccountCompoundState] = {}
        self._history: Dict[str, List[CompoundHistoryEntry]] = {}

    @classmethod
    def from_config(
        cls,
        config,
        reward_oracle: Optional[RewardOracle] = None,
        clock: Callable[[], float] = time.time,
        current_time: Optional[int] = None,
    ) -> 'AutoCompounder':
        """Build and initialize an engine from a Config."""
        engine = cls(
            cost_estimator=FixedCostEstimator(config.engine.estimated_operational_cost),
            reward_oracle=reward_oracle,
            clock=clock,
            max_batch_size=config.engine.max_batch_size,
        )
        engine.initialize(
            config.fees.compound_fee_bps,
            config.fees.fee_collector,
            sender=config.engine.admin,
            current_time=current_time,
        )
        return engine

    # ------------------------------------------------------------------
    # Lifecycle and admin
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def admin(self) -> Optional[str]:
        return self._admin

    def initialize(
        self,
        fee_bps: int,
        fee_collector: str,
        *,
        sender: str,
        current_time: Optional[int] = None,
    ):
        """One-time setup; the sender becomes admin."""
        with self._lock:
            if self._initialized:
                raise AlreadyInitialized("Engine is already initialized")
            _validate_fee_bps(fee_bps)
            _validate_address(fee_collector, "fee_collector")
            _validate_address(sender, "sender")
            now = self._now(current_time)

            self._admin = sender
            self._fee_config = FeeConfig(compound_fee_bps=fee_bps, fee_collector=fee_collector)
            self._stats = GlobalStats(last_global_compound_time=now)
            self._initialized = True
            self._paused = False
        logger.info(f"Auto-compounder initialized: admin={sender}, fee={fee_bps} bps, collector={fee_collector}")

    def update_fee_rate(self, new_fee_bps: int, *, sender: str):
        with self._lock:
            self._require_admin(sender)
            _validate_fee_bps(new_fee_bps)
            self._fee_config = replace(self._fee_config, compound_fee_bps=new_fee_bps)
        logger.info(f"Compound fee updated to {new_fee_bps} bps")

    def update_fee_collector(self, new_collector: str, *, sender: str):
        with self._lock:
            self._require_admin(sender)
            _validate_address(new_collector, "fee_collector")
            self._fee_config = replace(self._fee_config, fee_collector=new_collector)
        logger.info(f"Fee collector updated to {new_collector}")

    def pause(self, *, sender: str):
        with self._lock:
            self._require_admin(sender)
            self._paused = True
        logger.info("Compounding paused")

    def resume(self, *, sender: str):
        with self._lock:
            self._require_admin(sender)
            self._paused = False
        logger.info("Compounding resumed")

    # ------------------------------------------------------------------
    # Account settings
    # ------------------------------------------------------------------

    def set_account_settings(
        self,
        account: str,
        frequency_seconds: int,
        threshold_amount: int,
        max_operational_cost: int,
        slippage_tolerance_bps: int,
        *,
        sender: str,
    ):
        """
        Enable auto-compounding for an account or update its settings.

        Timing history is preserved across updates and re-enables.

        Raises:
            Unauthorized: If sender is not the account owner
            InvalidArgument: If a setting violates its bound
        """
        with self._lock:
            self._require_active()
            _validate_address(account, "account")
            if sender != account:
                raise Unauthorized(f"{sender!r} cannot change settings of {account!r}")

            require_uint(frequency_seconds, "frequency_seconds")
            require_uint(threshold_amount, "threshold_amount")
            require_uint(max_operational_cost, "max_operational_cost")
            require_uint(slippage_tolerance_bps, "slippage_tolerance_bps")
            if frequency_seconds < MIN_FREQUENCY_SECONDS:
                raise InvalidArgument(
                    f"frequency_seconds={frequency_seconds} below minimum of {MIN_FREQUENCY_SECONDS}"
                )
            if threshold_amount == 0:
                raise InvalidArgument("threshold_amount must be positive")
            if slippage_tolerance_bps > MAX_SLIPPAGE_BPS:
                raise InvalidArgument(
                    f"slippage_tolerance_bps={slippage_tolerance_bps} exceeds maximum of {MAX_SLIPPAGE_BPS}"
                )

            existing = self._accounts.get(account)
            was_enabled = existing is not None and existing.enabled
            users_enabled = self._stats.users_enabled
            if not was_enabled:
                users_enabled = checked_add(users_enabled, 1)

            self._accounts[account] = AccountCompoundState(
                account=account,
                enabled=True,
                frequency_seconds=frequency_seconds,
                threshold_amount=threshold_amount,
                max_operational_cost=max_operational_cost,
                slippage_tolerance_bps=slippage_tolerance_bps,
                last_compound_timestamp=existing.last_compound_timestamp if existing else 0,
            )
            self._stats = replace(self._stats, users_enabled=users_enabled)
        logger.info(
            f"Auto-compound {'updated' if was_enabled else 'enabled'} for {account}: "
            f"every {frequency_seconds}s, threshold={threshold_amount}, max_cost={max_operational_cost}"
        )

    def disable_account(self, account: str, *, sender: str):
        """Disable auto-compounding; a no-op when already disabled."""
        with self._lock:
            self._require_active()
            if sender != account:
                raise Unauthorized(f"{sender!r} cannot disable {account!r}")
            state = self._accounts.get(account)
            if state is None:
                raise InvalidArgument(f"Account {account!r} never enabled auto-compounding")
            if not state.enabled:
                return
            self._accounts[account] = replace(state, enabled=False)
            self._stats = replace(
                self._stats,
                users_enabled=checked_sub(self._stats.users_enabled, 1),
            )
        logger.info(f"Auto-compound disabled for {account}")

    # ------------------------------------------------------------------
    # Compounding
    # ------------------------------------------------------------------

    def estimate_cost(self, account: str) -> int:
        """Operational cost of compounding the account, as the estimator reports it."""
        return require_uint(self.cost_estimator.estimate(account), "estimated_cost")

    def trigger_compound(
        self,
        account: str,
        pending_reward: Optional[int] = None,
        current_time: Optional[int] = None,
    ) -> int:
        """
        Compound one account's pending reward.

        Args:
            account: Account to compound
            pending_reward: Caller-supplied pending reward (defaults to the oracle)
            current_time: Unix time (defaults to the engine clock)

        Returns:
            Net amount compounded

        Raises:
            NotEligible: If the account is unknown, disabled, too early or below threshold
            CostExceeded: If the cost estimate exceeds the account's cap
            ArithmeticOverflow: If bookkeeping would leave the uint64 range
        """
        with self._lock:
            self._require_active()
            now = self._now(current_time)
            reward = self._resolve_pending_reward(account, pending_reward)
            return self._compound_locked(account, reward, now)

    def batch_trigger(
        self,
        accounts: Sequence[str],
        pending_rewards: Optional[Sequence[int]] = None,
        current_time: Optional[int] = None,
    ) -> int:
        """
        Compound every eligible account in a bounded batch.

        Ineligible accounts are skipped. Any other error aborts the remaining
        items and propagates; accounts compounded before it stay compounded.

        Args:
            accounts: Accounts to process (at most max_batch_size are used)
            pending_rewards: Rewards aligned with accounts (defaults to the oracle)
            current_time: Unix time shared by the whole batch

        Returns:
            Total net amount compounded
        """
        with self._lock:
            self._require_active()
            now = self._now(current_time)
            if pending_rewards is None:
                pending_rewards = [None] * len(accounts)
            if len(accounts) != len(pending_rewards):
                raise InvalidArgument(
                    f"accounts and pending_rewards must have equal length "
                    f"({len(accounts)} vs {len(pending_rewards)})"
                )
            if len(accounts) > self.max_batch_size:
                logger.warning(
                    f"Batch of {len(accounts)} accounts truncated to {self.max_batch_size}"
                )

            total = 0
            compounded = 0
            items = list(zip(accounts, pending_rewards))[:self.max_batch_size]
            for index, (account, supplied) in enumerate(items):
                try:
                    reward = self._resolve_pending_reward(account, supplied)
                    state = self._accounts.get(account)
                    if state is None:
                        logger.debug(f"Batch skip {account}: {REASON_UNKNOWN_ACCOUNT}")
                        continue
                    reason = ineligibility_reason(state, reward, now, self.estimate_cost(account))
                    if reason is not None:
                        logger.debug(f"Batch skip {account}: {reason}")
                        continue
                    total = checked_add(total, self._compound_locked(account, reward, now))
                    compounded += 1
                except CompounderError as exc:
                    logger.warning(
                        f"Batch aborted at index {index} ({account}) after {compounded} compounds: {exc}"
                    )
                    raise
            logger.info(f"Batch compounded {compounded}/{len(items)} accounts, total={total}")
            return total

    def _compound_locked(self, account: str, pending_reward: int, current_time: int) -> int:
        state = self._accounts.get(account)
        if state is None:
            raise NotEligible(account, REASON_UNKNOWN_ACCOUNT)

        estimated_cost = self.estimate_cost(account)
        reason = ineligibility_reason(state, pending_reward, current_time, estimated_cost)
        if reason == REASON_COST_EXCEEDED:
            raise CostExceeded(account, estimated_cost, state.max_operational_cost)
        if reason is not None:
            raise NotEligible(account, reason)

        evaluation = evaluate_compound(
            pending_reward,
            self._fee_config.compound_fee_bps,
            estimated_cost,
        )
        new_stats = apply_compound_to_stats(
            self._stats,
            evaluation.net_reward,
            evaluation.efficiency_bps,
            evaluation.fee,
            current_time,
        )
        entry = CompoundHistoryEntry(
            account=account,
            timestamp=current_time,
            gross_reward=pending_reward,
            net_compounded=evaluation.net_reward,
            operational_cost=estimated_cost,
            fee=evaluation.fee,
            efficiency_bps=evaluation.efficiency_bps,
        )

        # Commit
        self._stats = new_stats
        self._history.setdefault(account, []).append(entry)
        self._accounts[account] = replace(state, last_compound_timestamp=current_time)

        logger.info(
            f"Compounded {account}: gross={pending_reward}, net={evaluation.net_reward}, "
            f"fee={evaluation.fee}, cost={estimated_cost}, efficiency={evaluation.efficiency_bps} bps"
        )
        return evaluation.net_reward

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get_account_settings(self, account: str) -> Optional[AccountCompoundState]:
        """Current state of an account, or None if it never enabled."""
        with self._lock:
            return self._accounts.get(account)

    def get_global_stats(self) -> GlobalStats:
        with self._lock:
            return self._stats

    def get_fee_config(self) -> FeeConfig:
        with self._lock:
            self._require_initialized()
            return self._fee_config

    def get_compound_history(self, account: str) -> Tuple[CompoundHistoryEntry, ...]:
        with self._lock:
            return tuple(self._history.get(account, ()))

    def get_all_history(self) -> List[CompoundHistoryEntry]:
        """All history entries across accounts, ordered by timestamp."""
        with self._lock:
            entries = [e for history in self._history.values() for e in history]
        return sorted(entries, key=lambda e: (e.timestamp, e.account))

    def next_compound_time(self, account: str) -> int:
        """Earliest compound time for an enabled account; 0 if unknown or disabled."""
        with self._lock:
            state = self._accounts.get(account)
        if state is None or not state.enabled:
            return 0
        return state.next_eligible_time

    def project_compound_value(
        self,
        account: str,
        principal: int,
        rate_per_period_bps: int,
        horizon_seconds: int,
    ) -> int:
        """
        Project a principal forward assuming a compound every frequency_seconds.

        Unknown or disabled accounts never compound, so the principal is returned.
        """
        require_uint(horizon_seconds, "horizon_seconds")
        with self._lock:
            state = self._accounts.get(account)
        if state is None or not state.enabled:
            return require_uint(principal, "principal")
        periods = horizon_seconds // state.frequency_seconds
        return compound(principal, rate_per_period_bps, periods)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _now(self, current_time: Optional[int]) -> int:
        if current_time is None:
            current_time = int(self._clock())
        return require_uint(current_time, "current_time")

    def _resolve_pending_reward(self, account: str, supplied: Optional[int]) -> int:
        if self.reward_oracle is None:
            if supplied is None:
                raise InvalidArgument(
                    f"No pending reward supplied for {account!r} and no reward oracle configured"
                )
            return require_uint(supplied, "pending_reward")

        attested = require_uint(self.reward_oracle.pending_reward(account), "attested_reward")
        if supplied is None:
            return attested
        require_uint(supplied, "pending_reward")
        if supplied > attested:
            raise InvalidArgument(
                f"Pending reward {supplied} for {account!r} exceeds attested reward {attested}"
            )
        return supplied

    def _require_initialized(self):
        if not self._initialized:
            raise NotInitialized("Engine has not been initialized")

    def _require_active(self):
        self._require_initialized()
        if self._paused:
            raise Paused("Compounding is paused")

    def _require_admin(self, sender: str):
        self._require_initialized()
        if sender != self._admin:
            raise Unauthorized(f"{sender!r} is not the admin")
