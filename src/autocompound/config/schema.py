"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator


class FeeSettings(BaseModel):
    """Compound fee configuration."""
    compound_fee_bps: int = Field(ge=0, le=1000, description="Compound fee in basis points (max 10%)")
    fee_collector: str = Field(min_length=1, description="Address receiving compound fees")


class EngineSettings(BaseModel):
    """Engine-wide operational parameters."""
    admin: str = Field(min_length=1, description="Admin address allowed to change fees and pause")
    estimated_operational_cost: int = Field(
        ge=0, default=3000,
        description="Operational cost charged per compound (payment + app call)"
    )
    max_batch_size: int = Field(
        ge=1, le=1000, default=10,
        description="Maximum accounts processed by a single batch trigger"
    )


class AccountDefaults(BaseModel):
    """Default auto-compound settings applied to new accounts."""
    frequency_seconds: int = Field(ge=3600, description="Minimum seconds between compounds")
    threshold_amount: int = Field(gt=0, description="Minimum pending reward to compound")
    max_operational_cost: int = Field(ge=0, description="Maximum accepted cost per compound")
    slippage_tolerance_bps: int = Field(ge=0, le=1000, description="Slippage tolerance (max 10%)")


class Simulation(BaseModel):
    """Simulation parameters."""
    num_accounts: int = Field(gt=0, description="Number of simulated accounts")
    horizon_days: int = Field(gt=0, description="Simulation time horizon in days")
    timestep_seconds: int = Field(ge=3600, description="Seconds between scheduler ticks")
    reward_rate_per_step_bps: int = Field(
        ge=0, le=10000,
        description="Reward accrued on principal per timestep, in bps"
    )
    principal_median: float = Field(gt=0, description="Median staked principal per account")
    principal_sigma: float = Field(ge=0, default=1.0, description="Lognormal sigma of principals")
    random_seed: int = Field(description="Random seed for reproducibility")
    start_time: int = Field(ge=0, default=0, description="Unix time of the first tick")

    @field_validator("timestep_seconds", "horizon_days", mode="before")
    @classmethod
    def coerce_int(cls, v):
        """Accept integral floats from YAML (e.g. 86400.0)."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v


class Config(BaseModel):
    """Complete configuration for the auto-compounder."""
    fees: FeeSettings
    engine: EngineSettings
    account_defaults: AccountDefaults
    simulation: Simulation

    @model_validator(mode='after')
    def validate_horizon_covers_timestep(self):
        """Ensure the simulation horizon holds at least one timestep."""
        if self.simulation.timestep_seconds > self.simulation.horizon_days * 86_400:
            raise ValueError(
                f"timestep_seconds ({self.simulation.timestep_seconds}) exceeds the "
                f"simulation horizon ({self.simulation.horizon_days} days)"
            )
        return self

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
