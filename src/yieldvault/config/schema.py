"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..engine.fixed_point import rate_per_second_from_annual


class VaultSettings(BaseModel):
    """Deployment parameters for a vault."""
    asset_id: str = Field(min_length=1, description="Identifier of the managed asset")
    owner: str = Field(min_length=1, description="Identity with admin rights")
    address: Optional[str] = Field(default=None, description="Vault identity on the asset ledger")
    rate_per_second: Optional[int] = Field(
        default=None, ge=0,
        description="Per-second growth coefficient scaled by 1e18"
    )
    annual_rate: Optional[float] = Field(
        default=None, ge=0, le=10,
        description="Simple annual rate used to derive rate_per_second (0.05 = 5%)"
    )
    initial_timestamp: int = Field(default=0, ge=0, description="Clock start for simulations")
    paused: bool = Field(default=False, description="Start with the deposit/withdraw gate closed")

    @model_validator(mode='after')
    def resolve_rate(self):
        """Derive rate_per_second from annual_rate; reject the pair if they disagree."""
        if self.annual_rate is None:
            if self.rate_per_second is None:
                raise ValueError("Either rate_per_second or annual_rate must be set")
            return self
        derived = rate_per_second_from_annual(self.annual_rate)
        if self.rate_per_second is None:
            self.rate_per_second = derived
        elif self.rate_per_second != derived:
            raise ValueError(
                f"rate_per_second {self.rate_per_second} conflicts with annual_rate "
                f"{self.annual_rate} (derives {derived}); set only one"
            )
        return self


class AssetSettings(BaseModel):
    """Underlying asset funding."""
    initial_vault_funding: int = Field(
        default=0, ge=0,
        description="Asset pre-funded into the vault to back accrued yield"
    )


class SimulationSettings(BaseModel):
    """Random-flow simulation parameters."""
    num_holders: int = Field(gt=0, description="Number of simulated depositors")
    num_steps: int = Field(gt=0, description="Number of simulation steps")
    step_seconds: int = Field(gt=0, description="Clock advance per step")
    holder_funding: int = Field(gt=0, description="Asset minted to each holder at start")
    max_deposit: int = Field(gt=0, description="Upper bound of a single random deposit")
    deposit_probability: float = Field(ge=0, le=1, description="Chance a holder deposits in a step")
    withdraw_probability: float = Field(ge=0, le=1, description="Chance a holder withdraws in a step")
    random_seed: int = Field(description="Random seed for reproducibility")

    @model_validator(mode='after')
    def validate_probabilities(self):
        """Deposit and withdraw are exclusive choices per holder per step."""
        total = self.deposit_probability + self.withdraw_probability
        if total > 1.0:
            raise ValueError(
                f"deposit_probability + withdraw_probability must be <= 1.0, got {total:.3f}"
            )
        return self

    @field_validator("max_deposit", "holder_funding", mode="before")
    @classmethod
    def coerce_amounts(cls, v):
        """Allow amounts written as floats or scientific notation in YAML."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        if isinstance(v, str):
            return int(float(v)) if "e" in v.lower() else int(v)
        return v


class Config(BaseModel):
    """Complete configuration for the yield vault."""
    vault: VaultSettings
    asset: AssetSettings = Field(default_factory=AssetSettings)
    simulation: SimulationSettings

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
