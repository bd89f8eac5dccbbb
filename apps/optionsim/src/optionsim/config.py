"""Configuration models for the options simulator.

Loads simulation configuration from YAML file with Pydantic validation.
"""

import os
from decimal import Decimal
from enum import StrEnum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from optioncore import to_money


class WindDownMode(StrEnum):
    """What to do with open positions when the feed is exhausted."""

    LEAVE_OPEN = "leave_open"
    CLOSE_ALL = "close_all"


class CommissionModel(StrEnum):
    """Supported commission schedules."""

    FLAT = "flat"
    PER_CONTRACT = "per_contract"


def _parse_decimal(v):
    """Convert str/int/float to Decimal without binary float error."""
    if v is None or isinstance(v, Decimal):
        return v
    if isinstance(v, (str, int, float)):
        return to_money(v)
    return v


class CommissionConfig(BaseModel):
    """Commission schedule configuration."""

    model: CommissionModel = Field(
        default=CommissionModel.PER_CONTRACT,
        description="Fee model: 'flat' per order or 'per_contract'",
    )
    fee: Decimal = Field(
        default=Decimal("1.00"),
        ge=0,
        description="Flat fee per order (flat model)",
    )
    rate: Decimal = Field(
        default=Decimal("0.65"),
        ge=0,
        description="Fee per contract (per_contract model)",
    )
    minimum: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Minimum fee per order (per_contract model)",
    )
    maximum: Optional[Decimal] = Field(
        default=None,
        description="Maximum fee per order (per_contract model, None = uncapped)",
    )

    @field_validator("fee", "rate", "minimum", "maximum", mode="before")
    @classmethod
    def parse_amounts(cls, v):
        """Convert string/number amounts to Decimal."""
        return _parse_decimal(v)

    @model_validator(mode="after")
    def check_bounds(self) -> "CommissionConfig":
        if self.maximum is not None and self.maximum < self.minimum:
            raise ValueError(f"maximum {self.maximum} is below minimum {self.minimum}")
        return self


class FeedConfig(BaseModel):
    """Historical data feed configuration."""

    path: Optional[str] = Field(
        default=None,
        description="Path to a DiscountOptionData CSV file",
    )
    has_header: bool = Field(
        default=True,
        description="Skip the first line of the file",
    )


class StrategyConfig(BaseModel):
    """Strategy selection."""

    path: Optional[str] = Field(
        default=None,
        description="Import path of the strategy class ('package.module:ClassName')",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments passed to the strategy constructor",
    )


class SimulationConfig(BaseModel):
    """Root configuration for a simulation run."""

    initial_balance: Decimal = Field(
        default=Decimal("10000"),
        gt=0,
        description="Starting account balance",
    )
    commission: CommissionConfig = Field(default_factory=CommissionConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    strategy: StrategyConfig = Field(default_factory=StrategyConfig)

    # End-of-run handling
    wind_down_mode: WindDownMode = Field(
        default=WindDownMode.CLOSE_ALL,
        description="What to do with positions still open when the feed ends",
    )

    progress_interval: int = Field(
        default=100000,
        gt=0,
        description="Log progress every N ticks",
    )

    @field_validator("initial_balance", mode="before")
    @classmethod
    def parse_initial_balance(cls, v):
        """Convert string/number initial_balance to Decimal."""
        return _parse_decimal(v)


def load_config(config_path: Optional[str] = None) -> SimulationConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, checks:
            1. OPTIONSIM_CONFIG_PATH environment variable
            2. conf/optionsim.yaml
            3. optionsim.yaml

    Returns:
        Validated SimulationConfig

    Raises:
        FileNotFoundError: If no config file found
        ValueError: If config validation fails
    """
    if config_path is None:
        config_path = os.environ.get("OPTIONSIM_CONFIG_PATH")

    if config_path is None:
        # Search default locations
        search_paths = [
            Path("conf/optionsim.yaml"),
            Path("optionsim.yaml"),
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    if config_path is None:
        raise FileNotFoundError(
            "No config file found. Set OPTIONSIM_CONFIG_PATH or create conf/optionsim.yaml"
        )

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return SimulationConfig(**data)
