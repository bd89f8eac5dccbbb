"""
Options backtest simulator.

Replays end-of-day option data through optioncore's data model with a
midpoint fill model and automatic expiration handling.
"""

from optionsim.config import (
    CommissionConfig,
    CommissionModel,
    FeedConfig,
    SimulationConfig,
    StrategyConfig,
    WindDownMode,
    load_config,
)
from optionsim.commission import FlatFeeCommission, PerContractCommission, build_commission_schedule
from optionsim.data_feed import DiscountOptionDataFeed, InMemoryDataFeed
from optionsim.broker import Broker, BrokerView
from optionsim.simulation import Simulation, SimulationResult
from optionsim.strategies import LongCallStrategy, load_strategy

__all__ = [
    # Config
    "CommissionConfig",
    "CommissionModel",
    "FeedConfig",
    "SimulationConfig",
    "StrategyConfig",
    "WindDownMode",
    "load_config",
    # Commission
    "FlatFeeCommission",
    "PerContractCommission",
    "build_commission_schedule",
    # Feeds
    "DiscountOptionDataFeed",
    "InMemoryDataFeed",
    # Core
    "Broker",
    "BrokerView",
    "Simulation",
    "SimulationResult",
    "load_strategy",
    "LongCallStrategy",
]
