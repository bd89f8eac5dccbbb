"""
optioncore - Option contract data model with zero I/O dependencies.

Ticks, quotes, orders, positions and the pricing math the broker uses to
account for them, plus the protocols its collaborators (data feed,
commission schedule, strategy) implement.
"""

from optioncore.errors import (
    OptionSimError,
    ConfigurationError,
    DataInconsistencyError,
    QuoteError,
    MissingQuoteError,
    FeedError,
    OrderError,
    PositionError,
    ForcedCloseError,
)
from optioncore.pricing import (
    CONTRACT_MULTIPLIER,
    calc_intrinsic_value,
    calc_midpoint,
    calc_notional,
    format_option_name,
    to_money,
)
from optioncore.tick import Tick, OptionRight
from optioncore.quote import Quote
from optioncore.order import Order, OrderIntent, SideType
from optioncore.position import Position, PositionSnapshot, DirectionType
from optioncore.interfaces import (
    AccountView,
    BaseStrategy,
    CommissionSchedule,
    DataFeed,
    Strategy,
    strategy_name,
)

__version__ = "0.1.0"

__all__ = [
    "OptionSimError",
    "ConfigurationError",
    "DataInconsistencyError",
    "QuoteError",
    "MissingQuoteError",
    "FeedError",
    "OrderError",
    "PositionError",
    "ForcedCloseError",
    "CONTRACT_MULTIPLIER",
    "calc_intrinsic_value",
    "calc_midpoint",
    "calc_notional",
    "format_option_name",
    "to_money",
    "Tick",
    "OptionRight",
    "Quote",
    "Order",
    "OrderIntent",
    "SideType",
    "Position",
    "PositionSnapshot",
    "DirectionType",
    "AccountView",
    "BaseStrategy",
    "CommissionSchedule",
    "DataFeed",
    "Strategy",
    "strategy_name",
]
