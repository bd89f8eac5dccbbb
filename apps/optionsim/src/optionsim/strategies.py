"""Strategy loading by import path, plus a reference strategy."""

import importlib
import logging
from typing import Any, Optional

from optioncore import AccountView, BaseStrategy, ConfigurationError, Order, Strategy


logger = logging.getLogger(__name__)


def load_strategy(path: str, params: Optional[dict[str, Any]] = None) -> Strategy:
    """Import and instantiate a strategy class.

    Args:
        path: 'package.module:ClassName'
        params: Keyword arguments for the constructor.

    Returns:
        Strategy instance.

    Raises:
        ConfigurationError: If the path is malformed, cannot be imported, or
            does not name a strategy.
    """
    module_name, sep, class_name = path.partition(":")
    if not sep or not module_name or not class_name:
        raise ConfigurationError(
            f"Strategy path must look like 'package.module:ClassName', got {path!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import strategy module {module_name!r}: {e}") from e

    strategy_cls = getattr(module, class_name, None)
    if strategy_cls is None:
        raise ConfigurationError(f"Module {module_name!r} has no attribute {class_name!r}")

    try:
        strategy = strategy_cls(**(params or {}))
    except TypeError as e:
        raise ConfigurationError(f"Cannot construct {path} with {params}: {e}") from e

    if not callable(getattr(strategy, "run_logic", None)):
        raise ConfigurationError(f"{path} does not define run_logic()")

    logger.info(f"Loaded strategy {path}")
    return strategy


class LongCallStrategy(BaseStrategy):
    """Buy the at-the-money call once and hold it.

    The position is left to the broker: it is closed by the expiration sweep
    or by wind down at the end of data.
    """

    def __init__(self, symbol: str, quantity: int = 1, min_days_to_expiration: int = 1):
        if quantity <= 0:
            raise ConfigurationError(f"quantity must be > 0 (got {quantity})")
        self.symbol = symbol
        self.quantity = quantity
        self.min_days_to_expiration = min_days_to_expiration
        self._entered = False

    @property
    def name(self) -> str:
        return f"LongCall({self.symbol})"

    def run_logic(self, view: AccountView) -> list[Order]:
        if self._entered:
            return []

        underlying = view.underlying_price_for(self.symbol)
        calls = [
            q for q in view.call_quotes_for(self.symbol)
            if q.days_to_expiration(view.current_date) >= self.min_days_to_expiration
        ]
        if underlying is None or not calls:
            return []

        quote = min(
            calls,
            key=lambda q: (abs(q.strike_price - underlying), q.expiration_date, q.name),
        )
        self._entered = True
        logger.info(f"{self.name}: buying {self.quantity} {quote.name} at {quote.midpoint_price}")
        return [Order.buy_to_open(quote, self.quantity)]
