"""CLI entry point for the options simulator.

Usage:
    python -m optionsim.main --config conf/optionsim.yaml
    python -m optionsim.main --config conf/optionsim.yaml --feed data/aapl_2013.csv
    python -m optionsim.main --config conf/optionsim.yaml --export fills.csv
"""

import argparse
import csv
import logging
import sys
from typing import Optional

from optioncore import ConfigurationError, OptionSimError, to_money

from optionsim.broker import Broker
from optionsim.commission import build_commission_schedule
from optionsim.config import SimulationConfig, load_config
from optionsim.data_feed import DiscountOptionDataFeed
from optionsim.simulation import Simulation
from optionsim.strategies import load_strategy


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    format_str = "%(asctime)s %(name)s %(levelname)s: %(message)s"
    logging.basicConfig(level=level, format=format_str)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Replay end-of-day option data through a strategy",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: conf/optionsim.yaml)",
    )

    parser.add_argument(
        "--feed",
        type=str,
        default=None,
        help="DiscountOptionData CSV file (overrides config)",
    )

    parser.add_argument(
        "--balance",
        type=str,
        default=None,
        help="Starting balance (overrides config)",
    )

    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Export filled orders to CSV file",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def build_simulation(config: SimulationConfig) -> Simulation:
    """Wire broker, feed, commission schedule and strategy from config.

    Raises:
        ConfigurationError: If the feed or strategy is not configured.
    """
    if not config.feed.path:
        raise ConfigurationError("No data feed configured (feed.path or --feed)")
    if not config.strategy.path:
        raise ConfigurationError("No strategy configured (strategy.path)")

    broker = Broker(
        initial_balance=config.initial_balance,
        commission_schedule=build_commission_schedule(config.commission),
        data_feed=DiscountOptionDataFeed(config.feed.path, has_header=config.feed.has_header),
        wind_down_mode=config.wind_down_mode,
        progress_interval=config.progress_interval,
    )
    strategy = load_strategy(config.strategy.path, config.strategy.params)
    return Simulation(strategy=strategy, broker=broker)


def export_fills(broker: Broker, filepath: str) -> int:
    """Export every filled order to CSV. Returns the number of rows written."""
    rows = 0
    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f)

        writer.writerow([
            "order_id", "filled_date", "option_name", "side", "intent", "quantity",
            "limit_price", "fill_price", "commission", "cost_basis", "broker_closed",
        ])

        orders = [o for p in broker.positions() for o in p.orders]
        orders.sort(key=lambda o: o.order_id)

        for order in orders:
            writer.writerow([
                order.order_id,
                order.filled_date.isoformat(),
                order.option_name,
                order.side,
                order.intent,
                order.quantity,
                str(order.limit_price),
                str(order.fill_price),
                str(order.commission),
                str(order.canonical_cost_basis()),
                order.broker_closed,
            ])
            rows += 1

    return rows


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
        if args.feed:
            config.feed.path = args.feed
        if args.balance:
            config = config.model_copy(update={"initial_balance": to_money(args.balance)})
        simulation = build_simulation(config)
    except FileNotFoundError as e:
        logger.error(f"Config error: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Startup failed: {e}")
        return 1

    try:
        result = simulation.run()
    except (OptionSimError, FileNotFoundError) as e:
        logger.exception(f"Simulation aborted: {e}")
        return 2

    print(result.get_summary())

    if args.export:
        count = export_fills(simulation.broker, args.export)
        print(f"Exported {count} filled orders to {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
