"""Tests for the simulation driver and results."""

from datetime import date
from decimal import Decimal

import pytest

from optionsim.simulation import Simulation, SimulationResult


@pytest.fixture
def three_days(make_tick):
    return [
        make_tick(data_date=date(2017, 11, 1), bid="1.00", ask="1.20"),
        make_tick(data_date=date(2017, 11, 2), bid="1.40", ask="1.60"),
        make_tick(data_date=date(2017, 11, 3), bid="1.40", ask="1.60"),
    ]


class TestSimulation:
    """Tests for Simulation.run."""

    def test_lifecycle_hooks_called_once(self, make_broker, make_strategy, three_days):
        strategy = make_strategy()
        simulation = Simulation(strategy=strategy, broker=make_broker(three_days))

        assert simulation.result is None
        simulation.run()

        assert strategy.before_calls == 1
        assert strategy.after_calls == 1
        assert len(strategy.calls) == 2
        assert simulation.result is not None

    def test_result_statistics(self, make_broker, make_strategy, buy_call, three_days):
        broker = make_broker(three_days)
        simulation = Simulation(strategy=make_strategy({0: buy_call(1)}), broker=broker)

        result = simulation.run()

        assert result.strategy_name == "RecordingStrategy"
        assert result.starting_balance == Decimal("10000")
        assert result.ending_balance == Decimal("10038.00")
        assert result.balance_change == Decimal("38.00")
        assert result.capital_growth_pct == pytest.approx(0.38)
        assert result.total_commission == Decimal("2")
        assert result.total_orders == 2
        assert result.broker_closed_orders == 1
        assert result.broker_closed_pct == pytest.approx(50.0)
        assert result.average_commission == Decimal("1")
        assert result.commission_pct_of_profit == pytest.approx(2 / 38 * 100)
        assert result.highest_realized_balance == Decimal("10038.00")
        assert result.lowest_realized_balance == Decimal("9889.00")
        assert result.ticks_processed == 3
        assert result.run_time_seconds >= 0
        assert len(result.positions) == 1
        assert not result.positions[0].is_open

    def test_summary_text(self, make_broker, make_strategy, buy_call, three_days):
        simulation = Simulation(strategy=make_strategy({0: buy_call(1)}), broker=make_broker(three_days))

        summary = simulation.run().get_summary()

        assert "Simulation Results (RecordingStrategy)" in summary
        assert "10038.00" in summary
        assert "Closed by broker: 1 (50.00%)" in summary


class TestSimulationResult:
    """Tests for SimulationResult derived values."""

    def test_no_orders(self):
        result = SimulationResult(
            strategy_name="idle",
            starting_balance=Decimal("10000"),
            ending_balance=Decimal("10000"),
        )

        assert result.balance_change == Decimal("0")
        assert result.capital_growth_pct == pytest.approx(0.0)
        assert result.broker_closed_pct == 0.0
        assert result.average_commission == Decimal("0")
        assert result.ticks_per_second == 0.0

    def test_commission_pct_zero_on_loss(self):
        result = SimulationResult(
            strategy_name="loser",
            starting_balance=Decimal("10000"),
            ending_balance=Decimal("9000"),
            total_commission=Decimal("10"),
            total_orders=4,
        )

        assert result.commission_pct_of_profit == 0.0
        assert result.average_commission == Decimal("2.5")
        assert result.capital_growth_pct == pytest.approx(-10.0)

    def test_ticks_per_second(self):
        result = SimulationResult(
            strategy_name="fast",
            starting_balance=Decimal("1"),
            ending_balance=Decimal("1"),
            ticks_processed=1000,
            run_time_seconds=0.5,
        )
        assert result.ticks_per_second == pytest.approx(2000.0)


class TestPlainStrategyObject:
    """Strategies need only run_logic; name and hooks are optional."""

    def test_runs_without_name_or_hooks(self, make_broker, only_run_logic, three_days):
        broker = make_broker(three_days)
        simulation = Simulation(strategy=only_run_logic(quantity=2), broker=broker)

        result = simulation.run()

        assert result.strategy_name == "OnlyRunLogic"
        assert result.total_orders == 2
        assert result.ending_balance == Decimal("10078.00")
        assert "Simulation Results (OnlyRunLogic)" in result.get_summary()
