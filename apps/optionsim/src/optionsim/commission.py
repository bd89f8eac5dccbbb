"""Commission schedules.

Each schedule is a pure function of the order: no state, no side effects.
"""

from decimal import Decimal
from typing import Optional

from optioncore import CommissionSchedule, ConfigurationError, Order

from optionsim.config import CommissionConfig, CommissionModel


class FlatFeeCommission:
    """Same fee for every order regardless of size."""

    def __init__(self, fee: Decimal):
        if fee < 0:
            raise ConfigurationError(f"Commission fee must be >= 0, got {fee}")
        self.fee = fee

    def commission_for(self, order: Order) -> Decimal:
        return self.fee


class PerContractCommission:
    """Fee proportional to contract count, clamped to [minimum, maximum].

    Mirrors typical retail option pricing, e.g. $0.65/contract with a $1.00
    minimum per order.
    """

    def __init__(
        self,
        rate: Decimal,
        minimum: Decimal = Decimal("0"),
        maximum: Optional[Decimal] = None,
    ):
        if rate < 0 or minimum < 0:
            raise ConfigurationError(
                f"Commission rate and minimum must be >= 0, got rate={rate}, minimum={minimum}"
            )
        if maximum is not None and maximum < minimum:
            raise ConfigurationError(f"Commission maximum {maximum} is below minimum {minimum}")

        self.rate = rate
        self.minimum = minimum
        self.maximum = maximum

    def commission_for(self, order: Order) -> Decimal:
        fee = max(self.rate * order.quantity, self.minimum)
        if self.maximum is not None:
            fee = min(fee, self.maximum)
        return fee


def build_commission_schedule(config: CommissionConfig) -> CommissionSchedule:
    """Create the schedule selected in config."""
    if config.model == CommissionModel.FLAT:
        return FlatFeeCommission(config.fee)
    return PerContractCommission(
        rate=config.rate,
        minimum=config.minimum,
        maximum=config.maximum,
    )
