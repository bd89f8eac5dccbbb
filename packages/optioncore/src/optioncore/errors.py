"""Error taxonomy for the options simulator.

Recoverable conditions (insufficient margin) are reported through return
values. Everything here is raised for conditions that must abort a run.
"""


class OptionSimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(OptionSimError, ValueError):
    """Invalid setup detected before the run starts."""


class DataInconsistencyError(OptionSimError):
    """Historical data that would silently corrupt P&L if accepted."""


class QuoteError(DataInconsistencyError, ValueError):
    """Quote construction rejected (e.g. bid above ask)."""


class MissingQuoteError(DataInconsistencyError, LookupError):
    """Order references a contract with no resident quote."""


class FeedError(DataInconsistencyError):
    """Malformed record in a data feed."""


class OrderError(OptionSimError, ValueError):
    """Invalid order construction or lifecycle transition."""


class PositionError(OptionSimError, ValueError):
    """Filled order cannot be applied to a position."""


class ForcedCloseError(OptionSimError, RuntimeError):
    """Broker-initiated close failed; accounting invariants are broken."""
