"""Historical data feeds for the options simulator.

Provides end-of-day option ticks either from a DiscountOptionData CSV file or
from an in-memory list (for tests and embedders).
"""

import csv
import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Union

from optioncore import FeedError, OptionRight, Tick, to_money


logger = logging.getLogger(__name__)

# Symbol,ExpirationDate,AskPrice,AskSize,BidPrice,BidSize,LastPrice,PutCall,StrikePrice,Volume,
# ImpliedVolatility,Delta,Gamma,Vega,Rho,OpenInterest,UnderlyingPrice,DataDate
DISCOUNT_OPTION_DATA_COLUMNS = 18

_COL_SYMBOL = 0
_COL_EXPIRATION = 1
_COL_ASK = 2
_COL_BID = 4
_COL_LAST = 6
_COL_RIGHT = 7
_COL_STRIKE = 8
_COL_VOLUME = 9
_COL_IV = 10
_COL_DELTA = 11
_COL_GAMMA = 12
_COL_VEGA = 13
_COL_RHO = 14
_COL_OPEN_INTEREST = 15
_COL_UNDERLYING = 16
_COL_DATA_DATE = 17


class DiscountOptionDataFeed:
    """Lazy reader for DiscountOptionData end-of-day CSV exports.

    Rows are parsed one at a time as the broker pulls them, so arbitrarily
    large files stream in constant memory. Rows must already be sorted by
    DataDate.
    """

    def __init__(self, path: Union[str, Path], has_header: bool = True):
        """Initialize feed.

        Args:
            path: CSV file path.
            has_header: Skip the first line.
        """
        self._path = Path(path)
        self._has_header = has_header

    def __iter__(self) -> Iterator[Tick]:
        """Iterate over rows as Ticks.

        Raises:
            FileNotFoundError: If the file does not exist.
            FeedError: On a malformed row (includes file and line number).
        """
        logger.info(f"Reading ticks from {self._path}")

        with open(self._path, newline="") as f:
            reader = csv.reader(f)
            if self._has_header:
                next(reader, None)

            for row in reader:
                if not row:
                    continue
                yield self._parse_row(row, reader.line_num)

    def _parse_row(self, row: list[str], line_num: int) -> Tick:
        where = f"{self._path}:{line_num}"

        if len(row) != DISCOUNT_OPTION_DATA_COLUMNS:
            raise FeedError(
                f"{where}: expected {DISCOUNT_OPTION_DATA_COLUMNS} columns, got {len(row)}"
            )

        right = row[_COL_RIGHT].strip().lower()
        if right not in (OptionRight.CALL, OptionRight.PUT):
            raise FeedError(f"{where}: expected 'call' or 'put', got {row[_COL_RIGHT]!r}")

        try:
            return Tick(
                symbol=row[_COL_SYMBOL].strip(),
                expiration_date=_parse_date(row[_COL_EXPIRATION]),
                right=OptionRight(right),
                strike_price=_parse_money(row[_COL_STRIKE]),
                bid=_parse_money(row[_COL_BID]),
                ask=_parse_money(row[_COL_ASK]),
                last_price=_parse_money(row[_COL_LAST]),
                underlying_price=_parse_money(row[_COL_UNDERLYING]),
                data_date=_parse_date(row[_COL_DATA_DATE]),
                volume=_parse_int(row[_COL_VOLUME]),
                open_interest=_parse_int(row[_COL_OPEN_INTEREST]),
                implied_volatility=_parse_float(row[_COL_IV]),
                delta=_parse_float(row[_COL_DELTA]),
                gamma=_parse_float(row[_COL_GAMMA]),
                vega=_parse_float(row[_COL_VEGA]),
                rho=_parse_float(row[_COL_RHO]) if row[_COL_RHO].strip() else None,
            )
        except ValueError as e:
            raise FeedError(f"{where}: {e}") from e


class InMemoryDataFeed:
    """In-memory data feed for testing.

    Accepts pre-created Ticks for testing without files.
    """

    def __init__(self, ticks: list[Tick]):
        """Initialize with list of ticks.

        Args:
            ticks: Pre-created Ticks (should be in chronological order).
        """
        self._ticks = ticks

    def __iter__(self) -> Iterator[Tick]:
        """Iterate over ticks."""
        yield from self._ticks


def _parse_date(s: str) -> date:
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def _parse_money(s: str) -> Decimal:
    if not s.strip():
        return Decimal("0")
    return to_money(s)


def _parse_int(s: str) -> int:
    s = s.strip()
    return int(s) if s else 0


def _parse_float(s: str) -> float:
    s = s.strip()
    return float(s) if s else 0.0
