"""Shared fixtures for integration tests."""

import pytest


@pytest.fixture
def feed_csv(tmp_path):
    """Write DiscountOptionData rows (as column lists) to a CSV file."""
    header = (
        "Symbol,ExpirationDate,AskPrice,AskSize,BidPrice,BidSize,LastPrice,PutCall,"
        "StrikePrice,Volume,ImpliedVolatility,Delta,Gamma,Vega,Rho,OpenInterest,"
        "UnderlyingPrice,DataDate"
    )

    def _feed_csv(rows):
        path = tmp_path / "discount_option_data.csv"
        lines = [header] + [",".join(row) for row in rows]
        path.write_text("\n".join(lines) + "\n")
        return path

    return _feed_csv
