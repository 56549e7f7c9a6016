"""Tests for the analyst consensus tool."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import numpy as np
import pandas as pd

from stock_research.data.yfinance_client import YFinanceRetryError
from stock_research.tools.consensus import analyst_consensus, latest_analyst_counts

FETCH_TICKER = "stock_research.tools.consensus.fetch_ticker"
FETCH_INFO = "stock_research.tools.consensus.fetch_info"


def _recommendations(*rows: tuple) -> pd.DataFrame:
    return pd.DataFrame(
        list(rows),
        columns=["period", "strongBuy", "buy", "hold", "sell", "strongSell"],
    )


def _ticker(recommendations) -> MagicMock:
    ticker = MagicMock()
    ticker.recommendations = recommendations
    return ticker


def _run(ticker: MagicMock, info: dict | Exception) -> dict:
    info_mock = (
        AsyncMock(side_effect=info) if isinstance(info, Exception) else AsyncMock(return_value=info)
    )
    with patch(FETCH_TICKER, new=AsyncMock(return_value=ticker)), patch(FETCH_INFO, new=info_mock):
        return asyncio.run(analyst_consensus("AAPL"))


class TestAnalystConsensusTool:
    """Tests for analyst_consensus."""

    def test_current_month_consensus(self, sample_info: dict) -> None:
        """The current month's ratings drive the consensus."""
        recs = _recommendations(("0m", 10, 5, 3, 1, 1), ("-1m", 0, 0, 10, 0, 0))
        result = _run(_ticker(recs), sample_info)

        assert result["symbol"] == "AAPL"
        assert result["counts"] == {
            "strong_buy": 10,
            "buy": 5,
            "hold": 3,
            "sell": 1,
            "strong_sell": 1,
        }
        assert result["number_of_analysts"] == 20
        assert result["consensus_score"] == 1.1
        assert result["recommendation_key"] == "strong_buy"
        assert result["data_provenance"]["recommendations"]["period"] == "0m"
        assert result["meta"]["tool"] == "analyst_consensus"
        assert result["warnings"] is None

    def test_price_target(self, sample_info: dict) -> None:
        """Price target and upside come from info."""
        result = _run(_ticker(_recommendations(("0m", 1, 1, 1, 0, 0))), sample_info)

        assert result["price_target"] == {
            "current_price": 200.0,
            "target_mean": 230.0,
            "upside_pct": 15.0,
        }

    def test_no_recommendations(self, sample_info: dict) -> None:
        """An empty frame is a warning, not an error."""
        result = _run(_ticker(pd.DataFrame()), sample_info)

        assert result["warnings"] == ["no_analyst_recommendations"]
        assert result["number_of_analysts"] == 0
        assert result["consensus_score"] is None
        assert result["recommendation_key"] is None

    def test_recommendations_none(self, sample_info: dict) -> None:
        """yfinance returning None is handled like an empty frame."""
        result = _run(_ticker(None), sample_info)
        assert result["warnings"] == ["no_analyst_recommendations"]

    def test_price_target_unavailable(self) -> None:
        """A failed info lookup keeps the consensus and warns."""
        recs = _recommendations(("0m", 10, 5, 3, 1, 1))
        result = _run(_ticker(recs), YFinanceRetryError("Failed after 4 attempts"))

        assert result["consensus_score"] == 1.1
        assert result["warnings"] == ["price_target_unavailable"]
        assert result["price_target"]["upside_pct"] is None

    def test_recommendations_raise(self) -> None:
        """A failing recommendations lookup is a data error."""
        ticker = MagicMock()
        type(ticker).recommendations = PropertyMock(side_effect=RuntimeError("HTTP 404"))

        with patch(FETCH_TICKER, new=AsyncMock(return_value=ticker)):
            result = asyncio.run(analyst_consensus("AAPL"))

        assert result["error_type"] == "data_unavailable"
        assert "HTTP 404" in result["message"]

    def test_invalid_symbol(self) -> None:
        """Malformed symbols are rejected."""
        result = asyncio.run(analyst_consensus("A B C"))
        assert result["error_type"] == "invalid_symbol"


class TestLatestAnalystCounts:
    """Tests for latest_analyst_counts."""

    def test_prefers_current_month(self) -> None:
        """The 0m row wins even when it is not first."""
        recs = _recommendations(("-1m", 0, 0, 9, 0, 0), ("0m", 4, 2, 1, 0, 0))
        counts, period = latest_analyst_counts(recs)

        assert period == "0m"
        assert counts.strong_buy == 4
        assert counts.hold == 1

    def test_first_row_without_current_month(self) -> None:
        """Without a 0m row the first row is used."""
        recs = _recommendations(("-1m", 3, 2, 1, 0, 0), ("-2m", 0, 0, 9, 0, 0))
        counts, period = latest_analyst_counts(recs)

        assert period == "-1m"
        assert counts.strong_buy == 3

    def test_no_period_column(self) -> None:
        """Frames without a period column still parse."""
        recs = pd.DataFrame([{"strongBuy": 1, "buy": 2, "hold": 3, "sell": 4, "strongSell": 5}])
        counts, period = latest_analyst_counts(recs)

        assert period is None
        assert counts.total == 15

    def test_missing_values(self) -> None:
        """NaN and missing columns are None buckets."""
        recs = pd.DataFrame([{"period": "0m", "strongBuy": np.nan, "buy": 2, "hold": 1}])
        counts, _ = latest_analyst_counts(recs)

        assert counts.strong_buy is None
        assert counts.sell is None
        assert counts.buy == 2
        assert counts.total == 3

    def test_not_a_frame(self) -> None:
        """Anything other than a non-empty DataFrame yields nothing."""
        assert latest_analyst_counts(None) == (None, None)
        assert latest_analyst_counts(pd.DataFrame()) == (None, None)
        assert latest_analyst_counts({"0m": {}}) == (None, None)  # type: ignore[arg-type]
