"""Tests for the risk assessment tool."""

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pandas as pd

from stock_research.data.yfinance_client import YFinanceRetryError
from stock_research.scoring.risk import NEUTRAL_FACTOR, RiskLevel, RiskResult
from stock_research.tools.risk import (
    _validate_risk_invariants,
    risk_assessment,
    risk_inputs_from_info,
)

FETCH_INFO = "stock_research.tools.risk.fetch_info_with_provenance"
FETCH_HISTORY = "stock_research.tools.risk.fetch_history"

INFO_PROVENANCE = {"source": "yfinance", "attempts": 1, "cache_hit": False}


def _run(info: dict, history: pd.DataFrame | Exception) -> dict:
    history_mock = (
        AsyncMock(side_effect=history)
        if isinstance(history, Exception)
        else AsyncMock(return_value=history)
    )
    with patch(FETCH_INFO, new=AsyncMock(return_value=(info, INFO_PROVENANCE))), patch(
        FETCH_HISTORY, new=history_mock
    ):
        return asyncio.run(risk_assessment("AAPL"))


class TestRiskAssessmentTool:
    """Tests for risk_assessment."""

    def test_average_profile(self, sample_info: dict, constant_range_history: pd.DataFrame) -> None:
        """A market-beta, profitable, liquid stock is an average profile."""
        result = _run(sample_info, constant_range_history)

        assert result["symbol"] == "AAPL"
        assert result["risk_level"] == "moderate"
        assert result["risk_level_label"] == "Moderate"
        assert result["badge_variant"] == "hold"
        assert result["risk_factors"] == [NEUTRAL_FACTOR]
        assert result["beta"] == 1.0
        assert result["warnings"] is None
        assert result["meta"]["tool"] == "risk_assessment"

    def test_inputs_converted_to_engine_units(
        self, sample_info: dict, constant_range_history: pd.DataFrame
    ) -> None:
        """Debt-to-equity becomes a ratio and margin a percent."""
        result = _run(sample_info, constant_range_history)

        assert result["inputs"] == {
            "beta": 1.0,
            "debt_to_equity": 1.5,
            "net_margin_pct": 25.0,
            "current_ratio": 1.1,
            "volatility_pct": 2.0,
        }

    def test_high_risk_stock(self, constant_range_history: pd.DataFrame) -> None:
        """High beta, heavy debt, losses and poor liquidity."""
        info = {
            "quoteType": "EQUITY",
            "beta": 1.8,
            "debtToEquity": 250.0,
            "profitMargins": -0.05,
            "currentRatio": 0.8,
        }
        result = _run(info, constant_range_history)

        assert result["risk_level"] == "high"
        assert result["risk_factors"] == [
            "high beta, volatility well above market",
            "high leverage",
            "negative margin (loss-making)",
            "low liquidity (current ratio < 1)",
        ]
        assert result["rules"]["high_beta"]["triggered"] is True
        assert result["rules"]["high_daily_volatility"]["triggered"] is False

    def test_provenance(self, sample_info: dict, constant_range_history: pd.DataFrame) -> None:
        """Both sources are reported, with the last bar date and ATR period."""
        result = _run(sample_info, constant_range_history)

        fundamentals = result["data_provenance"]["fundamentals"]
        price = result["data_provenance"]["price"]
        assert fundamentals["source"] == "yfinance"
        assert fundamentals["cache_hit"] is False
        assert price["last_bar_date"] == "2024-01-30"
        assert price["atr_period"] == 14

    def test_history_failure_drops_volatility(self, sample_info: dict) -> None:
        """Without history the assessment still runs, minus volatility."""
        result = _run(sample_info, YFinanceRetryError("Failed after 4 attempts"))

        assert "error" not in result
        assert result["warnings"] == ["volatility_unavailable"]
        assert result["inputs"]["volatility_pct"] is None
        assert result["rules"]["high_daily_volatility"]["triggered"] is None

    def test_short_history(self, sample_info: dict, constant_range_history: pd.DataFrame) -> None:
        """Too few bars for ATR(14) is a warning."""
        result = _run(sample_info, constant_range_history.head(10))

        assert result["warnings"] == ["insufficient_history_for_atr"]
        assert result["inputs"]["volatility_pct"] is None

    def test_volatile_stock(self, sample_info: dict, constant_range_history: pd.DataFrame) -> None:
        """ATR above 4% of price adds the volatility factor."""
        history = constant_range_history.copy()
        history["high"] = 103.0
        history["low"] = 97.0
        result = _run(sample_info, history)

        assert result["inputs"]["volatility_pct"] == 6.0
        assert result["risk_factors"] == ["high daily volatility"]

    def test_info_failure_is_an_error(self) -> None:
        """Fundamentals are required."""
        fetch = AsyncMock(side_effect=YFinanceRetryError("Failed after 4 attempts"))
        with patch(FETCH_INFO, new=fetch):
            result = asyncio.run(risk_assessment("AAPL"))

        assert result["error"] is True
        assert result["error_type"] == "data_unavailable"

    def test_invalid_symbol(self) -> None:
        """Malformed symbols are rejected."""
        result = asyncio.run(risk_assessment("$$$"))
        assert result["error_type"] == "invalid_symbol"


class TestRiskInputsFromInfo:
    """Tests for risk_inputs_from_info."""

    def test_unit_conversion(self) -> None:
        """yfinance percent/fraction fields are converted."""
        inputs = risk_inputs_from_info({"debtToEquity": 45.3, "profitMargins": 0.1234})

        assert inputs.debt_to_equity == 0.453
        assert inputs.net_margin == 12.34

    def test_missing_and_nan(self) -> None:
        """Missing, NaN and non-numeric fields become None."""
        inputs = risk_inputs_from_info(
            {"beta": float("nan"), "currentRatio": "n/a", "debtToEquity": None}
        )

        assert inputs.beta is None
        assert inputs.current_ratio is None
        assert inputs.debt_to_equity is None
        assert inputs.net_margin is None

    def test_volatility_passthrough(self) -> None:
        """Volatility is passed through unchanged."""
        assert risk_inputs_from_info({}, 3.5).volatility_percent == 3.5


class TestValidateRiskInvariants:
    """Tests for _validate_risk_invariants."""

    def test_valid_result_no_warnings(self, caplog) -> None:
        """A well-formed result logs nothing."""
        result = RiskResult(RiskLevel.HIGH, ("high beta, volatility well above market",))

        with caplog.at_level(logging.WARNING):
            _validate_risk_invariants(result)

        assert "invariant violation" not in caplog.text.lower()

    def test_empty_factors(self, caplog) -> None:
        """An empty factor list is flagged."""
        with caplog.at_level(logging.WARNING):
            _validate_risk_invariants(RiskResult(RiskLevel.MODERATE, ()))

        assert "risk_factors is empty" in caplog.text

    def test_neutral_factor_mixed_in(self, caplog) -> None:
        """The neutral factor next to real factors is flagged."""
        result = RiskResult(RiskLevel.MODERATE_HIGH, (NEUTRAL_FACTOR, "high leverage"))

        with caplog.at_level(logging.WARNING):
            _validate_risk_invariants(result)

        assert f"'{NEUTRAL_FACTOR}' present alongside 1 other factors" in caplog.text

    def test_duplicate_factors(self, caplog) -> None:
        """Duplicated factors are flagged."""
        result = RiskResult(RiskLevel.MODERATE, ("low leverage", "low leverage"))

        with caplog.at_level(logging.WARNING):
            _validate_risk_invariants(result)

        assert "duplicate risk factors" in caplog.text
