"""Signal badge catalogue.

Signal types are produced upstream and only passed through the verdict
engine for display. Action signals say what to do; quality signals describe
the stock.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class SignalType(str, Enum):
    # Action
    DIP_OPPORTUNITY = "DIP_OPPORTUNITY"
    BREAKOUT = "BREAKOUT"
    REVERSAL = "REVERSAL"
    MOMENTUM = "MOMENTUM"
    ACCUMULATE = "ACCUMULATE"
    GOOD_ENTRY = "GOOD_ENTRY"
    WAIT_FOR_DIP = "WAIT_FOR_DIP"
    NEAR_TARGET = "NEAR_TARGET"
    TAKE_PROFIT = "TAKE_PROFIT"
    TRIM = "TRIM"
    WATCH = "WATCH"
    HOLD = "HOLD"
    # Quality
    CONVICTION = "CONVICTION"
    QUALITY_CORE = "QUALITY_CORE"
    UNDERVALUED = "UNDERVALUED"
    STRONG_TREND = "STRONG_TREND"
    STEADY = "STEADY"
    FUNDAMENTALLY_WEAK = "FUNDAMENTALLY_WEAK"
    TECHNICALLY_WEAK = "TECHNICALLY_WEAK"
    PROBLEMATIC = "PROBLEMATIC"
    WEAK = "WEAK"
    OVERBOUGHT = "OVERBOUGHT"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class SignalConfig:
    label: str
    css_class: str
    description: str
    category: str  # "action" or "quality"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _action(label: str, css_class: str, description: str) -> SignalConfig:
    return SignalConfig(label, css_class, description, "action")


def _quality(label: str, css_class: str, description: str) -> SignalConfig:
    return SignalConfig(label, css_class, description, "quality")


SIGNAL_CONFIG: dict[SignalType, SignalConfig] = {
    SignalType.DIP_OPPORTUNITY: _action(
        "Buy the dip", "dip", "Oversold with solid fundamentals, potential buying opportunity"
    ),
    SignalType.BREAKOUT: _action(
        "Buy the breakout", "breakout", "Price broke above the Bollinger Band on high volume"
    ),
    SignalType.REVERSAL: _action(
        "Catch the reversal", "reversal", "MACD divergence suggests a potential trend reversal"
    ),
    SignalType.MOMENTUM: _action(
        "Ride the trend", "momentum", "Technical indicators show bullish momentum"
    ),
    SignalType.ACCUMULATE: _action(
        "Accumulate", "accumulate", "Quality stock, keep buying gradually (DCA)"
    ),
    SignalType.GOOD_ENTRY: _action(
        "Enter", "good-entry", "Quality stock below the analyst target price, suitable to buy"
    ),
    SignalType.WAIT_FOR_DIP: _action(
        "Wait for a dip", "wait", "Quality stock but the price is too high, wait for a pullback"
    ),
    SignalType.NEAR_TARGET: _action(
        "Prepare exit", "target", "Approaching the target price, prepare an exit strategy"
    ),
    SignalType.TAKE_PROFIT: _action(
        "Take profit", "take-profit", "High gain (+50%), consider realizing part of it"
    ),
    SignalType.TRIM: _action(
        "Trim", "trim", "Overbought with a large position weight, reduce the position"
    ),
    SignalType.WATCH: _action(
        "Watch", "watch", "Some metrics are deteriorating, pay attention"
    ),
    SignalType.HOLD: _action("Hold", "hold", "Quality stock, keep holding"),
    SignalType.CONVICTION: _quality(
        "Top quality", "conviction", "Strong long-term fundamentals, hold through volatility"
    ),
    SignalType.QUALITY_CORE: _quality(
        "Quality", "quality", "High fundamentals and positive analyst sentiment"
    ),
    SignalType.UNDERVALUED: _quality(
        "Undervalued", "undervalued", "30%+ upside to the analyst target price"
    ),
    SignalType.STRONG_TREND: _quality(
        "Strong trend", "strong-trend", "Strong trend confirmed by a high ADX"
    ),
    SignalType.STEADY: _quality("Steady", "steady", "Solid stock without notable problems"),
    SignalType.FUNDAMENTALLY_WEAK: _quality(
        "Weak fundamentals", "fundamentally-weak", "Weak fundamentals, technically fine"
    ),
    SignalType.TECHNICALLY_WEAK: _quality(
        "Weak technicals", "technically-weak", "Good fundamentals but poor timing"
    ),
    SignalType.PROBLEMATIC: _quality(
        "Problematic", "problematic", "Weak fundamentals and technicals"
    ),
    SignalType.WEAK: _quality("Weak", "weak", "Weak fundamentals or trend"),
    SignalType.OVERBOUGHT: _quality(
        "Overbought", "overbought", "RSI and Stochastic show an overbought zone"
    ),
    SignalType.NEUTRAL: _quality("Neutral", "neutral", "No strong signals"),
}


def get_signal_config(signal_type: SignalType | str | None) -> SignalConfig:
    """Badge config for a signal type. Unknown types get the NEUTRAL config."""
    try:
        return SIGNAL_CONFIG[SignalType(signal_type)]
    except ValueError:
        return SIGNAL_CONFIG[SignalType.NEUTRAL]
