"""Analyst consensus aggregation."""

from dataclasses import dataclass
from typing import Any

from stock_research.utils.rounding import round_half_up

# Strong Sell = -2, Sell = -1, Hold = 0, Buy = +1, Strong Buy = +2
CONSENSUS_WEIGHTS = {
    "strong_buy": 2,
    "buy": 1,
    "hold": 0,
    "sell": -1,
    "strong_sell": -2,
}


@dataclass(frozen=True)
class AnalystCounts:
    """Number of analysts per rating bucket for the latest period."""

    strong_buy: int | None = None
    buy: int | None = None
    hold: int | None = None
    sell: int | None = None
    strong_sell: int | None = None

    def as_counts(self) -> dict[str, int]:
        """Bucket counts with missing buckets as 0."""
        return {name: getattr(self, name) or 0 for name in CONSENSUS_WEIGHTS}

    @property
    def total(self) -> int:
        return sum(self.as_counts().values())


@dataclass(frozen=True)
class ConsensusSummary:
    number_of_analysts: int
    consensus_score: float | None
    recommendation_key: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "number_of_analysts": self.number_of_analysts,
            "consensus_score": self.consensus_score,
            "recommendation_key": self.recommendation_key,
        }


def consensus_score(counts: AnalystCounts) -> float | None:
    """
    Weighted average rating from -2 (strong sell) to +2 (strong buy).

    Returns None when there are no analysts.
    """
    total = counts.total
    if total <= 0:
        return None
    values = counts.as_counts()
    weighted = sum(values[name] * weight for name, weight in CONSENSUS_WEIGHTS.items())
    return round_half_up(weighted / total)


def recommendation_key(counts: AnalystCounts) -> str | None:
    """
    Majority recommendation: strong_buy, buy, hold, underperform or sell.

    Buy/sell need a strict majority over both other groups; ties fall back
    to hold.
    """
    if counts.total <= 0:
        return None

    c = counts.as_counts()
    buy_total = c["strong_buy"] + c["buy"]
    sell_total = c["sell"] + c["strong_sell"]
    hold_total = c["hold"]

    if buy_total > sell_total and buy_total > hold_total:
        return "strong_buy" if c["strong_buy"] > c["buy"] else "buy"
    if sell_total > buy_total and sell_total > hold_total:
        return "sell" if c["strong_sell"] > c["sell"] else "underperform"
    return "hold"


def target_upside(current_price: float | None, target_price: float | None) -> float | None:
    """Percent distance from current price to analyst target, None without both."""
    if current_price is None or target_price is None or current_price <= 0:
        return None
    return round_half_up((target_price - current_price) / current_price * 100)


def summarize_consensus(counts: AnalystCounts) -> ConsensusSummary:
    return ConsensusSummary(
        number_of_analysts=counts.total,
        consensus_score=consensus_score(counts),
        recommendation_key=recommendation_key(counts),
    )
