"""Research verdict engine.

Turns the upstream sub-scores of one ticker into a categorical entry verdict
(good entry / wait / pass) with a confidence tier and ordered reasons.

The rules form a decision tree, not a weighted sum: they are evaluated in
order and the first match wins. Reason order is observable because consumers
only display the first few reasons.
"""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from stock_research.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

# Consumers show this many reasons
DISPLAY_REASON_LIMIT = 4

# Thresholds on the 0-100 score scale
GOOD_FUNDAMENTALS_MIN = 55
GOOD_TECHNICAL_MIN = 50
GOOD_ANALYST_MIN = 50
UPSIDE_MIN_PCT = 10
HIGH_CONVICTION_MIN = 60
OVERSOLD_DIP_MIN = 40

GOOD_ENTRY_COMPOSITE_MIN = 60
HIGH_CONFIDENCE_COMPOSITE_MIN = 70
WAIT_COMPOSITE_MIN = 50
WAIT_MEDIUM_COMPOSITE_MIN = 55
PASS_HIGH_CONFIDENCE_COMPOSITE_MAX = 40


class TechnicalBias(str, Enum):
    """Direction of the upstream technical analysis."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def coerce(cls, value: "TechnicalBias | str | None") -> "TechnicalBias":
        """Parse a bias from user input. Unknown values are NEUTRAL."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NEUTRAL
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.NEUTRAL


class Verdict(str, Enum):
    GOOD_ENTRY = "good-entry"
    WAIT = "wait"
    PASS = "pass"
    INSUFFICIENT_DATA = "insufficient-data"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# (title, description) per verdict
VERDICT_COPY: dict[Verdict, tuple[str, str]] = {
    Verdict.GOOD_ENTRY: ("Good entry", "Quality stock at a favorable price to buy."),
    Verdict.WAIT: ("Wait", "Interesting stock, but wait for a better entry."),
    Verdict.PASS: ("Pass", "This stock does not meet the buy criteria."),
    Verdict.INSUFFICIENT_DATA: (
        "Insufficient data",
        "Not enough data to evaluate this stock.",
    ),
}


@dataclass(frozen=True)
class StockRecommendation:
    """
    Already-computed scores and market facts for one ticker.

    Scores are on a 0-100 scale and trusted as-is. A missing score is
    treated as 0 wherever it is read.
    """

    current_price: float | None = None
    composite_score: float | None = None
    fundamental_score: float | None = None
    technical_score: float | None = None
    analyst_score: float | None = None
    conviction_score: float | None = None
    dip_score: float | None = None
    technical_bias: TechnicalBias = TechnicalBias.NEUTRAL
    target_upside: float | None = None
    primary_signal: dict[str, Any] | None = None
    symbol: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "technical_bias", TechnicalBias.coerce(self.technical_bias))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["technical_bias"] = self.technical_bias.value
        return data


@dataclass(frozen=True)
class VerdictResult:
    """Verdict for one evaluation. Not persisted."""

    verdict: Verdict
    confidence: Confidence
    title: str
    description: str
    reasons: tuple[str, ...]

    def top_reasons(self, limit: int = DISPLAY_REASON_LIMIT) -> list[str]:
        """Reasons as displayed: the first `limit` in evaluation order."""
        return list(self.reasons[:limit])

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "confidence": self.confidence.value,
            "title": self.title,
            "description": self.description,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class VerdictFactors:
    """Booleans derived once per evaluation and shared by every rule."""

    good_fundamentals: bool
    good_technical: bool
    good_analyst: bool
    has_upside: bool
    high_conviction: bool
    is_oversold: bool


RulePredicate = Callable[[StockRecommendation, VerdictFactors], bool]
RuleBuilder = Callable[[StockRecommendation, VerdictFactors], tuple[Confidence, list[str]]]


@dataclass(frozen=True)
class VerdictRule:
    """A verdict branch: when `matches` holds, `build` yields confidence and reasons."""

    verdict: Verdict
    matches: RulePredicate
    build: RuleBuilder


def _or_zero(value: float | None) -> float:
    return 0.0 if value is None else value


def derive_factors(rec: StockRecommendation) -> VerdictFactors:
    """Compute the shared rule inputs for a recommendation."""
    return VerdictFactors(
        good_fundamentals=_or_zero(rec.fundamental_score) >= GOOD_FUNDAMENTALS_MIN,
        good_technical=(
            rec.technical_bias is TechnicalBias.BULLISH
            or _or_zero(rec.technical_score) >= GOOD_TECHNICAL_MIN
        ),
        good_analyst=_or_zero(rec.analyst_score) >= GOOD_ANALYST_MIN,
        has_upside=_or_zero(rec.target_upside) > UPSIDE_MIN_PCT,
        high_conviction=_or_zero(rec.conviction_score) >= HIGH_CONVICTION_MIN,
        is_oversold=_or_zero(rec.dip_score) >= OVERSOLD_DIP_MIN,
    )


# --- good entry -------------------------------------------------------------


def _is_good_entry(rec: StockRecommendation, f: VerdictFactors) -> bool:
    return (
        _or_zero(rec.composite_score) >= GOOD_ENTRY_COMPOSITE_MIN
        and (f.has_upside or f.is_oversold)
        and f.good_technical
    )


def _build_good_entry(rec: StockRecommendation, f: VerdictFactors) -> tuple[Confidence, list[str]]:
    reasons: list[str] = []
    if f.good_fundamentals:
        reasons.append("strong fundamentals")
    if f.good_technical:
        reasons.append("favorable technical setup")
    if f.has_upside:
        upside = round_half_up(_or_zero(rec.target_upside), 0)
        reasons.append(f"upside to analyst target {upside:.0f}%")
    if f.is_oversold:
        reasons.append("oversold zone")
    if f.high_conviction:
        reasons.append("high long-term quality")

    composite = _or_zero(rec.composite_score)
    if composite >= HIGH_CONFIDENCE_COMPOSITE_MIN and f.high_conviction:
        confidence = Confidence.HIGH
    elif composite >= GOOD_ENTRY_COMPOSITE_MIN:
        confidence = Confidence.MEDIUM
    else:
        # Unreachable while the entry gate and this threshold are equal
        confidence = Confidence.LOW
    return confidence, reasons


# --- wait -------------------------------------------------------------------


def _is_wait(rec: StockRecommendation, f: VerdictFactors) -> bool:
    return _or_zero(rec.composite_score) >= WAIT_COMPOSITE_MIN and f.good_fundamentals


def _build_wait(rec: StockRecommendation, f: VerdictFactors) -> tuple[Confidence, list[str]]:
    reasons: list[str] = []
    if rec.technical_bias is TechnicalBias.BEARISH:
        reasons.append("bearish technical trend")
    if _or_zero(rec.technical_score) < 40:
        reasons.append("weak technical indicators")
    if _or_zero(rec.target_upside) < 5:
        reasons.append("low upside to target")
    if not f.is_oversold and rec.technical_bias is not TechnicalBias.BULLISH:
        reasons.append("wait for a better entry point")

    if _or_zero(rec.composite_score) >= WAIT_MEDIUM_COMPOSITE_MIN:
        return Confidence.MEDIUM, reasons
    return Confidence.LOW, reasons


# --- pass -------------------------------------------------------------------


def _always(rec: StockRecommendation, f: VerdictFactors) -> bool:
    return True


def _build_pass(rec: StockRecommendation, f: VerdictFactors) -> tuple[Confidence, list[str]]:
    reasons: list[str] = []
    if not f.good_fundamentals:
        reasons.append("weak fundamentals")
    if not f.good_analyst:
        reasons.append("negative analyst consensus")
    if rec.technical_bias is TechnicalBias.BEARISH:
        reasons.append("bearish technical outlook")
    if _or_zero(rec.target_upside) < 0:
        reasons.append("price above analyst target")
    if _or_zero(rec.conviction_score) < 40:
        reasons.append("low long-term quality")

    if _or_zero(rec.composite_score) < PASS_HIGH_CONFIDENCE_COMPOSITE_MAX:
        return Confidence.HIGH, reasons
    return Confidence.MEDIUM, reasons


# Order matters: first match wins, and the last rule always matches.
VERDICT_RULES: tuple[VerdictRule, ...] = (
    VerdictRule(Verdict.GOOD_ENTRY, _is_good_entry, _build_good_entry),
    VerdictRule(Verdict.WAIT, _is_wait, _build_wait),
    VerdictRule(Verdict.PASS, _always, _build_pass),
)


def _result(verdict: Verdict, confidence: Confidence, reasons: list[str]) -> VerdictResult:
    title, description = VERDICT_COPY[verdict]
    return VerdictResult(
        verdict=verdict,
        confidence=confidence,
        title=title,
        description=description,
        reasons=tuple(reasons),
    )


def has_sufficient_data(rec: StockRecommendation) -> bool:
    """A positive price and a positive composite score are required."""
    return _or_zero(rec.current_price) > 0 and _or_zero(rec.composite_score) > 0


def evaluate_verdict(rec: StockRecommendation) -> VerdictResult:
    """
    Evaluate the entry verdict for a recommendation.

    Pure and total: missing data yields an insufficient-data verdict
    rather than an error.

    Args:
        rec: Upstream scores and market facts for one ticker

    Returns:
        VerdictResult with verdict, confidence, copy, and ordered reasons
    """
    if not has_sufficient_data(rec):
        logger.debug(f"verdict({rec.symbol}): insufficient data")
        return _result(
            Verdict.INSUFFICIENT_DATA,
            Confidence.LOW,
            ["Missing price or score data"],
        )

    factors = derive_factors(rec)
    rule = next(r for r in VERDICT_RULES if r.matches(rec, factors))
    confidence, reasons = rule.build(rec, factors)

    logger.debug(
        f"verdict({rec.symbol}): {rule.verdict.value} "
        f"confidence={confidence.value} reasons={len(reasons)}"
    )
    return _result(rule.verdict, confidence, reasons)
