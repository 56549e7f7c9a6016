"""Risk classification engine.

Classifies a stock into a risk tier from its beta, leverage, profitability,
liquidity and daily volatility. Every rule runs, in a fixed order; later
rules look at the level produced by earlier ones.
"""

import logging
import operator
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from stock_research.utils.validators import check_rule

logger = logging.getLogger(__name__)

HIGH_BETA = 1.5
ELEVATED_BETA = 1.2
LOW_BETA = 0.7
HIGH_LEVERAGE = 2.0
LOW_LEVERAGE = 0.3
LOW_MARGIN_PCT = 5.0
HIGH_VOLATILITY_PCT = 4.0
MIN_CURRENT_RATIO = 1.0

NEUTRAL_FACTOR = "average risk profile"


class RiskLevel(str, Enum):
    """Risk tier, ordered low < moderate < moderate-high < high."""

    LOW = "low"
    MODERATE = "moderate"
    MODERATE_HIGH = "moderate-high"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    @property
    def label(self) -> str:
        return _RISK_LABELS[self]

    @property
    def variant(self) -> str:
        """Badge variant used when displaying the level."""
        return _RISK_VARIANTS[self]


_RISK_ORDER = (RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.MODERATE_HIGH, RiskLevel.HIGH)

_RISK_LABELS = {
    RiskLevel.LOW: "Low",
    RiskLevel.MODERATE: "Moderate",
    RiskLevel.MODERATE_HIGH: "Moderate to high",
    RiskLevel.HIGH: "High",
}

_RISK_VARIANTS = {
    RiskLevel.LOW: "buy",
    RiskLevel.MODERATE: "hold",
    RiskLevel.MODERATE_HIGH: "sell",
    RiskLevel.HIGH: "sell",
}


def escalate(current: RiskLevel, candidate: RiskLevel) -> RiskLevel:
    """Return the higher of two levels. Never lowers `current`."""
    return max(current, candidate, key=lambda level: level.rank)


@dataclass(frozen=True)
class RiskAssessmentInput:
    """
    Fundamentals used for risk classification. Any field may be None.

    Units: net_margin and volatility_percent in percent, debt_to_equity as
    a plain ratio (1.5 means debt is 150% of equity).
    """

    beta: float | None = None
    debt_to_equity: float | None = None
    net_margin: float | None = None
    current_ratio: float | None = None
    volatility_percent: float | None = None


@dataclass(frozen=True)
class RiskResult:
    risk_level: RiskLevel
    risk_factors: tuple[str, ...]
    beta: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_level": self.risk_level.value,
            "risk_level_label": self.risk_level.label,
            "badge_variant": self.risk_level.variant,
            "risk_factors": list(self.risk_factors),
            "beta": self.beta,
        }


# A rule sees the current level and the inputs, and returns the new level
# plus any factors it contributes.
RiskRule = Callable[[RiskLevel, RiskAssessmentInput], tuple[RiskLevel, list[str]]]


def _beta_rule(level: RiskLevel, inputs: RiskAssessmentInput) -> tuple[RiskLevel, list[str]]:
    # Initial assignment: the only rule allowed to set LOW
    if check_rule(inputs.beta, HIGH_BETA, operator.gt):
        return RiskLevel.HIGH, ["high beta, volatility well above market"]
    if check_rule(inputs.beta, ELEVATED_BETA, operator.gt):
        return RiskLevel.MODERATE_HIGH, ["higher volatility than market"]
    if check_rule(inputs.beta, LOW_BETA, operator.lt):
        return RiskLevel.LOW, ["low beta, defensive stock"]
    return level, []


def _leverage_rule(level: RiskLevel, inputs: RiskAssessmentInput) -> tuple[RiskLevel, list[str]]:
    if check_rule(inputs.debt_to_equity, HIGH_LEVERAGE, operator.gt):
        if level is RiskLevel.MODERATE:
            level = escalate(level, RiskLevel.MODERATE_HIGH)
        return level, ["high leverage"]
    if check_rule(inputs.debt_to_equity, LOW_LEVERAGE, operator.lt):
        return level, ["low leverage"]
    return level, []


def _margin_rule(level: RiskLevel, inputs: RiskAssessmentInput) -> tuple[RiskLevel, list[str]]:
    if check_rule(inputs.net_margin, 0, operator.lt):
        return escalate(level, RiskLevel.MODERATE_HIGH), ["negative margin (loss-making)"]
    if check_rule(inputs.net_margin, LOW_MARGIN_PCT, operator.lt):
        return level, ["low profitability"]
    return level, []


def _volatility_rule(level: RiskLevel, inputs: RiskAssessmentInput) -> tuple[RiskLevel, list[str]]:
    if check_rule(inputs.volatility_percent, HIGH_VOLATILITY_PCT, operator.gt):
        return level, ["high daily volatility"]
    return level, []


def _liquidity_rule(level: RiskLevel, inputs: RiskAssessmentInput) -> tuple[RiskLevel, list[str]]:
    if check_rule(inputs.current_ratio, MIN_CURRENT_RATIO, operator.lt):
        return escalate(level, RiskLevel.MODERATE_HIGH), ["low liquidity (current ratio < 1)"]
    return level, []


RISK_RULES: tuple[RiskRule, ...] = (
    _beta_rule,
    _leverage_rule,
    _margin_rule,
    _volatility_rule,
    _liquidity_rule,
)


def evaluate_risk(
    fundamentals: RiskAssessmentInput | None,
    volatility_percent: float | None = None,
) -> RiskResult:
    """
    Classify the risk of a stock.

    Starts at MODERATE and applies every rule in RISK_RULES order. Apart from
    the beta rule, rules can only raise the level.

    Args:
        fundamentals: Risk inputs (None is treated as all fields missing)
        volatility_percent: Daily volatility in percent, overrides
            fundamentals.volatility_percent when given

    Returns:
        RiskResult with final level and ordered risk factors
    """
    inputs = fundamentals or RiskAssessmentInput()
    if volatility_percent is not None:
        inputs = replace(inputs, volatility_percent=volatility_percent)

    level = RiskLevel.MODERATE
    factors: list[str] = []
    for rule in RISK_RULES:
        level, added = rule(level, inputs)
        factors.extend(added)

    if not factors:
        factors.append(NEUTRAL_FACTOR)

    logger.debug(f"risk: level={level.value} factors={factors}")
    return RiskResult(risk_level=level, risk_factors=tuple(factors), beta=inputs.beta)


def risk_rule_flags(inputs: RiskAssessmentInput) -> dict[str, dict[str, Any]]:
    """
    Nullable trigger flags for each threshold, for response payloads.

    A flag is None when its input is missing.
    """
    return {
        "high_beta": {
            "triggered": check_rule(inputs.beta, HIGH_BETA, operator.gt),
            "threshold": HIGH_BETA,
        },
        "low_beta": {
            "triggered": check_rule(inputs.beta, LOW_BETA, operator.lt),
            "threshold": LOW_BETA,
        },
        "high_leverage": {
            "triggered": check_rule(inputs.debt_to_equity, HIGH_LEVERAGE, operator.gt),
            "threshold": HIGH_LEVERAGE,
        },
        "loss_making": {
            "triggered": check_rule(inputs.net_margin, 0, operator.lt),
            "threshold": 0,
        },
        "high_daily_volatility": {
            "triggered": check_rule(inputs.volatility_percent, HIGH_VOLATILITY_PCT, operator.gt),
            "threshold": HIGH_VOLATILITY_PCT,
        },
        "low_liquidity": {
            "triggered": check_rule(inputs.current_ratio, MIN_CURRENT_RATIO, operator.lt),
            "threshold": MIN_CURRENT_RATIO,
        },
    }
