"""Pure scoring engines. No I/O."""

from stock_research.scoring.consensus import (
    AnalystCounts,
    ConsensusSummary,
    consensus_score,
    recommendation_key,
    summarize_consensus,
    target_upside,
)
from stock_research.scoring.risk import (
    RiskAssessmentInput,
    RiskLevel,
    RiskResult,
    escalate,
    evaluate_risk,
)
from stock_research.scoring.sentiment import (
    SentimentLabel,
    SentimentScore,
    analyze_basic_sentiment,
    average_sentiment,
)
from stock_research.scoring.signals import SIGNAL_CONFIG, SignalConfig, SignalType, get_signal_config
from stock_research.scoring.verdict import (
    Confidence,
    StockRecommendation,
    TechnicalBias,
    Verdict,
    VerdictResult,
    evaluate_verdict,
)

__all__ = [
    # Verdict
    "Confidence",
    "StockRecommendation",
    "TechnicalBias",
    "Verdict",
    "VerdictResult",
    "evaluate_verdict",
    # Risk
    "RiskAssessmentInput",
    "RiskLevel",
    "RiskResult",
    "escalate",
    "evaluate_risk",
    # Sentiment
    "SentimentLabel",
    "SentimentScore",
    "analyze_basic_sentiment",
    "average_sentiment",
    # Consensus
    "AnalystCounts",
    "ConsensusSummary",
    "consensus_score",
    "recommendation_key",
    "summarize_consensus",
    "target_upside",
    # Signals
    "SIGNAL_CONFIG",
    "SignalConfig",
    "SignalType",
    "get_signal_config",
]
