"""Stock research tools."""

from stock_research.tools.consensus import analyst_consensus
from stock_research.tools.news import news_sentiment
from stock_research.tools.risk import risk_assessment
from stock_research.tools.verdict import research_verdict

__all__ = [
    "analyst_consensus",
    "news_sentiment",
    "research_verdict",
    "risk_assessment",
]
