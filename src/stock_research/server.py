"""Stock Research MCP Server using FastMCP."""

import asyncio
import json
import logging
import os

from fastmcp import FastMCP

from stock_research import SCHEMA_VERSION, SERVER_VERSION
from stock_research.data.yfinance_client import shutdown_executor
from stock_research.prompts.templates import get_prompt
from stock_research.tools import (
    analyst_consensus,
    news_sentiment,
    research_verdict,
    risk_assessment,
)

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="stock-research",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_research_verdict(
    symbol: str,
    composite_score: float | None,
    fundamental_score: float | None = None,
    technical_score: float | None = None,
    analyst_score: float | None = None,
    conviction_score: float | None = None,
    dip_score: float | None = None,
    technical_bias: str = "NEUTRAL",
    current_price: float | None = None,
    target_upside: float | None = None,
    primary_signal: str | None = None,
) -> str:
    """
    Decide whether a stock is a good entry now, worth waiting on, or a pass.

    Scores are on a 0-100 scale and come from the caller. Current price and
    upside to the analyst mean target are looked up when omitted.

    Verdicts (first match wins):
    - good-entry: composite >= 60, upside > 10% or dip score >= 40, and a
      bullish bias or technical score >= 50
    - wait: composite >= 50 with fundamental score >= 55
    - pass: everything else
    - insufficient-data: no positive price or no positive composite score

    Render the title, confidence and top_reasons (at most four, in order).

    Args:
        symbol: Stock ticker symbol
        composite_score: Aggregate quality score (0-100)
        fundamental_score: Fundamental score (0-100)
        technical_score: Technical score (0-100)
        analyst_score: Analyst score (0-100)
        conviction_score: Long-term quality score (0-100)
        dip_score: Oversold/dip score (0-100)
        technical_bias: BULLISH, BEARISH or NEUTRAL
        current_price: Current price (optional)
        target_upside: Percent upside to analyst target (optional)
        primary_signal: Signal type for the badge, e.g. DIP_OPPORTUNITY (optional)

    Returns:
        JSON with verdict, confidence, reasons, signal badge and inputs used
    """
    result = await research_verdict(
        symbol=symbol,
        composite_score=composite_score,
        fundamental_score=fundamental_score,
        technical_score=technical_score,
        analyst_score=analyst_score,
        conviction_score=conviction_score,
        dip_score=dip_score,
        technical_bias=technical_bias,
        current_price=current_price,
        target_upside=target_upside,
        primary_signal=primary_signal,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_risk_assessment(symbol: str) -> str:
    """
    Classify a stock as low, moderate, moderate-high or high risk.

    Uses beta, debt-to-equity, net margin, current ratio and 14-day ATR
    volatility. Every rule that fires adds a human-readable risk factor.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with risk level, display label, badge variant, risk factors and rule flags
    """
    result = await risk_assessment(symbol=symbol)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_analyst_consensus(symbol: str) -> str:
    """
    Summarize current analyst ratings for a stock.

    Consensus score runs from -2 (strong sell) to +2 (strong buy).

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with rating counts, consensus score, recommendation key and price target
    """
    result = await analyst_consensus(symbol=symbol)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_news_sentiment(symbol: str, days: int = 7) -> str:
    """
    Get recent news for a stock with keyword-based sentiment.

    Args:
        symbol: Stock ticker symbol
        days: Number of days to look back (default: 7)

    Returns:
        JSON with scored articles, average sentiment and label counts
    """
    result = await news_sentiment(symbol=symbol, days=days)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def research_brief(symbol: str) -> str:
    """Short research brief combining verdict, risk, analyst consensus and news."""
    result = get_prompt("research_brief", {"symbol": symbol})
    if result:
        return result["messages"][0]["content"]
    return f"Write a research brief for {symbol} using all available tools."


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Stock Research MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())


if __name__ == "__main__":
    main()
