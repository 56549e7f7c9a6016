"""Prompt templates for stock research."""

from typing import Any

# Prompt definitions
PROMPTS = {
    "research_brief": {
        "description": "Short research brief combining verdict, risk, analyst consensus and news",
        "arguments": [{"name": "symbol", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "research_brief":
        symbol = arguments.get("symbol", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Write a research brief for {symbol}.

Execute these tools in order:
1. get_risk_assessment("{symbol}")
2. get_analyst_consensus("{symbol}")
3. get_news_sentiment("{symbol}")
4. get_research_verdict("{symbol}", composite_score=...) with the scores you have
   for {symbol}. Leave current_price and target_upside empty so they are looked up.

Then write the brief with these sections:

## Verdict
- Verdict title and confidence
- Up to four reasons, in the order returned (use top_reasons)
- Signal badge label, if a signal was returned

## Risk
- risk_level_label and the risk factors verbatim
- Beta, debt-to-equity, net margin and volatility from inputs (omit nulls)

## Analyst consensus
- recommendation_key, consensus_score (-2 to +2) and analyst count
- Price target and upside_pct, if available

## News
- Overall sentiment label, average score and positive/neutral/negative counts
- Two or three headlines with their sentiment

Rules:
- Quote numbers exactly as returned. Do not recompute them.
- If a tool returned an error or warnings, say which section is incomplete.
- Finish with a one-line disclaimer that this is not financial advice.""",
                }
            ]
        }

    return None
