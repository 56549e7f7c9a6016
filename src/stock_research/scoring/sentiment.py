"""Keyword-based news sentiment."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stock_research.utils.rounding import round_half_up

# Matched as substrings of the lowercased text, so "gain" also hits "gains".
# Order is kept: it is the order of the reported keywords.
POSITIVE_KEYWORDS: tuple[str, ...] = (
    "surge", "jump", "soar", "rally", "gain", "rise", "profit",
    "growth", "beat", "exceed", "upgrade", "buy", "bullish", "record",
    "high", "success", "strong", "boost", "win", "outperform", "positive",
)
NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "fall", "drop", "plunge", "crash", "decline", "loss", "miss",
    "cut", "downgrade", "sell", "bearish", "low", "weak", "fail",
    "warning", "concern", "risk", "trouble", "layoff", "lawsuit", "negative",
)

# Scores above/below +-0.2 are labelled positive/negative
LABEL_THRESHOLD = 0.2


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


_DISPLAY_LABELS = {
    SentimentLabel.POSITIVE: "Positive",
    SentimentLabel.NEGATIVE: "Negative",
    SentimentLabel.NEUTRAL: "Neutral",
}


@dataclass(frozen=True)
class SentimentScore:
    """Sentiment of one article. score is in [-1, 1]."""

    score: float
    label: SentimentLabel
    keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "keywords": list(self.keywords),
        }


def sentiment_label_for(score: float | None) -> SentimentLabel | None:
    """Bucket a score into a label. None stays None."""
    if score is None:
        return None
    if score > LABEL_THRESHOLD:
        return SentimentLabel.POSITIVE
    if score < -LABEL_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def sentiment_display_label(label: SentimentLabel | str | None) -> str:
    """Human-readable label, "Unknown" for missing or unrecognized values."""
    try:
        return _DISPLAY_LABELS[SentimentLabel(label)]
    except ValueError:
        return "Unknown"


def analyze_basic_sentiment(title: str | None, summary: str | None) -> SentimentScore:
    """
    Score an article by counting positive and negative keywords.

    score = (positive - negative) / max(positive + negative, 1), rounded to
    two decimals with ties going up.

    Args:
        title: Article headline
        summary: Article summary

    Returns:
        SentimentScore with score, label, and matched keywords
    """
    text = f"{title or ''} {summary or ''}".lower()

    found_positive = [w for w in POSITIVE_KEYWORDS if w in text]
    found_negative = [w for w in NEGATIVE_KEYWORDS if w in text]

    total = max(len(found_positive) + len(found_negative), 1)
    score = (len(found_positive) - len(found_negative)) / total

    return SentimentScore(
        score=round_half_up(score),
        label=sentiment_label_for(score),
        keywords=found_positive + found_negative,
    )


def average_sentiment(scores: Iterable[SentimentScore]) -> float | None:
    """
    Mean article score, None when there are no articles.

    Not rounded: labels are bucketed on the exact mean.
    """
    values = [s.score for s in scores]
    if not values:
        return None
    return sum(values) / len(values)
