"""Keyword-based sentiment scoring for news text."""

import re
from collections.abc import Iterable
from typing import NamedTuple

from finance_mcp.models import SentimentLabel

POSITIVE_KEYWORDS = frozenset({
    "beat", "beats", "exceeded", "growth", "profit", "surge", "gain",
    "upgrade", "buy", "outperform", "record", "strong", "bullish",
    "raises", "raised", "higher", "boost", "soars", "jumps", "rally",
})
NEGATIVE_KEYWORDS = frozenset({
    "miss", "missed", "decline", "loss", "cut", "downgrade", "sell",
    "weak", "bearish", "lawsuit", "investigation", "recall", "layoff",
    "warns", "warning", "falls", "drops", "lower", "slump", "plunge",
})

DEFAULT_NORMALIZATION = 5.0
DEFAULT_THRESHOLD = 0.2

# Suffixes a keyword may carry and still count ("gains", "surged", "cuts")
_INFLECTIONS = ("", "s", "es", "d", "ed", "ing")
_WORD = re.compile(r"[a-z]+")


def _word_forms(keywords: Iterable[str]) -> frozenset[str]:
    return frozenset(k + suffix for k in keywords for suffix in _INFLECTIONS)


_POSITIVE_FORMS = _word_forms(POSITIVE_KEYWORDS)
_NEGATIVE_FORMS = _word_forms(NEGATIVE_KEYWORDS)


class SentimentScore(NamedTuple):
    label: SentimentLabel
    score: float
    tally: int


def label_for(score: float, threshold: float = DEFAULT_THRESHOLD) -> SentimentLabel:
    """Classify a normalized score with symmetric thresholds."""
    if score > threshold:
        return SentimentLabel.POSITIVE
    if score < -threshold:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def keyword_tally(text: str) -> int:
    """
    Positive keyword hits minus negative keyword hits.

    Matching is on whole words, so "again" never counts as "gain". A keyword
    also matches its plain suffixed forms, so "gains" and "surged" count.
    Each distinct word counts once however often it repeats.
    """
    words = set(_WORD.findall(text.lower()))
    return len(words & _POSITIVE_FORMS) - len(words & _NEGATIVE_FORMS)


def score_text(
    text: str | None,
    normalization: float = DEFAULT_NORMALIZATION,
    threshold: float = DEFAULT_THRESHOLD,
) -> SentimentScore:
    """
    Score free text.

    The raw tally is divided by `normalization` and clamped to [-1, 1].

    Args:
        text: Text to scan (None scores as neutral)
        normalization: Divisor applied to the raw tally
        threshold: Absolute score above which a label is not neutral

    Returns:
        SentimentScore(label, score, tally)
    """
    tally = keyword_tally(text) if text else 0
    score = max(-1.0, min(1.0, tally / normalization))
    return SentimentScore(label_for(score, threshold), score, tally)


def aggregate_scores(
    scores: Iterable[float],
    threshold: float = DEFAULT_THRESHOLD,
) -> tuple[SentimentLabel, float]:
    """Mean of per-article scores and its label. No articles is neutral 0.0."""
    values = list(scores)
    if not values:
        return SentimentLabel.NEUTRAL, 0.0
    mean = sum(values) / len(values)
    return label_for(mean, threshold), mean
