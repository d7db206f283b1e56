"""
Content Analyzer
================

Deterministic engagement scoring for social-media text.

The analyzer is a pure function of its input: no I/O, no hidden state, and
no exceptions for any string (including the empty string).

Usage:
    from content_analyzer import analyze

    result = analyze("What do you think about remote work? #remote")
    print(result.score)         # 30..100
    print(result.suggestions)   # at most 4, in priority order

Scoring:
    | Component   | Formula                  | Cap |
    |-------------|--------------------------|-----|
    | length      | characters / 3           | 100 |
    | emoji       | emojis * 5               | 20  |
    | hashtag     | hashtags * 7             | 20  |
    | question    | 10 if a question present | 10  |

    The sum is clamped to [30, 100] and rounded half-up.
"""

import math
import re
from dataclasses import dataclass
from typing import Callable

from content_analyzer.models import AnalysisMetrics, AnalysisResult

# Counted independently: a character inside two ranges counts twice.
EMOJI_PATTERNS = [
    re.compile("[\U0001F300-\U0001F9FF]"),  # Misc symbols & pictographs .. supplemental
    re.compile("[\u2600-\u26FF]"),          # Misc symbols
    re.compile("[\u2700-\u27BF]"),          # Dingbats
    re.compile("[\U0001F600-\U0001F64F]"),  # Emoticons
    re.compile("[\U0001F680-\U0001F6FF]"),  # Transport & map
    re.compile("[\U0001F900-\U0001F9FF]"),  # Supplemental symbols & pictographs
]

# ASCII word characters: non-Latin tags do not count, accented letters end a tag
HASHTAG_PATTERN = re.compile(r"#\w+", re.ASCII)
QUESTION_WORD_PATTERN = re.compile(
    r"\b(what|how|why|when|where|which|who)\b", re.IGNORECASE | re.ASCII
)

MIN_LENGTH = 50
MAX_LENGTH = 300
MAX_SUGGESTIONS = 4

MIN_SCORE = 30
MAX_SCORE = 100


@dataclass(frozen=True)
class SuggestionRule:
    """A predicate over metrics mapped to one suggestion message."""

    name: str
    applies: Callable[[AnalysisMetrics], bool]
    message: str


# Evaluated top to bottom; order is the truncation priority.
SUGGESTION_RULES: tuple[SuggestionRule, ...] = (
    SuggestionRule(
        "emoji_missing",
        lambda m: m.emoji_count == 0,
        "Add 1–2 relevant emojis to make the post more visually engaging.",
    ),
    SuggestionRule(
        "emoji_excess",
        lambda m: m.emoji_count > 3,
        "Limit emojis to the 2–3 most relevant ones to keep the content professional.",
    ),
    SuggestionRule(
        "hashtag_missing",
        lambda m: m.hashtag_count == 0,
        "Include 2–3 targeted hashtags to improve reach and discoverability.",
    ),
    SuggestionRule(
        "hashtag_excess",
        lambda m: m.hashtag_count > 5,
        "Reduce the number of hashtags—using 2–4 well-chosen ones works best.",
    ),
    SuggestionRule(
        "question_missing",
        lambda m: not m.has_questions,
        "Try asking a question to spark conversations and boost engagement.",
    ),
    SuggestionRule(
        "too_short",
        lambda m: m.character_count < MIN_LENGTH,
        "Expand your content slightly—short posts may not fully capture attention.",
    ),
    SuggestionRule(
        "too_long",
        lambda m: m.character_count > MAX_LENGTH,
        "Consider shortening your post—concise messages usually perform better.",
    ),
)


def count_emojis(text: str) -> int:
    """Count emoji characters, summing matches per Unicode range."""
    return sum(len(pattern.findall(text)) for pattern in EMOJI_PATTERNS)


def count_hashtags(text: str) -> int:
    return len(HASHTAG_PATTERN.findall(text))


def has_question(text: str) -> bool:
    """True if the text has a '?' or an interrogative word."""
    return "?" in text or QUESTION_WORD_PATTERN.search(text) is not None


def compute_metrics(text: str) -> AnalysisMetrics:
    return AnalysisMetrics(
        character_count=len(text),
        word_count=len(text.split()),
        emoji_count=count_emojis(text),
        hashtag_count=count_hashtags(text),
        has_questions=has_question(text),
    )


def build_suggestions(
    metrics: AnalysisMetrics,
    rules: tuple[SuggestionRule, ...] = SUGGESTION_RULES,
    limit: int = MAX_SUGGESTIONS,
) -> tuple[str, ...]:
    """
    Evaluate rules in priority order and keep the first ``limit`` messages.

    Args:
        metrics: Metrics of the analyzed text
        rules: Ordered rule table
        limit: Maximum number of suggestions returned

    Returns:
        Tuple of suggestion messages
    """
    triggered = [rule.message for rule in rules if rule.applies(metrics)]
    return tuple(triggered[:limit])


def compute_score(metrics: AnalysisMetrics) -> int:
    """Engagement score in [MIN_SCORE, MAX_SCORE]."""
    length_score = min(100.0, metrics.character_count / 3)
    emoji_score = min(20, metrics.emoji_count * 5)
    hashtag_score = min(20, metrics.hashtag_count * 7)
    question_score = 10 if metrics.has_questions else 0

    raw = length_score + emoji_score + hashtag_score + question_score
    clamped = min(MAX_SCORE, max(MIN_SCORE, raw))
    # Half-up, not banker's rounding
    return int(math.floor(clamped + 0.5))


def analyze(text: str) -> AnalysisResult:
    """
    Score text for engagement and suggest improvements.

    Args:
        text: Plain text extracted from a document

    Returns:
        Immutable AnalysisResult
    """
    metrics = compute_metrics(text)
    return AnalysisResult(
        original_text=text,
        suggestions=build_suggestions(metrics),
        score=compute_score(metrics),
        metrics=metrics,
    )
