from __future__ import annotations

import re

from .heuristics import DEFAULT_HEURISTICS, HeuristicTables
from .models import ContentAnalysis

SUSPICIOUS_PATTERN_WEIGHT = 0.2
EMERGENCY_KEYWORD_WEIGHT = 0.1
MANIPULATION_KEYWORD_WEIGHT = 0.15
IDEAL_WORD_LENGTH = 6.0
MAX_CAPS_PENALTY = 0.5


class ContentAnalyzer:
    """Score the free-text body of an alert.

    Accumulated signals are left unclamped; the aggregator clamps sub-scores.
    """

    CAPS_PATTERN = re.compile(r"[A-Z]")

    def __init__(self, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> None:
        self._heuristics = heuristics

    async def analyze(self, content: str) -> ContentAnalysis:
        return self.score(content)

    def score(self, content: str) -> ContentAnalysis:
        lowered = content.lower()
        return ContentAnalysis(
            suspicious_patterns=self._suspicious_patterns(content),
            emergency_relevance=self._keyword_score(
                lowered, self._heuristics.emergency_keywords, EMERGENCY_KEYWORD_WEIGHT
            ),
            language_quality=self.language_quality(content),
            factual_consistency=0.0,
            emotional_manipulation=self._keyword_score(
                lowered, self._heuristics.manipulation_keywords, MANIPULATION_KEYWORD_WEIGHT
            ),
        )

    def _suspicious_patterns(self, content: str) -> float:
        matches = sum(1 for pattern in self._heuristics.suspicious_patterns if pattern.search(content))
        return matches * SUSPICIOUS_PATTERN_WEIGHT

    @staticmethod
    def _keyword_score(lowered: str, keywords: tuple[str, ...], weight: float) -> float:
        return sum(weight for keyword in keywords if keyword in lowered)

    @classmethod
    def language_quality(cls, content: str) -> float:
        """Penalize garbled short-word text and shouting."""
        words = content.split()
        if not words:
            return 0.0
        avg_word_length = sum(len(word) for word in words) / len(words)
        caps_ratio = len(cls.CAPS_PATTERN.findall(content)) / len(content)
        caps_penalty = min(caps_ratio * 2, MAX_CAPS_PENALTY)
        return min(1.0, (avg_word_length / IDEAL_WORD_LENGTH) * (1 - caps_penalty))
