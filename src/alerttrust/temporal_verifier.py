"""
Temporal Verification - recency and timeline plausibility of an alert
"""

from __future__ import annotations

import time
from typing import Callable

from .models import Alert, TemporalAnalysis

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE


def epoch_millis() -> int:
    return int(time.time() * 1000)


class TemporalAnalyzer:
    """Score how recent and internally consistent an alert's timing is.

    Weather-pattern matching needs a weather service and is reported as
    not matching until one is integrated.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], int] = epoch_millis,
        recent_window_hours: float = 24.0,
        future_skew_minutes: float = 5.0,
    ) -> None:
        self._clock = clock
        self._recent_window_ms = recent_window_hours * MS_PER_HOUR
        self._future_skew_ms = future_skew_minutes * MS_PER_MINUTE

    async def analyze(self, alert: Alert) -> TemporalAnalysis:
        return self.score(alert, now=self._clock())

    def score(self, alert: Alert, *, now: int) -> TemporalAnalysis:
        age = now - alert.timestamp
        return TemporalAnalysis(
            is_recent_event=age < self._recent_window_ms,
            has_temporal_consistency=self._is_consistent(alert, now),
            matches_weather_patterns=False,
            follows_disaster_timeline=not self._is_expired(alert, now),
        )

    def _is_consistent(self, alert: Alert, now: int) -> bool:
        if alert.timestamp - now > self._future_skew_ms:
            return False
        if alert.expires_at is not None and alert.expires_at <= alert.timestamp:
            return False
        return True

    @staticmethod
    def _is_expired(alert: Alert, now: int) -> bool:
        return alert.expires_at is not None and alert.expires_at <= now
