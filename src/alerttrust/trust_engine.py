from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Callable

from .analyzers import ContentAnalyzer
from .config import Settings, get_settings
from .external_verifier import CrossReferenceChecker, OfficialFeedClient
from .heuristics import load_heuristics
from .location import DisasterZoneClient, LocationVerifier
from .models import (
    Alert,
    ContentAnalysis,
    TrustBreakdown,
    TrustScore,
    VerificationFlag,
    VerificationResult,
)
from .reputation import ReputationClient
from .sources import SourceVerifier
from .temporal_verifier import TemporalAnalyzer, epoch_millis

logger = logging.getLogger(__name__)

# Unvalidated heuristics carried over as-is; no calibration data backs them.
VERIFICATION_THRESHOLD = 0.70
CONTENT_WEIGHT = 0.4
SOURCE_WEIGHT = 0.3
LOCATION_WEIGHT = 0.15
TEMPORAL_WEIGHT = 0.1
CROSS_REFERENCE_WEIGHT = 0.05

HIGH_CONFIDENCE = 0.8
MODERATE_CONFIDENCE = 0.6
LOW_TRUST = 0.5
QUESTIONABLE_SOURCE = 0.4
SUSPICIOUS_CONTENT_LIMIT = 0.3
EMOTIONAL_MANIPULATION_LIMIT = 0.4
UNRELIABLE_HISTORY = 0.4
LOW_RELEVANCE = 0.2

ERROR_REASONING = "Unable to verify alert due to technical issues"
ERROR_RECOMMENDATION = "Manually verify with official sources"
CLOSING_RECOMMENDATION = "Report suspicious content to help improve community safety"


def clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass
class TrustWeights:
    content: float = CONTENT_WEIGHT
    source: float = SOURCE_WEIGHT
    location: float = LOCATION_WEIGHT
    temporal: float = TEMPORAL_WEIGHT
    cross_reference: float = CROSS_REFERENCE_WEIGHT

    def as_dict(self) -> dict[str, float]:
        weights = {
            "content": self.content,
            "source": self.source,
            "location": self.location,
            "temporal": self.temporal,
            "cross_reference": self.cross_reference,
        }
        total = sum(weights.values())
        if total <= 0:
            raise ValueError("TrustWeights sum must be positive")
        if abs(total - 1.0) < 1e-9:
            return weights
        return {key: value / total for key, value in weights.items()}


@dataclass
class TrustAggregator:
    """Combine analyzer outputs into sub-scores, a composite score, flags and advice."""

    weights: TrustWeights = field(default_factory=TrustWeights)
    threshold: float = VERIFICATION_THRESHOLD

    def __post_init__(self) -> None:
        self._weight_map = self.weights.as_dict()

    def score(self, breakdown: TrustBreakdown) -> TrustScore:
        components = {
            "content": self._content_score(breakdown),
            "source": self._source_score(breakdown),
            "location": self._location_score(breakdown),
            "temporal": self._temporal_score(breakdown),
            "cross_reference": self._cross_reference_score(breakdown),
        }
        overall = clamp(sum(components[key] * weight for key, weight in self._weight_map.items()))
        return TrustScore(overall=overall, breakdown=breakdown, **components)

    def is_verified(self, overall: float) -> bool:
        return overall >= self.threshold

    @staticmethod
    def _content_score(breakdown: TrustBreakdown) -> float:
        content = breakdown.content_analysis
        return clamp(
            content.emergency_relevance * 0.4
            + content.language_quality * 0.3
            + (1 - content.suspicious_patterns) * 0.2
            + (1 - content.emotional_manipulation) * 0.1
        )

    @staticmethod
    def _source_score(breakdown: TrustBreakdown) -> float:
        source = breakdown.source_verification
        return clamp(
            (0.4 if source.is_official else 0.0)
            + (0.2 if source.has_verification_badge else 0.0)
            + source.historical_reliability * 0.4
        )

    @staticmethod
    def _location_score(breakdown: TrustBreakdown) -> float:
        location = breakdown.location_verification
        return clamp(
            (0.5 if location.is_valid_coordinates else 0.0)
            + (0.3 if location.is_known_disaster_zone else 0.0)
            + location.population_density * 0.2
        )

    @staticmethod
    def _temporal_score(breakdown: TrustBreakdown) -> float:
        temporal = breakdown.temporal_analysis
        return clamp(
            (0.4 if temporal.is_recent_event else 0.0)
            + (0.3 if temporal.has_temporal_consistency else 0.0)
            + (0.3 if temporal.matches_weather_patterns else 0.0)
        )

    @staticmethod
    def _cross_reference_score(breakdown: TrustBreakdown) -> float:
        cross_reference = breakdown.cross_reference
        return clamp(
            (0.6 if cross_reference.found_in_official_sources else 0.0)
            + (-0.4 if cross_reference.contradicted_by_official_sources else 0.2)
            + min(cross_reference.similar_alerts_count / 10, 0.2)
        )

    @staticmethod
    def flags(breakdown: TrustBreakdown) -> list[VerificationFlag]:
        content = breakdown.content_analysis
        source = breakdown.source_verification
        flags: list[VerificationFlag] = []
        if content.suspicious_patterns > SUSPICIOUS_CONTENT_LIMIT:
            flags.append(VerificationFlag.SUSPICIOUS_CONTENT)
        if content.emotional_manipulation > EMOTIONAL_MANIPULATION_LIMIT:
            flags.append(VerificationFlag.EMOTIONAL_MANIPULATION)
        if not source.is_official and source.historical_reliability < UNRELIABLE_HISTORY:
            flags.append(VerificationFlag.UNRELIABLE_SOURCE)
        if content.emergency_relevance < LOW_RELEVANCE:
            flags.append(VerificationFlag.LOW_EMERGENCY_RELEVANCE)
        return flags

    @staticmethod
    def reasoning(trust_score: TrustScore, content: ContentAnalysis) -> str:
        if trust_score.overall >= HIGH_CONFIDENCE:
            reasons = ["High confidence based on reliable source and consistent content"]
        elif trust_score.overall >= MODERATE_CONFIDENCE:
            reasons = ["Moderate confidence with some verification concerns"]
        else:
            reasons = ["Low confidence due to multiple verification issues"]
        if trust_score.source < QUESTIONABLE_SOURCE:
            reasons.append("Source reliability is questionable")
        if content.suspicious_patterns > SUSPICIOUS_CONTENT_LIMIT:
            reasons.append("Content contains patterns commonly found in misinformation")
        return ". ".join(reasons)

    def recommendations(self, trust_score: TrustScore) -> list[str]:
        recommendations: list[str] = []
        if trust_score.overall < LOW_TRUST:
            recommendations.append("Verify with official sources before sharing")
            recommendations.append("Look for corroborating reports from reliable news sources")
        if trust_score.source < QUESTIONABLE_SOURCE:
            recommendations.append("Check the credibility of the information source")
        if self.is_verified(trust_score.overall):
            recommendations.append("Information appears reliable but always cross-verify emergency alerts")
        recommendations.append(CLOSING_RECOMMENDATION)
        return recommendations


@dataclass
class AlertVerificationEngine:
    content_analyzer: ContentAnalyzer = field(default_factory=ContentAnalyzer)
    source_verifier: SourceVerifier = field(default_factory=SourceVerifier)
    location_verifier: LocationVerifier = field(default_factory=LocationVerifier)
    temporal_analyzer: TemporalAnalyzer = field(default_factory=TemporalAnalyzer)
    cross_reference_checker: CrossReferenceChecker = field(default_factory=CrossReferenceChecker)
    aggregator: TrustAggregator = field(default_factory=TrustAggregator)
    max_concurrency: int = 8
    clock: Callable[[], int] = epoch_millis

    async def verify(self, alert: Alert) -> VerificationResult:
        """Verify one alert. Never raises; failures become an error result."""
        started = time.perf_counter()
        alert_id = str(getattr(alert, "id", ""))
        try:
            content, source, location, temporal, cross_reference = await asyncio.gather(
                self.content_analyzer.analyze(alert.content),
                self.source_verifier.verify(alert.source),
                self.location_verifier.verify(alert.location),
                self.temporal_analyzer.analyze(alert),
                self.cross_reference_checker.check(alert),
            )
            breakdown = TrustBreakdown(
                content_analysis=content,
                source_verification=source,
                location_verification=location,
                temporal_analysis=temporal,
                cross_reference=cross_reference,
            )
            trust_score = self.aggregator.score(breakdown)
            result = VerificationResult(
                id=f"verification_{uuid.uuid4().hex[:12]}",
                alert_id=alert_id,
                is_verified=self.aggregator.is_verified(trust_score.overall),
                trust_score=trust_score,
                flags=self.aggregator.flags(breakdown),
                reasoning=self.aggregator.reasoning(trust_score, content),
                recommendations=self.aggregator.recommendations(trust_score),
                processing_time=(time.perf_counter() - started) * 1000,
                timestamp=self.clock(),
            )
        except Exception:
            logger.exception("[%s] Error in alert verification", alert_id)
            return self.error_result(alert_id)

        logger.debug(
            "[%s] trust=%.3f verified=%s flags=%s (%.1fms)",
            alert_id,
            trust_score.overall,
            result.is_verified,
            [flag.value for flag in result.flags],
            result.processing_time,
        )
        return result

    async def verify_batch(self, alerts: Sequence[Alert]) -> list[VerificationResult]:
        """Verify alerts concurrently, at most ``max_concurrency`` at a time, keeping input order."""
        if not alerts:
            return []
        return await self.gather_batch(alerts, self.start_batch(alerts))

    def start_batch(self, alerts: Sequence[Alert]) -> list[asyncio.Task[VerificationResult]]:
        """
        Schedule one task per alert, bounded by ``max_concurrency``.

        Each task can be cancelled on its own; ``gather_batch`` reports a
        cancelled alert as an error result and keeps the rest of the batch.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(alert: Alert) -> VerificationResult:
            async with semaphore:
                return await self.verify(alert)

        return [asyncio.create_task(_bounded(alert), name=f"verify-{alert.id}") for alert in alerts]

    async def gather_batch(
        self,
        alerts: Sequence[Alert],
        tasks: Sequence[asyncio.Task[VerificationResult]],
    ) -> list[VerificationResult]:
        # Cancelling the awaiting task still cancels every pending child.
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        results: list[VerificationResult] = []
        for alert, outcome in zip(alerts, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("[%s] Verification did not complete (%s)", alert.id, type(outcome).__name__)
                results.append(self.error_result(alert.id))
            else:
                results.append(outcome)
        logger.info(
            "Verified batch of %d alerts (%d verified)",
            len(results),
            sum(1 for result in results if result.is_verified),
        )
        return results

    def error_result(self, alert_id: str) -> VerificationResult:
        return VerificationResult(
            id=f"error_{uuid.uuid4().hex[:12]}",
            alert_id=alert_id,
            is_verified=False,
            trust_score=TrustScore(
                overall=0.0,
                content=0.0,
                source=0.0,
                location=0.0,
                temporal=0.0,
                cross_reference=0.0,
                breakdown=None,
            ),
            flags=[VerificationFlag.VERIFICATION_ERROR],
            reasoning=ERROR_REASONING,
            recommendations=[ERROR_RECOMMENDATION],
            processing_time=0.0,
            timestamp=self.clock(),
        )


def build_engine(settings: Settings | None = None) -> AlertVerificationEngine:
    """Wire an engine from settings: HTTP lookups where URLs are configured, simulators otherwise."""
    settings = settings or get_settings()
    heuristics = load_heuristics(settings.heuristics_path)
    timeout = settings.lookup_timeout

    reputation = ReputationClient(settings.reputation_api_url, timeout=timeout) if settings.reputation_api_url else None
    zones = DisasterZoneClient(settings.disaster_zone_api_url, timeout=timeout) if settings.disaster_zone_api_url else None
    feed = OfficialFeedClient(settings.official_feed_api_url, timeout=timeout) if settings.official_feed_api_url else None
    for name, client in (("reputation", reputation), ("disaster-zone", zones), ("official-feed", feed)):
        if client is None:
            logger.info("No %s service configured, using simulated lookup", name)

    return AlertVerificationEngine(
        content_analyzer=ContentAnalyzer(heuristics),
        source_verifier=SourceVerifier(reputation, heuristics=heuristics, timeout=timeout),
        location_verifier=LocationVerifier(zones, timeout=timeout),
        temporal_analyzer=TemporalAnalyzer(
            recent_window_hours=settings.recent_window_hours,
            future_skew_minutes=settings.future_skew_minutes,
        ),
        cross_reference_checker=CrossReferenceChecker(
            feed,
            official_sources=settings.official_sources,
            timeout=timeout,
        ),
        aggregator=TrustAggregator(
            weights=TrustWeights(
                content=settings.content_weight,
                source=settings.source_weight,
                location=settings.location_weight,
                temporal=settings.temporal_weight,
                cross_reference=settings.cross_reference_weight,
            ),
            threshold=settings.verification_threshold,
        ),
        max_concurrency=settings.max_concurrency,
    )
