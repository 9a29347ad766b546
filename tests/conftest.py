import asyncio
import sys
from pathlib import Path

import pytest

# Ensure project src is on path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for p in (ROOT, SRC):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from alerttrust.external_verifier import CrossReferenceChecker
from alerttrust.location import LocationVerifier
from alerttrust.lookups import BoundingBox, FeedMatch, StaticDisasterZoneLookup, StaticOfficialFeedLookup
from alerttrust.models import Alert
from alerttrust.sources import SourceVerifier
from alerttrust.temporal_verifier import TemporalAnalyzer
from alerttrust.trust_engine import AlertVerificationEngine

NOW_MS = 1_760_000_000_000
HOUR_MS = 60 * 60 * 1000

OFFICIAL_TEXT = (
    "Earthquake warning issued for the coastal district. "
    "Evacuation centres are open and rescue teams are deployed."
)
SUSPICIOUS_TEXT = (
    "URGENT forward to everyone: the government is hiding the truth about the flood, "
    "it's a conspiracy! Share before deleted"
)


def fixed_clock() -> int:
    return NOW_MS


class FakeReputation:
    def __init__(self, scores=None, *, error: Exception | None = None, delay: float = 0.0):
        self.scores = scores or {}
        self.error = error
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak = 0

    async def fetch_reliability(self, source_id):
        self.calls.append(source_id)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.scores.get(source_id)
        finally:
            self.in_flight -= 1


class RecordingZones(StaticDisasterZoneLookup):
    def __init__(self, zones=()):
        super().__init__(zones)
        self.calls: list[tuple[float, float]] = []

    async def is_disaster_zone(self, lat, lng):
        self.calls.append((lat, lng))
        return await super().is_disaster_zone(lat, lng)


@pytest.fixture
def make_alert():
    def _make(**overrides) -> Alert:
        data = {
            "id": "alert-1",
            "content": OFFICIAL_TEXT,
            "source": {
                "id": "ndma",
                "name": "National Disaster Management Authority",
                "kind": "official",
                "verified": True,
            },
            "location": {"lat": 19.07, "lng": 72.87, "address": "Mumbai"},
            "category": "earthquake",
            "severity": "high",
            "timestamp": NOW_MS - HOUR_MS // 2,
            "tags": ["quake"],
        }
        data.update(overrides)
        return Alert.model_validate(data)

    return _make


@pytest.fixture
def reputation():
    return FakeReputation({"ndma": 0.9, "random_user_42": 0.2})


@pytest.fixture
def zones():
    return RecordingZones([BoundingBox(min_lat=18.0, min_lng=72.0, max_lat=20.0, max_lng=74.0)])


@pytest.fixture
def feed():
    return StaticOfficialFeedLookup(
        matches={"alert-1": FeedMatch(found=True, contradicted=False, similar_count=3, sources_checked=("NDMA",))},
        sources=("NDMA", "IMD"),
    )


@pytest.fixture
def engine_factory(reputation, zones, feed):
    def _build(**overrides) -> AlertVerificationEngine:
        parts = {
            "source_verifier": SourceVerifier(reputation, timeout=1.0),
            "location_verifier": LocationVerifier(zones, timeout=1.0),
            "temporal_analyzer": TemporalAnalyzer(clock=fixed_clock),
            "cross_reference_checker": CrossReferenceChecker(feed, official_sources=("NDMA", "IMD"), timeout=1.0),
            "clock": fixed_clock,
        }
        parts.update(overrides)
        return AlertVerificationEngine(**parts)

    return _build


@pytest.fixture
def engine(engine_factory):
    return engine_factory()
