import json

import pytest

from alerttrust.analyzers import ContentAnalyzer
from alerttrust.heuristics import DEFAULT_HEURISTICS, load_heuristics
from alerttrust.location import LocationVerifier, is_valid_coordinates
from alerttrust.lookups import StaticReputationLookup
from alerttrust.models import AlertLocation, AlertSource
from alerttrust.sources import SourceVerifier
from alerttrust.temporal_verifier import TemporalAnalyzer

from conftest import HOUR_MS, NOW_MS, OFFICIAL_TEXT, SUSPICIOUS_TEXT, FakeReputation, fixed_clock


def test_suspicious_patterns_accumulate_per_match():
    analysis = ContentAnalyzer().score(SUSPICIOUS_TEXT)
    # urgent/forward/everyone, government hiding truth, conspiracy, share before deleted
    assert analysis.suspicious_patterns == pytest.approx(0.8)
    assert analysis.emotional_manipulation == pytest.approx(0.15)
    assert analysis.emergency_relevance == pytest.approx(0.1)


def test_two_patterns_cross_suspicious_threshold():
    analysis = ContentAnalyzer().score("Urgent, forward to everyone. This is a conspiracy.")
    assert analysis.suspicious_patterns == pytest.approx(0.4)


def test_emergency_keywords_counted_once_each():
    analysis = ContentAnalyzer().score(OFFICIAL_TEXT)
    # earthquake, warning, evacuation, rescue
    assert analysis.emergency_relevance == pytest.approx(0.4)
    assert analysis.suspicious_patterns == 0
    assert analysis.factual_consistency == 0


def test_content_signals_are_not_clamped():
    text = " ".join(DEFAULT_HEURISTICS.emergency_keywords)
    analysis = ContentAnalyzer().score(text)
    assert analysis.emergency_relevance > 1.0


def test_manipulation_keywords():
    analysis = ContentAnalyzer().score("Shocking and unbelievable: act immediately, this is urgent")
    assert analysis.emotional_manipulation == pytest.approx(0.6)


def test_language_quality_penalizes_shouting():
    assert ContentAnalyzer.language_quality("HELLO WORLD") == pytest.approx((5 / 6) * 0.5)
    assert ContentAnalyzer.language_quality("hello world") == pytest.approx(5 / 6)


def test_language_quality_caps_at_one_and_handles_empty():
    assert ContentAnalyzer.language_quality("internationalization responsibilities") == 1.0
    assert ContentAnalyzer.language_quality("") == 0.0
    assert ContentAnalyzer.language_quality("   ") == 0.0


@pytest.mark.asyncio
async def test_source_verifier_official_name_and_reputation():
    verifier = SourceVerifier(StaticReputationLookup({"ndma": 0.85}))
    source = AlertSource(id="ndma", name="National Disaster Management Authority", kind="official", verified=True)
    result = await verifier.verify(source)
    assert result.is_official is True
    assert result.historical_reliability == pytest.approx(0.85)
    assert result.has_verification_badge is False


@pytest.mark.asyncio
async def test_source_verifier_defaults_without_history():
    result = await SourceVerifier().verify(AlertSource(id="someone", name="Neighbourhood chat"))
    assert result.is_official is False
    assert result.historical_reliability == 0.5


@pytest.mark.asyncio
async def test_source_verifier_falls_back_when_lookup_raises():
    verifier = SourceVerifier(FakeReputation(error=RuntimeError("reputation service down")))
    result = await verifier.verify(AlertSource(id="x", name="Anonymous"))
    assert result.historical_reliability == 0.5


@pytest.mark.asyncio
async def test_source_verifier_falls_back_on_timeout():
    verifier = SourceVerifier(FakeReputation({"x": 0.1}, delay=1.0), timeout=0.01)
    result = await verifier.verify(AlertSource(id="x", name="Anonymous"))
    assert result.historical_reliability == 0.5


@pytest.mark.asyncio
async def test_source_verifier_clamps_out_of_range_reputation():
    verifier = SourceVerifier(StaticReputationLookup({"x": 1.7}))
    result = await verifier.verify(AlertSource(id="x", name="Anonymous"))
    assert result.historical_reliability == 1.0


@pytest.mark.asyncio
@pytest.mark.parametrize("looked_up", [float("nan"), float("inf"), "n/a"])
async def test_source_verifier_unusable_reputation_is_neutral(looked_up):
    verifier = SourceVerifier(FakeReputation({"x": looked_up}))
    result = await verifier.verify(AlertSource(id="x", name="Anonymous"))
    assert result.historical_reliability == 0.5


def test_domain_trust_for_government_domains():
    assert SourceVerifier.domain_trust(AlertSource(id="a", name="fema.gov")) == 0.9
    assert SourceVerifier.domain_trust(AlertSource(id="ndma.gov.in", name="NDMA India")) == 0.9
    assert SourceVerifier.domain_trust(AlertSource(id="b", name="example.com")) == 0.5
    assert SourceVerifier.domain_trust(AlertSource(id="c", name="Red Cross volunteers")) == 0.5


@pytest.mark.parametrize(
    "lat,lng,expected",
    [
        (0.0, 0.0, True),
        (90.0, -180.0, True),
        (999.0, 10.0, False),
        (10.0, 180.5, False),
        (float("nan"), 10.0, False),
    ],
)
def test_coordinate_validation(lat, lng, expected):
    assert is_valid_coordinates(lat, lng) is expected


@pytest.mark.asyncio
async def test_invalid_coordinates_skip_zone_lookup(zones):
    result = await LocationVerifier(zones).verify(AlertLocation(lat=999, lng=10, address="nowhere"))
    assert result.is_valid_coordinates is False
    assert result.is_known_disaster_zone is False
    assert zones.calls == []


@pytest.mark.asyncio
async def test_zone_lookup_for_valid_coordinates(zones):
    result = await LocationVerifier(zones).verify(AlertLocation(lat=19.0, lng=73.0))
    assert result.is_valid_coordinates is True
    assert result.is_known_disaster_zone is True
    assert result.population_density == 0.5
    assert result.infrastructure_risk == 0.5


def test_temporal_recency_window(make_alert):
    analyzer = TemporalAnalyzer(clock=fixed_clock)
    fresh = analyzer.score(make_alert(timestamp=NOW_MS - HOUR_MS), now=NOW_MS)
    stale = analyzer.score(make_alert(timestamp=NOW_MS - 25 * HOUR_MS), now=NOW_MS)
    assert fresh.is_recent_event is True
    assert stale.is_recent_event is False
    assert fresh.matches_weather_patterns is False


def test_temporal_consistency_and_expiry(make_alert):
    analyzer = TemporalAnalyzer(clock=fixed_clock)
    future = analyzer.score(make_alert(timestamp=NOW_MS + HOUR_MS), now=NOW_MS)
    assert future.has_temporal_consistency is False

    backwards = analyzer.score(
        make_alert(timestamp=NOW_MS - HOUR_MS, expires_at=NOW_MS - 2 * HOUR_MS), now=NOW_MS
    )
    assert backwards.has_temporal_consistency is False
    assert backwards.follows_disaster_timeline is False

    active = analyzer.score(make_alert(timestamp=NOW_MS - HOUR_MS, expires_at=NOW_MS + HOUR_MS), now=NOW_MS)
    assert active.has_temporal_consistency is True
    assert active.follows_disaster_timeline is True


def test_load_heuristics_overrides_tables(tmp_path):
    path = tmp_path / "heuristics.json"
    path.write_text(
        json.dumps({"emergency_keywords": ["Volcano"], "suspicious_patterns": ["hoax", "("]}),
        encoding="utf-8",
    )
    tables = load_heuristics(path)
    assert tables.emergency_keywords == ("volcano",)
    assert len(tables.suspicious_patterns) == 1
    assert tables.manipulation_keywords == DEFAULT_HEURISTICS.manipulation_keywords

    analysis = ContentAnalyzer(tables).score("Volcano eruption is a hoax")
    assert analysis.emergency_relevance == pytest.approx(0.1)
    assert analysis.suspicious_patterns == pytest.approx(0.2)


def test_load_heuristics_without_path_returns_defaults():
    assert load_heuristics(None) is DEFAULT_HEURISTICS
