import pytest

from alerttrust.models import VerificationFlag
from alerttrust.stats import compute_verification_stats
from alerttrust.trust_engine import AlertVerificationEngine

from conftest import SUSPICIOUS_TEXT, fixed_clock


def test_stats_for_all_failed_verifications():
    engine = AlertVerificationEngine(clock=fixed_clock)
    results = [engine.error_result(f"alert-{i}") for i in range(3)]
    stats = compute_verification_stats(results)
    assert stats.total == 3
    assert stats.verified == 0
    assert stats.flagged == 3
    assert stats.verification_rate == 0
    assert stats.avg_trust_score == 0
    assert stats.avg_processing_time == 0
    assert [(item.flag, item.count) for item in stats.common_flags] == [("VERIFICATION_ERROR", 3)]


def test_stats_for_empty_collection():
    stats = compute_verification_stats([])
    assert stats.total == 0
    assert stats.verification_rate == 0
    assert stats.common_flags == []


def test_common_flags_sorted_by_count_then_first_seen():
    base = AlertVerificationEngine(clock=fixed_clock).error_result("x")
    results = [
        base.model_copy(update={"flags": [VerificationFlag.UNRELIABLE_SOURCE]}),
        base.model_copy(update={"flags": [VerificationFlag.SUSPICIOUS_CONTENT]}),
        base.model_copy(update={"flags": [VerificationFlag.SUSPICIOUS_CONTENT, VerificationFlag.UNRELIABLE_SOURCE]}),
        base.model_copy(update={"flags": [VerificationFlag.LOW_EMERGENCY_RELEVANCE]}),
        base.model_copy(update={"flags": []}),
    ]
    stats = compute_verification_stats(results)
    assert [(item.flag, item.count) for item in stats.common_flags] == [
        ("UNRELIABLE_SOURCE", 2),
        ("SUSPICIOUS_CONTENT", 2),
        ("LOW_EMERGENCY_RELEVANCE", 1),
    ]
    assert stats.flagged == 4


@pytest.mark.asyncio
async def test_stats_over_mixed_batch(engine, make_alert):
    results = await engine.verify_batch(
        [
            make_alert(id="alert-1"),
            make_alert(
                id="alert-2",
                content=SUSPICIOUS_TEXT,
                source={"id": "random_user_42", "name": "random_user_42", "kind": "user", "verified": False},
            ),
        ]
    )
    stats = compute_verification_stats(results)
    assert stats.total == 2
    assert stats.verified == 1
    assert stats.verification_rate == pytest.approx(0.5)
    assert stats.avg_trust_score == pytest.approx(
        (results[0].trust_score.overall + results[1].trust_score.overall) / 2
    )
    assert stats.common_flags[0].flag == "SUSPICIOUS_CONTENT"
