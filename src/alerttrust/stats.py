from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from .models import FlagCount, VerificationResult, VerificationStats


def common_flags(results: Sequence[VerificationResult]) -> list[FlagCount]:
    """Flag frequencies, most common first; ties keep first-seen order."""
    counts: Counter[str] = Counter()
    for result in results:
        for flag in result.flags:
            counts[getattr(flag, "value", flag)] += 1
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return [FlagCount(flag=flag, count=count) for flag, count in ordered]


def compute_verification_stats(results: Sequence[VerificationResult]) -> VerificationStats:
    total = len(results)
    if total == 0:
        return VerificationStats(
            total=0,
            verified=0,
            flagged=0,
            verification_rate=0.0,
            avg_trust_score=0.0,
            avg_processing_time=0.0,
        )
    verified = sum(1 for result in results if result.is_verified)
    flagged = sum(1 for result in results if result.flags)
    return VerificationStats(
        total=total,
        verified=verified,
        flagged=flagged,
        verification_rate=verified / total,
        avg_trust_score=sum(result.trust_score.overall for result in results) / total,
        avg_processing_time=sum(result.processing_time for result in results) / total,
        common_flags=common_flags(results),
    )
