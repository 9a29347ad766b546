from .models import Alert, TrustScore, VerificationFlag, VerificationResult, VerificationStats
from .stats import compute_verification_stats
from .trust_engine import VERIFICATION_THRESHOLD, AlertVerificationEngine, TrustAggregator, TrustWeights, build_engine

__all__ = [
    "Alert",
    "AlertVerificationEngine",
    "TrustAggregator",
    "TrustScore",
    "TrustWeights",
    "VERIFICATION_THRESHOLD",
    "VerificationFlag",
    "VerificationResult",
    "VerificationStats",
    "build_engine",
    "compute_verification_stats",
]
