from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SourceKind(str, Enum):
    OFFICIAL = "official"
    USER = "user"
    MEDIA = "media"
    UNKNOWN = "unknown"


class AlertCategory(str, Enum):
    EARTHQUAKE = "earthquake"
    FLOOD = "flood"
    FIRE = "fire"
    CYCLONE = "cyclone"
    MEDICAL = "medical"
    SECURITY = "security"
    OTHER = "other"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VerificationFlag(str, Enum):
    SUSPICIOUS_CONTENT = "SUSPICIOUS_CONTENT"
    EMOTIONAL_MANIPULATION = "EMOTIONAL_MANIPULATION"
    UNRELIABLE_SOURCE = "UNRELIABLE_SOURCE"
    LOW_EMERGENCY_RELEVANCE = "LOW_EMERGENCY_RELEVANCE"
    VERIFICATION_ERROR = "VERIFICATION_ERROR"


class AlertSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    kind: SourceKind = SourceKind.UNKNOWN
    verified: bool = False


class AlertLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    address: str = ""
    radius: float | None = Field(default=None, ge=0.0)


class AlertMedia(BaseModel):
    model_config = ConfigDict(frozen=True)

    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)


class Alert(BaseModel):
    """An incoming emergency alert. Immutable while it is being verified."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    content: str
    source: AlertSource
    location: AlertLocation
    category: AlertCategory = AlertCategory.OTHER
    severity: AlertSeverity = AlertSeverity.MEDIUM
    timestamp: int = Field(..., description="Creation instant, epoch milliseconds")
    expires_at: int | None = None
    media: AlertMedia | None = None
    tags: list[str] = Field(default_factory=list)


class ContentAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    suspicious_patterns: float = 0.0
    emergency_relevance: float = 0.0
    language_quality: float = 0.0
    factual_consistency: float = 0.0
    emotional_manipulation: float = 0.0


class SourceVerification(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_official: bool = False
    has_verification_badge: bool = False
    historical_reliability: float = Field(0.5, ge=0.0, le=1.0)
    domain_trust: float = Field(0.5, ge=0.0, le=1.0)


class LocationVerification(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid_coordinates: bool = False
    is_known_disaster_zone: bool = False
    population_density: float = Field(0.5, ge=0.0, le=1.0)
    infrastructure_risk: float = Field(0.5, ge=0.0, le=1.0)


class TemporalAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_recent_event: bool = True
    has_temporal_consistency: bool = True
    matches_weather_patterns: bool = False
    follows_disaster_timeline: bool = True


class CrossReferenceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    found_in_official_sources: bool = False
    contradicted_by_official_sources: bool = False
    similar_alerts_count: int = Field(0, ge=0)
    official_sources_checked: list[str] = Field(default_factory=list)


class TrustBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_analysis: ContentAnalysis
    source_verification: SourceVerification
    location_verification: LocationVerification
    temporal_analysis: TemporalAnalysis
    cross_reference: CrossReferenceResult


class TrustScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: float = Field(..., ge=0.0, le=1.0)
    content: float = Field(..., ge=0.0, le=1.0)
    source: float = Field(..., ge=0.0, le=1.0)
    location: float = Field(..., ge=0.0, le=1.0)
    temporal: float = Field(..., ge=0.0, le=1.0)
    cross_reference: float = Field(..., ge=0.0, le=1.0)
    breakdown: TrustBreakdown | None = None


class VerificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    alert_id: str
    is_verified: bool
    trust_score: TrustScore
    flags: list[VerificationFlag] = Field(default_factory=list)
    reasoning: str
    recommendations: list[str] = Field(default_factory=list)
    processing_time: float = Field(0.0, ge=0.0, description="Milliseconds")
    timestamp: int


class FlagCount(BaseModel):
    flag: str
    count: int


class VerificationStats(BaseModel):
    total: int
    verified: int
    flagged: int
    verification_rate: float
    avg_trust_score: float
    avg_processing_time: float
    common_flags: list[FlagCount] = Field(default_factory=list)
