from __future__ import annotations

import math

import tldextract

from .heuristics import DEFAULT_HEURISTICS, HeuristicTables
from .lookups import LookupFailure, ReputationLookup, StaticReputationLookup, resolve_lookup
from .models import AlertSource, SourceVerification

NEUTRAL_RELIABILITY = 0.5
NEUTRAL_DOMAIN_TRUST = 0.5
OFFICIAL_DOMAIN_TRUST = 0.9
OFFICIAL_SUFFIX_LABELS = frozenset({"gov", "mil", "int"})

# Bundled suffix snapshot only; never fetch the public suffix list at runtime.
_extract = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


class SourceVerifier:
    """Score how official and historically reliable an alert's claimed source is."""

    def __init__(
        self,
        reputation: ReputationLookup | None = None,
        *,
        heuristics: HeuristicTables = DEFAULT_HEURISTICS,
        timeout: float | None = None,
    ) -> None:
        self._reputation = reputation or StaticReputationLookup()
        self._heuristics = heuristics
        self._timeout = timeout

    async def verify(self, source: AlertSource) -> SourceVerification:
        reliability = NEUTRAL_RELIABILITY
        if source.id:
            reliability = await resolve_lookup(
                self._fetch_reliability(source.id),
                NEUTRAL_RELIABILITY,
                name="reputation",
                timeout=self._timeout,
            )
        return SourceVerification(
            is_official=self.is_official(source.name),
            has_verification_badge=False,
            historical_reliability=reliability,
            domain_trust=self.domain_trust(source),
        )

    async def _fetch_reliability(self, source_id: str) -> float:
        looked_up = await self._reputation.fetch_reliability(source_id)
        if looked_up is None:
            return NEUTRAL_RELIABILITY
        try:
            reliability = float(looked_up)
        except (TypeError, ValueError, OverflowError) as exc:
            raise LookupFailure(f"unusable reliability for {source_id!r}: {looked_up!r}") from exc
        if not math.isfinite(reliability):
            raise LookupFailure(f"non-finite reliability for {source_id!r}: {looked_up!r}")
        return max(0.0, min(1.0, reliability))

    def is_official(self, name: str) -> bool:
        if not name:
            return False
        lowered = name.lower()
        return any(keyword in lowered for keyword in self._heuristics.reliable_source_keywords)

    @staticmethod
    def domain_trust(source: AlertSource) -> float:
        """Government, military and intergovernmental domains are trusted more."""
        for candidate in (source.name, source.id):
            if not candidate or " " in candidate.strip():
                continue
            extracted = _extract(candidate)
            if not (extracted.domain and extracted.suffix):
                continue
            labels = set(extracted.suffix.lower().split("."))
            if labels & OFFICIAL_SUFFIX_LABELS:
                return OFFICIAL_DOMAIN_TRUST
            return NEUTRAL_DOMAIN_TRUST
        return NEUTRAL_DOMAIN_TRUST
