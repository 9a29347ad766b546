"""
Cross-reference alerts against authoritative alert feeds
"""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from .lookups import FeedMatch, LookupFailure, OfficialFeedLookup, StaticOfficialFeedLookup, resolve_lookup
from .models import Alert, CrossReferenceResult


class CrossReferenceChecker:
    """Look for corroboration or contradiction of an alert in official feeds"""

    def __init__(
        self,
        feed: OfficialFeedLookup | None = None,
        *,
        official_sources: Sequence[str] = (),
        timeout: float | None = None,
    ) -> None:
        self._official_sources = tuple(official_sources)
        self._feed = feed or StaticOfficialFeedLookup(sources=self._official_sources)
        self._timeout = timeout

    async def check(self, alert: Alert) -> CrossReferenceResult:
        fallback = CrossReferenceResult(official_sources_checked=list(self._official_sources))
        return await resolve_lookup(
            self._lookup(alert),
            fallback,
            name="official-feed",
            timeout=self._timeout,
        )

    async def _lookup(self, alert: Alert) -> CrossReferenceResult:
        match = await self._feed.cross_reference(alert)
        try:
            similar = max(0, int(match.similar_count))
            checked = [str(name) for name in (match.sources_checked or self._official_sources)]
        except (TypeError, ValueError, OverflowError) as exc:
            raise LookupFailure(f"malformed official feed match for {alert.id!r}: {match!r}") from exc
        return CrossReferenceResult(
            found_in_official_sources=bool(match.found),
            contradicted_by_official_sources=bool(match.contradicted),
            similar_alerts_count=similar,
            official_sources_checked=checked,
        )


class OfficialFeedClient:
    """
    Official alert feed aggregator over HTTP.

    ``POST {base_url}/cross-reference`` with the alert as JSON is expected to
    answer ``{"found": bool, "contradicted": bool, "similar_count": int,
    "sources_checked": [str, ...]}``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def cross_reference(self, alert: Alert) -> FeedMatch:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/cross-reference",
                    json=alert.model_dump(mode="json"),
                )
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise LookupFailure(f"official feed lookup for {alert.id!r} failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise LookupFailure(f"malformed official feed payload: {payload!r}")
        try:
            similar = int(payload.get("similar_count", 0))
        except (TypeError, ValueError) as exc:
            raise LookupFailure(f"malformed similar_count: {payload.get('similar_count')!r}") from exc
        checked = payload.get("sources_checked") or []
        return FeedMatch(
            found=bool(payload.get("found", False)),
            contradicted=bool(payload.get("contradicted", False)),
            similar_count=similar,
            sources_checked=tuple(str(name) for name in checked),
        )
