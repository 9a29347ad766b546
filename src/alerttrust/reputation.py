from __future__ import annotations

import math
from urllib.parse import quote

import httpx

from .lookups import LookupFailure


class ReputationClient:
    """
    Source reputation backed by an HTTP reputation service.

    ``GET {base_url}/sources/{source_id}`` is expected to answer
    ``{"reliability": <float 0-1>}``; a 404 means the source has no history.
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
        self._cache: dict[str, float | None] = {}

    async def fetch_reliability(self, source_id: str) -> float | None:
        if source_id in self._cache:
            return self._cache[source_id]
        score = await self._query(source_id)
        self._cache[source_id] = score
        return score

    async def _query(self, source_id: str) -> float | None:
        endpoint = f"{self._base_url}/sources/{quote(source_id, safe='')}"
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(endpoint)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise LookupFailure(f"reputation lookup for {source_id!r} failed: {exc}") from exc
        if not isinstance(payload, dict) or payload.get("reliability") is None:
            return None
        try:
            reliability = float(payload["reliability"])
        except (TypeError, ValueError) as exc:
            raise LookupFailure(f"malformed reliability for {source_id!r}: {payload!r}") from exc
        if not math.isfinite(reliability):
            raise LookupFailure(f"non-finite reliability for {source_id!r}: {payload!r}")
        return max(0.0, min(1.0, reliability))
