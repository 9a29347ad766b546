from __future__ import annotations

import math

import httpx

from .lookups import DisasterZoneLookup, LookupFailure, StaticDisasterZoneLookup, resolve_lookup
from .models import AlertLocation, LocationVerification

NEUTRAL_GEO_SIGNAL = 0.5


def is_valid_coordinates(lat: float, lng: float) -> bool:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


class LocationVerifier:
    """Validate coordinates and check them against a disaster-zone registry.

    Population density and infrastructure risk stay neutral until a
    geospatial data source is wired in.
    """

    def __init__(self, zones: DisasterZoneLookup | None = None, *, timeout: float | None = None) -> None:
        self._zones = zones or StaticDisasterZoneLookup()
        self._timeout = timeout

    async def verify(self, location: AlertLocation) -> LocationVerification:
        valid = is_valid_coordinates(location.lat, location.lng)
        in_zone = False
        if valid:
            in_zone = await resolve_lookup(
                self._zones.is_disaster_zone(location.lat, location.lng),
                False,
                name="disaster-zone",
                timeout=self._timeout,
            )
        return LocationVerification(
            is_valid_coordinates=valid,
            is_known_disaster_zone=bool(in_zone),
            population_density=NEUTRAL_GEO_SIGNAL,
            infrastructure_risk=NEUTRAL_GEO_SIGNAL,
        )


class DisasterZoneClient:
    """
    Disaster-zone registry over HTTP.

    ``GET {base_url}/zones?lat=..&lng=..`` is expected to answer
    ``{"in_disaster_zone": <bool>}``.
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

    async def is_disaster_zone(self, lat: float, lng: float) -> bool:
        params = {"lat": lat, "lng": lng}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(f"{self._base_url}/zones", params=params)
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise LookupFailure(f"disaster-zone lookup for ({lat}, {lng}) failed: {exc}") from exc
        if not isinstance(payload, dict) or "in_disaster_zone" not in payload:
            raise LookupFailure(f"malformed disaster-zone payload: {payload!r}")
        return bool(payload["in_disaster_zone"])
