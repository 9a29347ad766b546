"""
External lookup capabilities consumed by the analyzers.

Each capability can be backed by a real data source (see the HTTP clients in
reputation.py, location.py and external_verifier.py) or by the deterministic
in-memory simulators below. The simulators are the substitution points for
production data: reputation history, disaster-zone registries and official
alert feeds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from .models import Alert

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LookupFailure(Exception):
    """An external lookup timed out, errored or returned an unusable payload."""


@dataclass(frozen=True)
class FeedMatch:
    found: bool = False
    contradicted: bool = False
    similar_count: int = 0
    sources_checked: tuple[str, ...] = ()


class ReputationLookup(Protocol):
    async def fetch_reliability(self, source_id: str) -> float | None:
        """Historical reliability in [0, 1], or None when there is no history."""


class DisasterZoneLookup(Protocol):
    async def is_disaster_zone(self, lat: float, lng: float) -> bool:
        ...


class OfficialFeedLookup(Protocol):
    async def cross_reference(self, alert: Alert) -> FeedMatch:
        ...


async def resolve_lookup(call: Awaitable[T], default: T, *, name: str, timeout: float | None = None) -> T:
    """Await a lookup, returning ``default`` if it fails or times out."""
    try:
        if timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("%s lookup timed out after %.1fs, using default %r", name, timeout, default)
    except Exception as exc:
        logger.warning("%s lookup failed (%s: %s), using default %r", name, type(exc).__name__, exc, default)
    return default


@dataclass
class StaticReputationLookup:
    """Reputation history from a fixed mapping of source id to reliability."""

    scores: Mapping[str, float] = field(default_factory=dict)

    async def fetch_reliability(self, source_id: str) -> float | None:
        return self.scores.get(source_id)


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


@dataclass
class StaticDisasterZoneLookup:
    """Disaster-zone registry from a fixed list of bounding boxes."""

    zones: Iterable[BoundingBox] = ()

    def __post_init__(self) -> None:
        self.zones = tuple(self.zones)

    async def is_disaster_zone(self, lat: float, lng: float) -> bool:
        return any(zone.contains(lat, lng) for zone in self.zones)


@dataclass
class StaticOfficialFeedLookup:
    """
    Official feed matches keyed by alert id. Alerts without an entry are
    reported as not found in any of ``sources``.
    """

    matches: Mapping[str, FeedMatch] = field(default_factory=dict)
    sources: tuple[str, ...] = ()

    async def cross_reference(self, alert: Alert) -> FeedMatch:
        match = self.matches.get(alert.id)
        if match is not None:
            return match
        return FeedMatch(sources_checked=tuple(self.sources))
