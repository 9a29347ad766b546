"""
Keyword and pattern tables used by the content and source analyzers.

The tables are built once at import and shared read-only by every
verification. A JSON file can override individual tables at engine build time.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SUSPICIOUS_PATTERN_SOURCES: tuple[str, ...] = (
    r"urgent.*forward.*everyone",
    r"breaking.*news.*share",
    r"government.*hiding.*truth",
    r"miracle.*cure.*covid",
    r"fake.*vaccine",
    r"conspiracy",
    r"they.*don't.*want.*you.*to.*know",
    r"share.*before.*deleted",
    r"doctors.*hate.*this",
    r"secret.*government",
)

RELIABLE_SOURCE_KEYWORDS: tuple[str, ...] = (
    "ndma",
    "disaster management",
    "official",
    "verified",
    "government",
    "police",
    "fire department",
    "hospital",
    "red cross",
    "who",
    "health ministry",
    "meteorological",
)

EMERGENCY_KEYWORDS: tuple[str, ...] = (
    "earthquake",
    "flood",
    "fire",
    "cyclone",
    "tsunami",
    "landslide",
    "emergency",
    "evacuation",
    "rescue",
    "medical emergency",
    "disaster",
    "alert",
    "warning",
)

MANIPULATION_KEYWORDS: tuple[str, ...] = (
    "urgent",
    "immediately",
    "shocking",
    "unbelievable",
    "must share",
)


def compile_patterns(values: Any) -> tuple[re.Pattern, ...]:
    """Compile regex patterns from a list of strings or dicts with 'pattern'."""
    compiled: list[re.Pattern] = []
    if not isinstance(values, (list, tuple)):
        return ()
    for item in values:
        raw = item.get("pattern") if isinstance(item, dict) else item
        if not isinstance(raw, str):
            continue
        try:
            compiled.append(re.compile(raw, re.I))
        except re.error as exc:
            logger.warning("Skip invalid pattern %s: %s", raw, exc)
    return tuple(compiled)


def _keywords(values: Any) -> tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(str(value).lower() for value in values if str(value).strip())


@dataclass(frozen=True)
class HeuristicTables:
    suspicious_patterns: tuple[re.Pattern, ...]
    reliable_source_keywords: tuple[str, ...]
    emergency_keywords: tuple[str, ...]
    manipulation_keywords: tuple[str, ...]


DEFAULT_HEURISTICS = HeuristicTables(
    suspicious_patterns=compile_patterns(SUSPICIOUS_PATTERN_SOURCES),
    reliable_source_keywords=RELIABLE_SOURCE_KEYWORDS,
    emergency_keywords=EMERGENCY_KEYWORDS,
    manipulation_keywords=MANIPULATION_KEYWORDS,
)


def load_heuristics(path: str | Path | None) -> HeuristicTables:
    """
    Build heuristic tables from a JSON file, falling back to the defaults
    for any table the file does not provide.

    Recognised keys: suspicious_patterns, reliable_source_keywords,
    emergency_keywords, manipulation_keywords.
    """
    if not path:
        return DEFAULT_HEURISTICS
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Heuristics file {file_path} must contain a JSON object")

    overrides: dict[str, tuple] = {}
    if "suspicious_patterns" in data:
        overrides["suspicious_patterns"] = compile_patterns(data["suspicious_patterns"])
    for key in ("reliable_source_keywords", "emergency_keywords", "manipulation_keywords"):
        if key in data:
            overrides[key] = _keywords(data[key])

    tables = replace(DEFAULT_HEURISTICS, **overrides)
    logger.info(
        "Loaded heuristics from %s (%d patterns, %d emergency keywords)",
        file_path,
        len(tables.suspicious_patterns),
        len(tables.emergency_keywords),
    )
    return tables
