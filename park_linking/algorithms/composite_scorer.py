#!/usr/bin/env python3
"""
Park Linking — Composite Scorer

Combines name similarity and geospatial proximity into a single
confidence score (0.0–1.0) for a source/candidate pair.

The name signal always carries more weight than location.  When a record
has no coordinates the location component is simply 0.0; its weight is
not redistributed, so name-only pairs have a lower ceiling.

Dependencies:
    pip install rapidfuzz pyyaml
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .geo_proximity import DEFAULT_DECAY_KM, distance_to_similarity, haversine_km
from .name_similarity import name_similarity
from .records import CandidateRecord, SourceRecord


# ---------------------------------------------------------------------------
# Defaults (overridden by link_rules.yaml at runtime)
# ---------------------------------------------------------------------------

DEFAULT_WEIGHTS = {
    "name": 0.7,
    "location": 0.3,
}

DEFAULT_THRESHOLD = 0.8

MATCH_METHOD = "name_location_similarity"

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "link_rules.yaml"


# ---------------------------------------------------------------------------
# Configuration loader
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LinkerConfig:
    """Scoring and assignment settings, loadable from link_rules.yaml."""

    weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    threshold: float = DEFAULT_THRESHOLD
    max_distance_km: float | None = None
    decay_km: float = DEFAULT_DECAY_KM
    match_method: str = MATCH_METHOD
    unique_candidates: bool = False

    def __post_init__(self) -> None:
        name_w = self.weights.get("name")
        loc_w = self.weights.get("location")
        if name_w is None or loc_w is None:
            raise ValueError("weights must define 'name' and 'location'")
        if name_w <= 0 or loc_w < 0:
            raise ValueError("weights must be non-negative and the name weight positive")
        if name_w <= loc_w:
            raise ValueError("name weight must be greater than location weight")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.decay_km <= 0:
            raise ValueError(f"decay_km must be positive, got {self.decay_km}")
        if self.max_distance_km is not None and self.max_distance_km < 0:
            raise ValueError(f"max_distance_km must be non-negative, got {self.max_distance_km}")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LinkerConfig":
        """Load configuration from a YAML file."""
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}

        weights = raw.get("weights", {})
        thresholds = raw.get("thresholds", {})
        geo_raw = raw.get("geo_proximity", {})
        assignment = raw.get("assignment", {})

        return cls(
            weights={
                "name": weights.get("name", DEFAULT_WEIGHTS["name"]),
                "location": weights.get("location", DEFAULT_WEIGHTS["location"]),
            },
            threshold=thresholds.get("min_confidence", DEFAULT_THRESHOLD),
            max_distance_km=geo_raw.get("max_distance_km"),
            decay_km=geo_raw.get("decay_km", DEFAULT_DECAY_KM),
            match_method=raw.get("match_method", MATCH_METHOD),
            unique_candidates=assignment.get("unique_candidates", False),
        )

    @classmethod
    def default(cls) -> "LinkerConfig":
        """Load the shipped link_rules.yaml, or built-in defaults without it."""
        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)
        return cls()

    def with_overrides(self, **overrides: Any) -> "LinkerConfig":
        """Return a copy with every non-None keyword applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)


# ---------------------------------------------------------------------------
# Score fusion
# ---------------------------------------------------------------------------


def overall_score(
    name_similarity: float,
    location_similarity: float,
    *,
    weights: dict[str, float] | None = None,
) -> float:
    """
    Weighted average of the name and location components, in [0.0, 1.0].

    Both components at 1.0 give exactly 1.0; both at 0.0 give 0.0.
    """
    if weights is None:
        weights = DEFAULT_WEIGHTS
    name_w = weights["name"]
    loc_w = weights["location"]
    total = name_w + loc_w
    if total <= 0:
        raise ValueError(f"weights must sum to a positive value, got {weights}")

    score = (name_w * name_similarity + loc_w * location_similarity) / total
    return min(1.0, max(0.0, score))


@dataclass
class PairScore:
    """Component and fused scores for one source/candidate pair."""

    name_similarity: float
    location_similarity: float
    distance_km: float | None
    score: float


def score_pair(
    source: SourceRecord,
    candidate: CandidateRecord,
    config: LinkerConfig | None = None,
) -> PairScore:
    """Score one source record against one candidate record."""
    if config is None:
        config = LinkerConfig()

    name_sim = name_similarity(source.name, candidate.name)

    if source.location is not None and candidate.location is not None:
        dist = haversine_km(source.location, candidate.location)
        loc_sim = distance_to_similarity(dist, config.decay_km)
    else:
        dist = None
        loc_sim = 0.0

    return PairScore(
        name_similarity=name_sim,
        location_similarity=loc_sim,
        distance_km=dist,
        score=overall_score(name_sim, loc_sim, weights=config.weights),
    )
