#!/usr/bin/env python3
"""
Park Linking — Best-Match Selection

For one source park, scores every candidate with the composite scorer
and keeps the single best one.  "No match" is a normal outcome: the
matcher returns None (or a ``no_match`` result) rather than raising.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from .composite_scorer import LinkerConfig, PairScore, score_pair
from .records import CandidateRecord, SourceRecord, as_candidate_record, as_source_record

logger = logging.getLogger(__name__)

STATUS_MATCHED = "matched"
STATUS_NO_MATCH = "no_match"
STATUS_ERROR = "error"


@dataclass
class MatchResult:
    """Outcome of linking one source park."""

    source_id: str
    candidate_id: str | None
    confidence_score: float
    match_method: str
    status: str  # "matched" | "no_match" | "error"
    candidate_external_id: str | None = None
    name_similarity: float | None = None
    location_similarity: float | None = None
    distance_km: float | None = None
    error: str | None = None

    @property
    def is_match(self) -> bool:
        return self.candidate_id is not None

    def to_dict(self) -> dict[str, Any]:
        def _r(value: float | None) -> float | None:
            return round(value, 4) if value is not None else None

        return {
            "source_id": self.source_id,
            "candidate_id": self.candidate_id,
            "candidate_external_id": self.candidate_external_id,
            "confidence_score": _r(self.confidence_score),
            "name_similarity": _r(self.name_similarity),
            "location_similarity": _r(self.location_similarity),
            "distance_km": _r(self.distance_km),
            "match_method": self.match_method,
            "status": self.status,
            "error": self.error,
        }


def iter_candidates(
    candidates: Iterable[CandidateRecord | Mapping[str, Any]],
) -> Iterator[CandidateRecord]:
    """Coerce candidates to records, skipping any that cannot be read."""
    for index, raw in enumerate(candidates):
        try:
            yield as_candidate_record(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping unreadable candidate #%d: %s", index, e)


def best_candidate(
    source: SourceRecord,
    candidates: Iterable[CandidateRecord],
    config: LinkerConfig,
) -> tuple[CandidateRecord, PairScore] | None:
    """
    Return the highest-scoring candidate regardless of threshold.

    Candidates farther than ``config.max_distance_km`` are excluded; pairs
    whose distance is unknown are kept.  The first candidate to reach the
    maximum wins.  A candidate that cannot be scored is skipped with a
    warning.
    """
    best: tuple[CandidateRecord, PairScore] | None = None

    for candidate in candidates:
        try:
            pair = score_pair(source, candidate, config)
        except Exception as e:
            logger.warning(
                "Skipping candidate %s for source %s: %s",
                getattr(candidate, "id", "?"), source.id, e,
            )
            continue

        if (
            config.max_distance_km is not None
            and pair.distance_km is not None
            and pair.distance_km > config.max_distance_km
        ):
            continue
        if not math.isfinite(pair.score):
            continue

        if best is None or pair.score > best[1].score:
            best = (candidate, pair)

    return best


def evaluate_source(
    source: SourceRecord | Mapping[str, Any],
    candidates: Iterable[CandidateRecord | Mapping[str, Any]],
    config: LinkerConfig | None = None,
) -> MatchResult:
    """
    Link one source park and always return a result.

    Below-threshold outcomes are reported as ``no_match`` carrying the best
    score seen, so callers can audit near misses.
    """
    if config is None:
        config = LinkerConfig()

    record = as_source_record(source)
    best = best_candidate(record, iter_candidates(candidates), config)

    if best is None:
        return MatchResult(
            source_id=record.id,
            candidate_id=None,
            confidence_score=0.0,
            match_method=config.match_method,
            status=STATUS_NO_MATCH,
        )

    candidate, pair = best
    if pair.score < config.threshold:
        return MatchResult(
            source_id=record.id,
            candidate_id=None,
            confidence_score=pair.score,
            match_method=config.match_method,
            status=STATUS_NO_MATCH,
            name_similarity=pair.name_similarity,
            location_similarity=pair.location_similarity,
            distance_km=pair.distance_km,
        )

    return MatchResult(
        source_id=record.id,
        candidate_id=candidate.id,
        confidence_score=pair.score,
        match_method=config.match_method,
        status=STATUS_MATCHED,
        candidate_external_id=candidate.external_id,
        name_similarity=pair.name_similarity,
        location_similarity=pair.location_similarity,
        distance_km=pair.distance_km,
    )


def find_best_match(
    source: SourceRecord | Mapping[str, Any],
    candidates: Iterable[CandidateRecord | Mapping[str, Any]],
    config: LinkerConfig | None = None,
    *,
    threshold: float | None = None,
    max_distance_km: float | None = None,
) -> MatchResult | None:
    """
    Find the best candidate for a source park.

    Parameters
    ----------
    source : SourceRecord or dict
        The park being linked.
    candidates : iterable of CandidateRecord or dict
        Parks from the secondary catalog.
    config : LinkerConfig, optional
        Scoring configuration. Uses defaults if not provided.
    threshold, max_distance_km : float, optional
        Per-call overrides of the config values.

    Returns
    -------
    A ``matched`` MatchResult with confidence_score >= threshold, or None
    when the candidate list is empty or nothing qualifies.
    """
    if config is None:
        config = LinkerConfig()
    config = config.with_overrides(threshold=threshold, max_distance_km=max_distance_km)

    result = evaluate_source(source, candidates, config)
    return result if result.is_match else None
