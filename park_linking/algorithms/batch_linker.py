#!/usr/bin/env python3
"""
Park Linking — Batch Linker

Runs the matcher for every source park against the full candidate list
and reports progress as it goes.  Each source park yields exactly one
MatchResult: ``matched``, ``no_match``, or ``error`` when the record could
not be evaluated at all.  One bad record never stops the batch.

Strategy:
    1. Coerce candidates once (unreadable ones are skipped with a warning)
    2. Evaluate each source park independently, in input order
    3. Optionally shard source parks across worker processes
    4. Optionally make candidate claims exclusive (greedy, first come)
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Iterator, Mapping

from .composite_scorer import LinkerConfig
from .matcher import (
    STATUS_ERROR,
    STATUS_MATCHED,
    STATUS_NO_MATCH,
    MatchResult,
    evaluate_source,
    iter_candidates,
)
from .records import CandidateRecord, SourceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkProgress:
    """Emitted after each source park has been evaluated."""

    current: int
    total: int
    matched: int
    current_name: str
    result: MatchResult

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 1.0


ProgressCallback = Callable[[LinkProgress], None]


# ---------------------------------------------------------------------------
# Per-record evaluation
# ---------------------------------------------------------------------------


def _source_id(source: Any, index: int) -> str:
    if isinstance(source, SourceRecord):
        return source.id
    if isinstance(source, Mapping) and source.get("id") is not None:
        return str(source["id"])
    return f"#{index}"


def _source_name(source: Any) -> str:
    if isinstance(source, SourceRecord):
        return source.name
    if isinstance(source, Mapping):
        for key in ("name", "full_name", "label"):
            if source.get(key):
                return str(source[key])
    return ""


def _safe_evaluate(
    index: int,
    source: Any,
    candidates: Iterable[CandidateRecord],
    config: LinkerConfig,
) -> MatchResult:
    """Evaluate one source park, turning any failure into an error result."""
    try:
        return evaluate_source(source, candidates, config)
    except Exception as e:
        return _error_result(index, source, config, e)


def _error_result(index: int, source: Any, config: LinkerConfig, exc: Exception) -> MatchResult:
    logger.warning("Could not evaluate source record %s: %s", _source_id(source, index), exc)
    return MatchResult(
        source_id=_source_id(source, index),
        candidate_id=None,
        confidence_score=0.0,
        match_method=config.match_method,
        status=STATUS_ERROR,
        error=f"{type(exc).__name__}: {exc}",
    )


# Set in each worker process by _init_worker
_worker_candidates: list[CandidateRecord] = []
_worker_config: LinkerConfig | None = None


def _init_worker(candidates: list[CandidateRecord], config: LinkerConfig) -> None:
    global _worker_candidates, _worker_config
    _worker_candidates = candidates
    _worker_config = config


def _evaluate_in_worker(task: tuple[int, Any]) -> MatchResult:
    index, source = task
    return _safe_evaluate(index, source, _worker_candidates, _worker_config)


# ---------------------------------------------------------------------------
# Batch driver
# ---------------------------------------------------------------------------


def _sequential(sources, pool, config) -> Iterator[MatchResult]:
    for index, source in enumerate(sources):
        yield _safe_evaluate(index, source, pool, config)


def _exclusive(sources, pool, config) -> Iterator[MatchResult]:
    claimed: set[str] = set()
    for index, source in enumerate(sources):
        available = (c for c in pool if c.assignment_key not in claimed)
        result = _safe_evaluate(index, source, available, config)
        if result.is_match:
            claimed.add(result.candidate_external_id or result.candidate_id)
        yield result


def _parallel(sources, pool, config, workers: int) -> Iterator[MatchResult]:
    # One task per source so a record that cannot be shipped fails alone.
    # Scoring never reads candidate metadata, so workers get it stripped.
    shipped = [replace(c, metadata={}) for c in pool]
    with ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_worker,
        initargs=(shipped, config),
    ) as ex:
        futures = [ex.submit(_evaluate_in_worker, (i, s)) for i, s in enumerate(sources)]
        for index, future in enumerate(futures):
            try:
                yield future.result()
            except Exception as e:
                yield _error_result(index, sources[index], config, e)


def iter_links(
    sources: Iterable[SourceRecord | Mapping[str, Any]],
    candidates: Iterable[CandidateRecord | Mapping[str, Any]],
    config: LinkerConfig | None = None,
    *,
    threshold: float | None = None,
    max_distance_km: float | None = None,
    workers: int = 1,
    unique_candidates: bool | None = None,
) -> Iterator[LinkProgress]:
    """
    Link every source park, yielding a LinkProgress event per park.

    Each event carries the park's MatchResult.  Nothing is yielded when
    either input is empty.
    """
    if config is None:
        config = LinkerConfig()
    config = config.with_overrides(
        threshold=threshold,
        max_distance_km=max_distance_km,
        unique_candidates=unique_candidates,
    )

    sources = list(sources)
    pool = list(iter_candidates(candidates))
    if not sources or not pool:
        return

    total = len(sources)
    logger.info(
        "Linking %d source parks against %d candidates (threshold %.2f)",
        total, len(pool), config.threshold,
    )

    if config.unique_candidates:
        if workers > 1:
            logger.warning("Exclusive candidate claims need sequential evaluation; ignoring workers=%d", workers)
        results = _exclusive(sources, pool, config)
    elif workers > 1:
        results = _parallel(sources, pool, config, workers)
    else:
        results = _sequential(sources, pool, config)

    t0 = time.time()
    matched = 0
    for index, result in enumerate(results):
        if result.is_match:
            matched += 1
        yield LinkProgress(
            current=index + 1,
            total=total,
            matched=matched,
            current_name=_source_name(sources[index]),
            result=result,
        )

    logger.debug("Linked %d/%d source parks in %.1fs", matched, total, time.time() - t0)


def link_all(
    sources: Iterable[SourceRecord | Mapping[str, Any]],
    candidates: Iterable[CandidateRecord | Mapping[str, Any]],
    config: LinkerConfig | None = None,
    *,
    threshold: float | None = None,
    max_distance_km: float | None = None,
    on_progress: ProgressCallback | None = None,
    workers: int = 1,
    unique_candidates: bool | None = None,
) -> list[MatchResult]:
    """
    Link every source park and return one MatchResult per park.

    Results keep the input order of ``sources`` and include ``no_match``
    and ``error`` outcomes; use ``accepted_links`` for the matched subset.
    ``on_progress`` is called with a LinkProgress after each park.
    """
    results: list[MatchResult] = []
    for event in iter_links(
        sources,
        candidates,
        config,
        threshold=threshold,
        max_distance_km=max_distance_km,
        workers=workers,
        unique_candidates=unique_candidates,
    ):
        results.append(event.result)
        if on_progress is not None:
            on_progress(event)
    return results


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------


def accepted_links(results: Iterable[MatchResult]) -> list[MatchResult]:
    """Return only the results that linked to a candidate."""
    return [r for r in results if r.is_match]


def summarize(results: list[MatchResult]) -> dict[str, Any]:
    """Counts and rates for a finished batch."""
    counts = {STATUS_MATCHED: 0, STATUS_NO_MATCH: 0, STATUS_ERROR: 0}
    for r in results:
        counts[r.status] = counts.get(r.status, 0) + 1

    matched_scores = [r.confidence_score for r in results if r.is_match]
    processed = len(results)

    return {
        "processed": processed,
        "matched": counts[STATUS_MATCHED],
        "no_match": counts[STATUS_NO_MATCH],
        "errors": counts[STATUS_ERROR],
        "match_rate": round(counts[STATUS_MATCHED] / processed, 4) if processed else 0.0,
        "mean_confidence": (
            round(sum(matched_scores) / len(matched_scores), 4) if matched_scores else None
        ),
    }
