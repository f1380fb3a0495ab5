"""Park Linking — Matching Algorithms."""

from .name_similarity import (
    levenshtein_distance,
    name_similarity,
    names_are_similar,
    normalize_name,
)
from .geo_proximity import (
    Coordinate,
    coerce_coordinate,
    distance_to_similarity,
    haversine_km,
    location_similarity,
)
from .records import (
    CandidateRecord,
    PlaceRecord,
    SourceRecord,
    as_candidate_record,
    as_source_record,
)
from .composite_scorer import (
    LinkerConfig,
    PairScore,
    overall_score,
    score_pair,
)
from .matcher import (
    MatchResult,
    evaluate_source,
    find_best_match,
)
from .batch_linker import (
    LinkProgress,
    accepted_links,
    iter_links,
    link_all,
    summarize,
)

__all__ = [
    "levenshtein_distance",
    "name_similarity",
    "names_are_similar",
    "normalize_name",
    "Coordinate",
    "coerce_coordinate",
    "distance_to_similarity",
    "haversine_km",
    "location_similarity",
    "CandidateRecord",
    "PlaceRecord",
    "SourceRecord",
    "as_candidate_record",
    "as_source_record",
    "LinkerConfig",
    "PairScore",
    "overall_score",
    "score_pair",
    "MatchResult",
    "evaluate_source",
    "find_best_match",
    "LinkProgress",
    "accepted_links",
    "iter_links",
    "link_all",
    "summarize",
]
