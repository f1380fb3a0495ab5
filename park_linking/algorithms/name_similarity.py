#!/usr/bin/env python3
"""
Park Linking — Name Similarity

Computes similarity scores between park names using normalised
Levenshtein distance over a tightly packed alphanumeric form of each name.

Dependencies:
    pip install rapidfuzz
"""

from __future__ import annotations

import re
import unicodedata

from rapidfuzz.distance import Levenshtein


_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(name: str | None) -> str:
    """
    Normalize a park name for comparison.

    Steps:
        1. Unicode NFKD normalisation (strip accents)
        2. Lowercase
        3. Remove every non-alphanumeric character, whitespace included

    "Hawai'i Volcanoes" → "hawaiivolcanoes"
    """
    if not name:
        return ""

    text = unicodedata.normalize("NFKD", str(name))
    text = "".join(c for c in text if not unicodedata.combining(c))

    return _NON_ALNUM.sub("", text.lower())


# ---------------------------------------------------------------------------
# Scoring functions
# ---------------------------------------------------------------------------


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost edit distance (insert / delete / substitute)."""
    return Levenshtein.distance(a or "", b or "")


def name_similarity(name_a: str | None, name_b: str | None) -> float:
    """
    Normalised Levenshtein similarity between two raw park names.

    Both names are normalised first.  Returns a value in [0.0, 1.0] where
    1.0 means the normalised forms are identical.  An empty name on either
    side always scores 0.0.
    """
    norm_a = normalize_name(name_a)
    norm_b = normalize_name(name_b)

    if not norm_a or not norm_b:
        return 0.0
    if norm_a == norm_b:
        return 1.0

    max_len = max(len(norm_a), len(norm_b))
    dist = levenshtein_distance(norm_a, norm_b)
    return min(1.0, max(0.0, 1.0 - dist / max_len))


def names_are_similar(
    name_a: str | None,
    name_b: str | None,
    threshold: float = 0.80,
) -> bool:
    """Return True if the two names reach the similarity threshold."""
    return name_similarity(name_a, name_b) >= threshold
