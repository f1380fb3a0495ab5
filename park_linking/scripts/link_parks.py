#!/usr/bin/env python3
"""
Park Linking — Link NPS Parks to Wikidata Parks

Loads two JSON exports (the authoritative park catalog and the secondary
Wikidata catalog), links every source park to at most one candidate and
writes a link report.  Nothing is written back to the database; loading
the report is left to the import job.

Strategy:
    1. Load source parks and candidate parks
    2. Link each source park against the full candidate list
    3. Output: accepted links (optionally all outcomes) + summary

Usage:
    park-linking \
        --sources exports/nps_parks.json \
        --candidates exports/wikidata_parks.json \
        --output-dir output/links/

Dependencies:
    pip install rapidfuzz pyyaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from park_linking.algorithms.batch_linker import LinkProgress, link_all, summarize
from park_linking.algorithms.composite_scorer import DEFAULT_CONFIG_PATH, LinkerConfig
from park_linking.algorithms.matcher import MatchResult

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data loading
# ---------------------------------------------------------------------------


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """
    Load a list of park records from a JSON file.

    Accepts a bare array or a ``{"data": [...]}`` envelope as returned by
    the catalog APIs.
    """
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]
    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a JSON array of records")

    logger.info("Loaded %d records from %s", len(payload), path)
    return payload


# ---------------------------------------------------------------------------
# Main pipeline
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Link national-park records to their Wikidata counterparts",
    )
    parser.add_argument(
        "--sources",
        required=True,
        help="JSON file of source parks (id, full_name, latitude, longitude)",
    )
    parser.add_argument(
        "--candidates",
        required=True,
        help="JSON file of candidate parks (id, wikidata_id, label, latitude, longitude)",
    )
    parser.add_argument(
        "--output-dir",
        default="output/links",
        help="Directory for link reports (default: output/links/)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to link_rules.yaml (default: bundled rules)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Minimum confidence for a link (default: from config, 0.8)",
    )
    parser.add_argument(
        "--max-distance",
        type=float,
        default=None,
        help="Exclude candidates farther than this many km",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes for scoring (default: 1)",
    )
    parser.add_argument(
        "--unique-candidates",
        action="store_true",
        default=None,
        help="Never link two source parks to the same candidate.",
    )
    parser.add_argument(
        "--include-unmatched",
        action="store_true",
        help="Write no_match and error outcomes alongside accepted links.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Link and log the summary without writing any files.",
    )
    return parser.parse_args(argv)


def _progress_logger(total: int):
    """Log progress roughly every 10% of the batch."""
    step = max(1, total // 10)

    def _log(event: LinkProgress) -> None:
        if event.current % step == 0 or event.current == event.total:
            logger.info(
                "  Progress: %d/%d (%d matched) - %s",
                event.current, event.total, event.matched, event.current_name[:30],
            )

    return _log


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.config:
        config = LinkerConfig.from_yaml(args.config)
        logger.info("Loaded link rules from %s", args.config)
    else:
        config = LinkerConfig.default()
        logger.info("Using bundled link rules from %s", DEFAULT_CONFIG_PATH)

    try:
        sources = load_records(args.sources)
        candidates = load_records(args.candidates)
    except (OSError, ValueError) as e:
        logger.error("Could not load input records: %s", e)
        return 1

    if not sources or not candidates:
        logger.warning("No parks to link. Run the catalog imports first.")

    t0 = time.time()
    results = link_all(
        sources,
        candidates,
        config,
        threshold=args.threshold,
        max_distance_km=args.max_distance,
        on_progress=_progress_logger(len(sources)),
        workers=args.workers,
        unique_candidates=args.unique_candidates,
    )
    elapsed = time.time() - t0

    summary = summarize(results)
    logger.info("Linking complete in %.1fs", elapsed)
    logger.info("  Matched    : %d", summary["matched"])
    logger.info("  No match   : %d", summary["no_match"])
    logger.info("  Errors     : %d", summary["errors"])
    logger.info("  Match rate : %.1f%%", summary["match_rate"] * 100)
    log_samples(results, sources)

    if args.dry_run:
        print(f"\nDRY RUN: {summary['matched']} links found. "
              f"Use without --dry-run to write reports.")
        return 0

    rows = [r.to_dict() for r in results if args.include_unmatched or r.is_match]
    write_output(rows, summary, args.output_dir)
    return 0


def log_samples(
    results: list[MatchResult],
    sources: list[Any],
    max_matches: int = 5,
    max_unmatched: int = 10,
) -> None:
    """Log a few accepted links and unmatched park names for a quick audit."""
    names = {}
    for s in sources:
        if isinstance(s, dict) and s.get("id") is not None:
            names[str(s["id"])] = s.get("full_name") or s.get("name") or s.get("label") or ""

    matches = [r for r in results if r.is_match]
    if matches:
        logger.info("Sample matches:")
        for r in matches[:max_matches]:
            logger.info(
                "  %s -> %s (%s) confidence %.3f",
                names.get(r.source_id) or r.source_id,
                r.candidate_id,
                r.candidate_external_id or "-",
                r.confidence_score,
            )

    unmatched = [r for r in results if not r.is_match]
    if unmatched:
        logger.info("Unmatched parks (%d):", len(unmatched))
        for r in unmatched[:max_unmatched]:
            logger.info("  - %s", names.get(r.source_id) or r.source_id)
        if len(unmatched) > max_unmatched:
            logger.info("  ... and %d more", len(unmatched) - max_unmatched)


def write_output(
    rows: list[dict],
    summary: dict[str, Any],
    output_dir: str,
) -> None:
    """Write the link report and summary stats."""
    out_path = Path(output_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")

    links_path = out_path / f"park_links_{ts}.json"
    with open(links_path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)
    logger.info("Wrote %d link rows to %s", len(rows), links_path)

    summary_path = out_path / f"link_summary_{ts}.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(
            {"timestamp": datetime.now(timezone.utc).isoformat(), **summary},
            f,
            indent=2,
            ensure_ascii=False,
        )
    logger.info("Wrote summary to %s", summary_path)


if __name__ == "__main__":
    sys.exit(main())
