#!/usr/bin/env python3
"""CLI script for building the athlete search index and histogram artifacts.

Usage:
    # Build everything from data/ (races.json + {slug}.csv)
    python backend/scripts/build_indexes.py --data-dir data

    # Skip precomputed histograms (faster, result pages bin on demand)
    python backend/scripts/build_indexes.py --data-dir data --no-histograms

    # Build, then try a search against the fresh index
    python backend/scripts/build_indexes.py --data-dir data --search "jane"
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.features.athletes import AthleteIndex, AthleteSearchIndex
from app.features.athletes.pipeline import build_artifacts
from app.features.races import RaceCatalog
from app.shared.formatters import format_time


def print_summary(index: AthleteIndex, elapsed_s: float) -> None:
    """Print build counters and the slowest/fastest courses."""
    print(f"\nProcessed {index.total_results} results across {index.races_indexed} races")
    if index.races_skipped:
        print(f"Skipped {len(index.races_skipped)} race(s): {', '.join(index.races_skipped)}")
    print(f"Deduplicated to {len(index.entries)} unique athletes")
    repeaters = sum(1 for e in index.entries if e.race_count > 1)
    print(f"Athletes with 2+ races: {repeaters}")
    print(f"Courses: {len(index.courses)}")
    print(f"Done in {elapsed_s:.1f}s")

    courses = sorted(
        (c for c in index.courses if c.median_finish_seconds > 0),
        key=lambda c: c.median_finish_seconds,
    )
    for distance in ("70.3", "140.6"):
        ranked = [c for c in courses if c.distance == distance]
        if not ranked:
            continue
        print(f"\n=== {distance} courses by median finish ===")
        for c in ranked:
            print(
                f"  {c.display_name:<40s} {format_time(c.median_finish_seconds):>8s}  "
                f"({c.editions} editions, {c.total_finishers} finishers)"
            )


def print_search(index: AthleteIndex, query: str) -> None:
    """Run a query against the freshly built index."""
    print(f'\nSearch "{query}":')
    found = AthleteSearchIndex(index.entries).search(query, limit=20)
    for e in found:
        races = "race" if e.race_count == 1 else "races"
        print(f"  {e.full_name}  {e.country_iso}  {e.race_count} {races}  [{e.key}]")
    if not found:
        print(f'  No results for "{query}"')


def main() -> None:
    parser = argparse.ArgumentParser(description="Build athlete index and histogram artifacts")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir, help="Directory with races.json and race CSVs")
    parser.add_argument("--out", type=Path, default=None, help="Output directory (default: data dir)")
    parser.add_argument("--no-histograms", action="store_true", help="Don't precompute result histograms")
    parser.add_argument("--search", help="Search the built index by name")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    catalog = RaceCatalog(args.data_dir)
    if catalog.manifest_path() is None:
        print(f"Races manifest not found in {args.data_dir}")
        sys.exit(1)

    print(f"Building athlete index from {len(catalog.races)} race(s)...")
    start = time.monotonic()
    index = build_artifacts(catalog, args.out, with_histograms=not args.no_histograms)
    print_summary(index, time.monotonic() - start)

    if args.search:
        print_search(index, args.search)


if __name__ == "__main__":
    main()
