#!/usr/bin/env python3
"""
Recompute stats for published dataset versions and check them for drift.

Reads each version's interactions.jsonl, recomputes the dimension and tag
histograms, and compares them with the stored stats.json.

stats.json is derived data: it is fully determined by interactions.jsonl.
--write repairs a drifted or missing stats.json by regenerating it from the
snapshot. The published content (interactions.jsonl, labels.jsonl,
dataset.json, sha256.txt) is never modified, so a version stays write-once.

Typical usage:
  python3 scripts/recompute_version_stats.py --datasets datasets golden/v1 golden/v2
  python3 scripts/recompute_version_stats.py --datasets datasets --all --write
"""

from __future__ import annotations

import argparse
from pathlib import Path

from goldenset.analytics.stats import compute_stats
from goldenset.datasets.versions import STATS_FILE, VersionRepository
from goldenset.errors import GoldensetError
from goldenset.utils.io import read_json, write_json


def list_versions(datasets_dir: Path) -> list[str]:
    """Directory names of published versions (staging dirs excluded)."""
    if not datasets_dir.exists():
        return []
    return sorted(
        p.name for p in datasets_dir.iterdir()
        if p.is_dir() and not p.name.startswith(".")
    )


def recompute(repository: VersionRepository, name: str) -> tuple[dict, dict | None]:
    """
    Returns:
      fresh:  recomputed stats dict
      stored: stats.json contents, or None when the file is missing
    """
    snapshot = repository.load(name)
    fresh = compute_stats(list(snapshot.interactions.values())).to_dict()

    stats_path = repository.version_dir(name) / STATS_FILE
    stored = read_json(stats_path) if stats_path.exists() else None
    return fresh, stored


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute stats.json for published versions.")
    parser.add_argument("versions", nargs="*", help="Version names to check")
    parser.add_argument("--datasets", type=Path, default=Path("datasets"), help="Datasets directory")
    parser.add_argument("--all", action="store_true", help="Check every published version")
    parser.add_argument(
        "--write",
        action="store_true",
        help="Regenerate a drifted or missing stats.json from the snapshot (repair only)",
    )
    args = parser.parse_args(argv)

    repository = VersionRepository(args.datasets)
    names = list_versions(args.datasets) if args.all else args.versions
    if not names:
        print("No versions given (pass names or --all)")
        return 1

    drifted = 0
    for name in names:
        try:
            fresh, stored = recompute(repository, name)
        except GoldensetError as e:
            print(f"{name}: ERROR {e}")
            return 1

        if fresh == stored:
            print(f"{name}: ok ({fresh['total']} interactions)")
            continue

        drifted += 1
        print(f"{name}: stats.json {'missing' if stored is None else 'drifted'}")
        if args.write:
            write_json(repository.version_dir(name) / STATS_FILE, fresh)
            print(f"  rewrote {repository.version_dir(name) / STATS_FILE}")

    return 2 if drifted and not args.write else 0


if __name__ == "__main__":
    raise SystemExit(main())
