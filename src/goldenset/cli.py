"""
Command-line interface for goldenset.

Usage:
    goldenset init
    goldenset ingest interactions data/interactions.jsonl
    goldenset stats --by intent,dept --where source=slack
    goldenset sample --n 200 --by intent,dept --seed 42 --out sample.jsonl
    goldenset label template --in sample.jsonl --out labels.jsonl
    goldenset publish --name golden/v1 --sample sample.jsonl --labels labels.jsonl
    goldenset versions list
    goldenset diff golden/v1 golden/v2 --by intent
    goldenset export --name golden/v1 --out golden_v1.jsonl
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import Sequence

from tqdm import tqdm

from goldenset import __version__
from goldenset.analytics.dedupe import dedupe_exact
from goldenset.analytics.grouping import filter_where, parse_keys, parse_where
from goldenset.analytics.sample import SampleOptions, stratified_sample, summarize_sample
from goldenset.analytics.stats import DimensionStats, compute_stats, format_stats
from goldenset.config import DEDUPE_METHODS, GoldensetConfig, load_config
from goldenset.datasets.diff import diff_versions
from goldenset.datasets.export import EXPORT_FORMATS, export_dataset
from goldenset.datasets.publish import make_label_templates, publish_dataset
from goldenset.datasets.report import format_diff_json, format_diff_text
from goldenset.datasets.versions import VersionRepository
from goldenset.errors import GoldensetError, NotFoundError, VersionExistsError
from goldenset.ingest import ParseResult, parse_artifacts, parse_interactions, parse_labels
from goldenset.store import SQLiteStore
from goldenset.utils.io import write_jsonl

logger = logging.getLogger("goldenset")


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def report_parse_errors(path: Path, result: ParseResult) -> None:
    if not result.errors:
        return
    logger.warning(f"Found {len(result.errors)} invalid lines in {path}:")
    for error in result.errors:
        logger.warning(f"  Line {error.line}: {error.error}")
        if error.content:
            logger.warning(f"    {error.content}...")


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def require_file(path: Path) -> Path:
    if not path.exists():
        raise GoldensetError(f"File not found: {path}")
    return path


def open_store(config: GoldensetConfig) -> SQLiteStore:
    if not config.db_path.exists():
        raise GoldensetError(f"No goldenset database at {config.db_path}. Run `goldenset init` first.")
    return SQLiteStore(config.db_path)


# =============================================================================
# Commands
# =============================================================================

def cmd_init(args: argparse.Namespace, config: GoldensetConfig) -> int:
    with SQLiteStore(config.db_path):
        pass
    print(f"Initialized goldenset in {config.data_dir}")
    return 0


def cmd_ingest(args: argparse.Namespace, config: GoldensetConfig) -> int:
    parsers = {
        "interactions": parse_interactions,
        "artifacts": parse_artifacts,
        "labels": parse_labels,
    }
    path = require_file(Path(args.file))

    result = parsers[args.kind](path)
    report_parse_errors(path, result)
    if result.errors and not result.items:
        logger.error(f"No valid {args.kind} in {path}")
        return 1

    with open_store(config) as store:
        upsert = {
            "interactions": store.upsert_interaction,
            "artifacts": store.upsert_artifact,
            "labels": store.upsert_label,
        }[args.kind]
        count = 0
        for item in tqdm(result.items, desc=f"Ingesting {args.kind}", disable=args.quiet):
            upsert(item)
            count += 1

    print(f"Ingested {count} {args.kind}")
    if result.errors:
        print(f"(Skipped {len(result.errors)} invalid lines)")
    return 0


def cmd_stats(args: argparse.Namespace, config: GoldensetConfig) -> int:
    with open_store(config) as store:
        interactions = store.get_all_interactions()

    interactions = filter_where(interactions, parse_where(args.where))
    stats = compute_stats(interactions, parse_keys(args.by) or None)
    print(format_stats(stats, top_tags=config.stats.top_tags))
    return 0


def cmd_sample(args: argparse.Namespace, config: GoldensetConfig) -> int:
    with open_store(config) as store:
        interactions = store.get_all_interactions()
    logger.info(f"Loaded {len(interactions)} interactions")

    dedupe = args.dedupe or config.sample.dedupe
    if dedupe == "exact":
        interactions = dedupe_exact(interactions)

    by = parse_keys(args.by)
    options = SampleOptions(
        n=args.n,
        by=by,
        where=parse_where(args.where),
        seed=args.seed if args.seed is not None else config.sample.seed,
        min_per_group=(
            args.min_per_group if args.min_per_group is not None else config.sample.min_per_group
        ),
    )
    logger.info(f"Performing stratified sampling (target: {options.n}, by: {by}, seed: {options.seed})")
    sampled = stratified_sample(interactions, options)

    out = Path(args.out)
    write_jsonl(out, (i.to_dict() for i in sampled))
    print(f"Sampled {len(sampled)} interactions to {out}")

    if by:
        print("\nStratification Summary:")
        for key, count in summarize_sample(sampled, by).items():
            print(f"  {key}: {count}")
    return 0


def cmd_label_template(args: argparse.Namespace, config: GoldensetConfig) -> int:
    path = require_file(Path(args.input))
    result = parse_interactions(path)
    report_parse_errors(path, result)
    if result.errors and not result.items:
        return 1

    labels = make_label_templates(result.items)
    write_jsonl(Path(args.out), (label.to_dict() for label in labels))
    print(f"Generated {len(labels)} label templates in {args.out}")
    print("Edit the file to add reviews and verdicts.")
    return 0


def cmd_publish(args: argparse.Namespace, config: GoldensetConfig) -> int:
    sample_path = require_file(Path(args.sample))
    labels_path = require_file(Path(args.labels))
    sample_result = parse_interactions(sample_path)
    labels_result = parse_labels(labels_path)
    report_parse_errors(sample_path, sample_result)
    report_parse_errors(labels_path, labels_result)
    if sample_result.errors and not sample_result.items:
        return 1

    with open_store(config) as store:
        if store.get_dataset_version(args.name) is not None:
            raise VersionExistsError(args.name)

        version = publish_dataset(
            name=args.name,
            interactions=sample_result.items,
            labels=labels_result.items,
            datasets_dir=config.datasets_dir,
            description=args.desc,
            changelog_top_tags=config.publish.changelog_top_tags,
            progress=not args.quiet,
        )
        store.create_dataset_version(version)
        store.upsert_labels(labels_result.items)

    print(f"Published dataset version: {version.name}")
    print(f"  Interactions: {len(version.interaction_ids)}")
    print(f"  Created: {version.created_at}")
    return 0


def cmd_versions_list(args: argparse.Namespace, config: GoldensetConfig) -> int:
    with open_store(config) as store:
        versions = store.list_dataset_versions()

    if not versions:
        print("No dataset versions found.")
        return 0

    print("Dataset Versions:\n")
    for v in versions:
        print(f"  {v['name']}")
        print(f"    Created: {v['created_at']}")
        print(f"    Interactions: {v['interaction_count']}")
        if v["description"]:
            print(f"    Description: {v['description']}")
        print()
    return 0


def cmd_versions_show(args: argparse.Namespace, config: GoldensetConfig) -> int:
    with open_store(config) as store:
        version = store.get_dataset_version(args.name)
    if version is None:
        raise NotFoundError(args.name)

    print(f"Dataset Version: {version.name}")
    print(f"Created: {version.created_at}")
    if version.description:
        print(f"Description: {version.description}")
    print(f"Interactions: {len(version.interaction_ids)}\n")

    stats = DimensionStats(
        by_dimension=version.by_dimension,
        tag_counts=version.tag_counts,
        total=len(version.interaction_ids),
    )
    print(format_stats(stats, top_tags=config.stats.top_tags))
    return 0


def cmd_export(args: argparse.Namespace, config: GoldensetConfig) -> int:
    # Export from the published snapshot so later live-store edits don't leak in
    snapshot = VersionRepository(config.datasets_dir).load(args.name)
    interactions = list(snapshot.interactions.values())
    labels = list(snapshot.labels.values())

    out, labels_out = export_dataset(interactions, labels, Path(args.out), format=args.format)
    print(f"Exported {len(interactions)} interactions to {out}")
    print(f"Exported {len(labels)} labels to {labels_out}")
    return 0


def cmd_diff(args: argparse.Namespace, config: GoldensetConfig) -> int:
    repository = VersionRepository(config.datasets_dir)
    diff = diff_versions(repository, args.from_version, args.to_version, parse_keys(args.by) or None)

    if args.json:
        print(format_diff_json(diff))
    else:
        if args.all:
            limit = None
        else:
            limit = args.limit if args.limit is not None else config.diff.limit
        print(format_diff_text(diff, limit=limit))
    return 0


def cmd_clean(args: argparse.Namespace, config: GoldensetConfig) -> int:
    cleaned = False
    if config.data_dir.exists():
        shutil.rmtree(config.data_dir)
        print(f"Removed {config.data_dir}")
        cleaned = True
    else:
        print(f"No {config.paths.data_dir}/ directory found")

    if args.datasets:
        if config.datasets_dir.exists():
            shutil.rmtree(config.datasets_dir)
            print(f"Removed {config.datasets_dir}")
            cleaned = True
        else:
            print(f"No {config.paths.datasets_dir}/ directory found")

    print("Cleanup complete" if cleaned else "Nothing to clean")
    return 0


# =============================================================================
# Argument parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goldenset",
        description="Golden dataset management: ingest, sample, publish, diff",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Project root holding the data and datasets directories (default: cwd)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration YAML (default: <root>/goldenset.yaml if present)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Warnings only, no progress bars")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Initialize goldenset in the project root")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("ingest", help="Ingest records from a JSONL file")
    p.add_argument("kind", choices=["interactions", "artifacts", "labels"])
    p.add_argument("file", help="Path to JSONL file")
    p.set_defaults(func=cmd_ingest)

    p = sub.add_parser("stats", help="Show dimension and tag distributions")
    p.add_argument("--by", help="Comma-separated dimension keys")
    p.add_argument("--where", help="Comma-separated key=value filters")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("sample", help="Draw a stratified sample")
    p.add_argument("--n", type=int, required=True, help="Number of interactions to sample")
    p.add_argument("--by", required=True, help="Comma-separated dimension keys to stratify by")
    p.add_argument("--out", required=True, help="Output JSONL file path")
    p.add_argument("--where", help="Comma-separated key=value filters")
    p.add_argument("--dedupe", choices=DEDUPE_METHODS, default=None, help="Deduplication method")
    p.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    p.add_argument("--min-per-group", type=int, default=None, help="Coverage floor per group")
    p.set_defaults(func=cmd_sample)

    p = sub.add_parser("label", help="Label helpers")
    label_sub = p.add_subparsers(dest="label_command", required=True)
    lt = label_sub.add_parser("template", help="Generate a label template from a sample file")
    lt.add_argument("--in", dest="input", required=True, help="Input JSONL with interactions")
    lt.add_argument("--out", required=True, help="Output JSONL for labels")
    lt.set_defaults(func=cmd_label_template)

    p = sub.add_parser("publish", help="Publish a versioned dataset")
    p.add_argument("--name", required=True, help="Version name (e.g. golden/v1)")
    p.add_argument("--sample", required=True, help="JSONL file with sampled interactions")
    p.add_argument("--labels", required=True, help="JSONL file with labels")
    p.add_argument("--desc", default=None, help="Description of the version")
    p.set_defaults(func=cmd_publish)

    p = sub.add_parser("versions", help="Inspect dataset versions")
    versions_sub = p.add_subparsers(dest="versions_command", required=True)
    vl = versions_sub.add_parser("list", help="List all dataset versions")
    vl.set_defaults(func=cmd_versions_list)
    vs = versions_sub.add_parser("show", help="Show details of a dataset version")
    vs.add_argument("name")
    vs.set_defaults(func=cmd_versions_show)

    p = sub.add_parser("export", help="Export a dataset version")
    p.add_argument("--name", required=True, help="Version name to export")
    p.add_argument("--out", required=True, help="Output JSONL file path")
    p.add_argument("--format", choices=EXPORT_FORMATS, default="jsonl")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("diff", help="Compare two dataset versions")
    p.add_argument("from_version", help="Base version name")
    p.add_argument("to_version", help="Target version name")
    p.add_argument("--by", help="Comma-separated dimension keys (default: all)")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    p.add_argument("--limit", type=positive_int, default=None, help="Entries shown per section")
    p.add_argument("--all", action="store_true", help="Show every entry")
    p.set_defaults(func=cmd_diff)

    p = sub.add_parser("clean", help="Remove goldenset data")
    p.add_argument("--datasets", action="store_true", help="Also remove published datasets")
    p.set_defaults(func=cmd_clean)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = load_config(args.root, args.config)
        return args.func(args, config)
    except GoldensetError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
