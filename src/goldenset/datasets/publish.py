"""
Publish immutable dataset versions.

A version is a write-once export of a chosen interaction subset, its labels
and its computed statistics. Files are written into a staging directory and
moved into place in one rename, so a failed publish never leaves a
half-written version behind.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, PackageLoader

from goldenset.analytics.stats import DimensionStats, compute_stats
from goldenset.datasets.versions import (
    CHANGELOG_FILE,
    CHECKSUM_FILE,
    DATASET_FILE,
    INTERACTIONS_FILE,
    LABELS_FILE,
    STATS_FILE,
    sanitize_version_name,
)
from goldenset.errors import InconsistentReferenceError, VersionExistsError
from goldenset.types import DatasetVersion, Interaction, Label
from goldenset.utils.io import ensure_dir, sha256_file, write_json, write_jsonl, write_text

logger = logging.getLogger(__name__)

_env = Environment(
    loader=PackageLoader("goldenset", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def render_changelog(version: DatasetVersion, stats: DimensionStats, top_tags: int = 20) -> str:
    """Markdown summary of a version: counts per dimension value, top tags."""
    dimensions = [
        (key, sorted(values.items(), key=lambda kv: (-kv[1], kv[0])))
        for key, values in stats.by_dimension.items()
    ]
    ranked_tags = sorted(stats.tag_counts.items(), key=lambda kv: (-kv[1], kv[0]))
    template = _env.get_template("changelog.md.j2")
    return template.render(
        version=version,
        dimensions=dimensions,
        top_tags=ranked_tags[:top_tags],
    )


def check_label_references(interactions: Sequence[Interaction], labels: Sequence[Label]) -> None:
    """Raise if any label points at an interaction outside ``interactions``."""
    ids = {i.interaction_id for i in interactions}
    unknown = [label.interaction_id for label in labels if label.interaction_id not in ids]
    if unknown:
        raise InconsistentReferenceError(unknown)


def publish_dataset(
    name: str,
    interactions: Sequence[Interaction],
    labels: Sequence[Label],
    datasets_dir: Path,
    description: str | None = None,
    changelog_top_tags: int = 20,
    progress: bool = False,
) -> DatasetVersion:
    """
    Write a new version directory and return its metadata.

    Raises:
        InconsistentReferenceError: A label references an interaction that is
                                    not part of the version.
        VersionExistsError: A version with this name was already published.
    """
    check_label_references(interactions, labels)

    version_dir = Path(datasets_dir) / sanitize_version_name(name)
    if version_dir.exists():
        raise VersionExistsError(name)

    stats = compute_stats(interactions)
    version = DatasetVersion(
        name=name,
        created_at=utc_now(),
        interaction_ids=tuple(i.interaction_id for i in interactions),
        by_dimension=stats.by_dimension,
        tag_counts=stats.tag_counts,
        description=description,
    )

    staging_dir = Path(datasets_dir) / f".{version_dir.name}.staging"
    if staging_dir.exists():
        shutil.rmtree(staging_dir)
    ensure_dir(staging_dir)

    try:
        write_json(staging_dir / DATASET_FILE, version.to_dict())
        write_jsonl(
            staging_dir / INTERACTIONS_FILE,
            (i.to_dict() for i in interactions),
            desc="Writing interactions",
            progress=progress,
        )
        write_jsonl(
            staging_dir / LABELS_FILE,
            (label.to_dict() for label in labels),
            desc="Writing labels",
            progress=progress,
        )
        write_json(staging_dir / STATS_FILE, stats.to_dict())
        write_text(
            staging_dir / CHANGELOG_FILE,
            render_changelog(version, stats, changelog_top_tags),
        )
        checksums = [
            f"{sha256_file(staging_dir / filename)}  {filename}"
            for filename in (INTERACTIONS_FILE, LABELS_FILE)
        ]
        write_text(staging_dir / CHECKSUM_FILE, "\n".join(checksums) + "\n")

        if version_dir.exists():
            raise VersionExistsError(name)
        staging_dir.rename(version_dir)
    except BaseException:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise

    logger.info(f"Published '{name}' to {version_dir} ({len(interactions)} interactions, {len(labels)} labels)")
    return version


def make_label_templates(
    interactions: Sequence[Interaction],
    reviewer: str = "anonymous",
) -> list[Label]:
    """One ``needs_clarification`` label per interaction, ready for review."""
    reviewed_at = utc_now()
    return [
        Label(
            interaction_id=i.interaction_id,
            verdict="needs_clarification",
            reviewed_at=reviewed_at,
            reviewer=reviewer,
            notes="",
        )
        for i in interactions
    ]
