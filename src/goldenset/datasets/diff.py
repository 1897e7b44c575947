"""
Compare two published dataset versions.

The diff covers four things:
- Interactions: ids added, removed and kept (each list sorted)
- Dimensions: per key and value, counts in each version and the delta
- Tags: the same, over tag histograms
- Labels: labels added and removed, and verdict transitions for kept ids

Both versions are loaded in full before anything is compared; a missing or
malformed version fails the whole diff.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from goldenset.analytics.stats import compute_stats, count_tags, extract_dimension_keys
from goldenset.datasets.versions import VersionRepository, VersionSnapshot
from goldenset.types import Interaction, Label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountDelta:
    """Count of one value (or tag) in each version."""
    from_count: int
    to_count: int

    @property
    def delta(self) -> int:
        return self.to_count - self.from_count

    def to_dict(self) -> dict[str, int]:
        return {"from": self.from_count, "to": self.to_count, "delta": self.delta}


@dataclass
class InteractionDiff:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)


@dataclass
class LabelDiff:
    added: int = 0
    removed: int = 0
    # "<from>-><to>" -> count, for ids kept in both versions
    verdict_changes: dict[str, int] = field(default_factory=dict)


@dataclass
class DatasetDiff:
    from_version: str
    to_version: str
    interactions: InteractionDiff
    dimensions: dict[str, dict[str, CountDelta]]
    tags: dict[str, CountDelta]
    labels: LabelDiff


def diff_histograms(
    from_counts: Mapping[str, int],
    to_counts: Mapping[str, int],
) -> dict[str, CountDelta]:
    """Entries for every value seen on either side, sorted by value."""
    result: dict[str, CountDelta] = {}
    for value in sorted(set(from_counts) | set(to_counts)):
        entry = CountDelta(from_counts.get(value, 0), to_counts.get(value, 0))
        if entry.from_count > 0 or entry.to_count > 0 or entry.delta != 0:
            result[value] = entry
    return result


def diff_interaction_ids(from_ids: Sequence[str], to_ids: Sequence[str]) -> InteractionDiff:
    before, after = set(from_ids), set(to_ids)
    return InteractionDiff(
        added=sorted(after - before),
        removed=sorted(before - after),
        unchanged=sorted(before & after),
    )


def diff_dimensions(
    from_interactions: Sequence[Interaction],
    to_interactions: Sequence[Interaction],
    dimension_keys: Sequence[str] | None = None,
) -> dict[str, dict[str, CountDelta]]:
    """
    Per-key histogram diff.

    Without explicit keys both sides track the union of keys seen in either
    version, so a key new in one version shows up as MISSING in the other.
    """
    if dimension_keys:
        keys = list(dimension_keys)
    else:
        keys = sorted(
            set(extract_dimension_keys(from_interactions))
            | set(extract_dimension_keys(to_interactions))
        )

    from_stats = compute_stats(from_interactions, keys)
    to_stats = compute_stats(to_interactions, keys)

    return {
        key: diff_histograms(
            from_stats.by_dimension.get(key, {}),
            to_stats.by_dimension.get(key, {}),
        )
        for key in keys
    }


def diff_labels(
    from_labels: Mapping[str, Label],
    to_labels: Mapping[str, Label],
    unchanged_ids: Sequence[str],
) -> LabelDiff:
    """
    Count label additions, removals and verdict transitions.

    Transitions are only tallied for interactions kept in both versions; a
    label pointing outside its version's interactions never matches.
    """
    changes: Counter[str] = Counter()
    for interaction_id in unchanged_ids:
        before = from_labels.get(interaction_id)
        after = to_labels.get(interaction_id)
        if before is not None and after is not None and before.verdict != after.verdict:
            changes[f"{before.verdict}->{after.verdict}"] += 1

    return LabelDiff(
        added=sum(1 for i in to_labels if i not in from_labels),
        removed=sum(1 for i in from_labels if i not in to_labels),
        verdict_changes=dict(sorted(changes.items())),
    )


def diff_snapshots(
    before: VersionSnapshot,
    after: VersionSnapshot,
    dimension_keys: Sequence[str] | None = None,
) -> DatasetDiff:
    """Diff two already-loaded versions."""
    interactions = diff_interaction_ids(list(before.interactions), list(after.interactions))
    from_items = list(before.interactions.values())
    to_items = list(after.interactions.values())

    return DatasetDiff(
        from_version=before.name,
        to_version=after.name,
        interactions=interactions,
        dimensions=diff_dimensions(from_items, to_items, dimension_keys),
        tags=diff_histograms(count_tags(from_items), count_tags(to_items)),
        labels=diff_labels(before.labels, after.labels, interactions.unchanged),
    )


def diff_versions(
    repository: VersionRepository,
    from_version: str,
    to_version: str,
    dimension_keys: Sequence[str] | None = None,
) -> DatasetDiff:
    """
    Load two published versions and diff them.

    Raises:
        NotFoundError: Either version does not exist.
        VersionParseError: Either version holds malformed records.
    """
    before = repository.load(from_version)
    after = repository.load(to_version)

    diff = diff_snapshots(before, after, dimension_keys)
    logger.info(
        f"Diff {from_version} -> {to_version}: +{len(diff.interactions.added)} "
        f"-{len(diff.interactions.removed)} ={len(diff.interactions.unchanged)}"
    )
    return diff
