"""
Distribution counting over interactions.

Per-dimension value histograms and tag histograms are the shared building
block of ``goldenset stats``, of the stats blob written with every published
version, and of the version diff engine.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from goldenset.types import MISSING, Interaction


@dataclass
class DimensionStats:
    """Histograms for one collection of interactions."""
    by_dimension: dict[str, dict[str, int]] = field(default_factory=dict)
    tag_counts: dict[str, int] = field(default_factory=dict)
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "byDimension": self.by_dimension,
            "tagCounts": self.tag_counts,
            "total": self.total,
        }


def extract_dimension_keys(interactions: Iterable[Interaction]) -> list[str]:
    """Union of all dimension keys, sorted lexicographically."""
    keys: set[str] = set()
    for interaction in interactions:
        if interaction.dimensions:
            keys.update(interaction.dimensions)
    return sorted(keys)


def count_tags(interactions: Iterable[Interaction]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for interaction in interactions:
        if interaction.tags:
            counts.update(interaction.tags)
    return dict(counts)


def compute_stats(
    interactions: Sequence[Interaction],
    dimension_keys: Sequence[str] | None = None,
) -> DimensionStats:
    """
    Count dimension values and tags.

    Args:
        interactions: Collection to count.
        dimension_keys: Keys to track. When omitted (or empty) every key seen
                        in any interaction is tracked, in sorted order.

    Every interaction contributes exactly one count per tracked key: its
    value, or MISSING when it lacks the key. So each histogram sums to
    ``total``.
    """
    keys = list(dimension_keys) if dimension_keys else extract_dimension_keys(interactions)

    by_dimension: dict[str, Counter[str]] = {key: Counter() for key in keys}
    for interaction in interactions:
        dims = interaction.dimensions or {}
        for key in keys:
            by_dimension[key][dims.get(key, MISSING)] += 1

    return DimensionStats(
        by_dimension={key: dict(counts) for key, counts in by_dimension.items()},
        tag_counts=count_tags(interactions),
        total=len(interactions),
    )


def format_stats(stats: DimensionStats, top_tags: int = 10) -> str:
    """Human-readable summary: total, values per key by count, top tags."""
    lines = [f"Total interactions: {stats.total}", ""]

    for key, values in stats.by_dimension.items():
        lines.append(f"{key}:")
        for value, count in sorted(values.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"  {value}: {count}")
        lines.append("")

    if stats.tag_counts and top_tags > 0:
        lines.append("Top tags:")
        ranked = sorted(stats.tag_counts.items(), key=lambda kv: (-kv[1], kv[0]))
        for tag, count in ranked[:top_tags]:
            lines.append(f"  {tag}: {count}")

    return "\n".join(lines)
