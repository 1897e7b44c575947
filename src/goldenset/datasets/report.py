"""
Rendering of dataset diffs.

Two forms:
- ``format_diff_text``: a terminal report, deltas sorted by magnitude then
  name and capped at ``limit`` entries per section with an
  "... and N more" marker
- ``format_diff_json``: a structured document with the same fields
"""

from __future__ import annotations

import json
from typing import Any

from goldenset.datasets.diff import CountDelta, DatasetDiff


def diff_to_dict(diff: DatasetDiff) -> dict[str, Any]:
    """Structured form of a diff, field for field."""
    return {
        "from": diff.from_version,
        "to": diff.to_version,
        "interactions": {
            "added": list(diff.interactions.added),
            "removed": list(diff.interactions.removed),
            "unchanged": list(diff.interactions.unchanged),
        },
        "dimensions": {
            key: {value: entry.to_dict() for value, entry in values.items()}
            for key, values in diff.dimensions.items()
        },
        "tags": {tag: entry.to_dict() for tag, entry in diff.tags.items()},
        "labels": {
            "added": diff.labels.added,
            "removed": diff.labels.removed,
            "verdictChanges": dict(diff.labels.verdict_changes),
        },
    }


def format_diff_json(diff: DatasetDiff) -> str:
    return json.dumps(diff_to_dict(diff), indent=2, ensure_ascii=False)


def _ranked(entries: dict[str, CountDelta]) -> list[tuple[str, CountDelta]]:
    return sorted(entries.items(), key=lambda kv: (-abs(kv[1].delta), kv[0]))


def _delta_lines(entries: dict[str, CountDelta], limit: int | None) -> list[str]:
    ranked = _ranked(entries)
    shown = ranked if limit is None else ranked[:limit]

    lines = []
    for name, entry in shown:
        sign = "+" if entry.delta >= 0 else ""
        lines.append(
            f"  {name:<20} {entry.from_count:>4} → {entry.to_count:>4}  ({sign}{entry.delta})"
        )
    if limit is not None and len(ranked) > limit:
        lines.append(f"  ... and {len(ranked) - limit} more")
    return lines


def format_diff_text(diff: DatasetDiff, limit: int | None = 10) -> str:
    """
    Human-readable diff report.

    Args:
        diff: The diff to render.
        limit: Maximum entries shown per dimension and for tags; ``None``
               shows everything. Added/removed ids are listed only when
               there are at most ``limit`` of them.

    Raises:
        ValueError: ``limit`` is below 1.
    """
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be >= 1 or None, got {limit}")

    lines = [f"Diff: {diff.from_version} → {diff.to_version}", ""]

    ids = diff.interactions
    lines.append("Interactions:")
    lines.append(f"  Added: {len(ids.added)}")
    lines.append(f"  Removed: {len(ids.removed)}")
    lines.append(f"  Unchanged: {len(ids.unchanged)}")
    if ids.added and (limit is None or len(ids.added) <= limit):
        lines.append(f"  Added IDs: {', '.join(ids.added)}")
    if ids.removed and (limit is None or len(ids.removed) <= limit):
        lines.append(f"  Removed IDs: {', '.join(ids.removed)}")
    lines.append("")

    for key, values in diff.dimensions.items():
        lines.append(f"Dimension: {key}")
        lines.extend(_delta_lines(values, limit))
        lines.append("")

    lines.append("Tags:")
    lines.extend(_delta_lines(diff.tags, limit))
    lines.append("")

    lines.append("Labels:")
    lines.append(f"  New: {diff.labels.added}")
    lines.append(f"  Removed: {diff.labels.removed}")
    if diff.labels.verdict_changes:
        lines.append("  Verdict changes:")
        for change, count in diff.labels.verdict_changes.items():
            lines.append(f"    {change}: {count}")
    lines.append("")

    return "\n".join(lines)
