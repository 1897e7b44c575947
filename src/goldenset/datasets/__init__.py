"""
Dataset versions: publish, load, diff, render and export.

Modules:
- versions: on-disk layout and loading of published versions
- publish: write-once publishing with stats and changelog
- diff: interaction, dimension, tag and label deltas between two versions
- report: text and JSON rendering of diffs
- export: JSONL export of a version
"""

from goldenset.datasets.diff import DatasetDiff, diff_versions
from goldenset.datasets.export import export_dataset
from goldenset.datasets.publish import publish_dataset
from goldenset.datasets.report import format_diff_json, format_diff_text
from goldenset.datasets.versions import VersionRepository, sanitize_version_name

__all__ = [
    "DatasetDiff",
    "diff_versions",
    "export_dataset",
    "format_diff_json",
    "format_diff_text",
    "publish_dataset",
    "sanitize_version_name",
    "VersionRepository",
]
