"""
On-disk storage for published dataset versions.

Layout of one version (``/`` in names becomes ``_``):

    datasets/<name>/
        dataset.json        version metadata + stats
        interactions.jsonl  snapshot of every interaction in the version
        labels.jsonl        labels for those interactions (may be empty)
        stats.json          full DimensionStats (derived; regenerable from the snapshot)
        changelog.md        human-readable summary
        sha256.txt          checksums of the JSONL files

A version directory is written once and its snapshot files are never
edited, so later changes to the live store cannot alter what a published
version contains. Only stats.json, which is derived from the snapshot, may be
regenerated (see scripts/recompute_version_stats.py).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from goldenset.errors import NotFoundError, VersionParseError
from goldenset.ingest import ParseResult, parse_interactions, parse_labels
from goldenset.types import DatasetVersion, Interaction, Label
from goldenset.utils.io import read_json

logger = logging.getLogger(__name__)

DATASET_FILE = "dataset.json"
INTERACTIONS_FILE = "interactions.jsonl"
LABELS_FILE = "labels.jsonl"
STATS_FILE = "stats.json"
CHANGELOG_FILE = "changelog.md"
CHECKSUM_FILE = "sha256.txt"


def sanitize_version_name(name: str) -> str:
    """Map a version name (e.g. ``golden/v1``) to a directory name."""
    return name.replace("/", "_")


@dataclass(frozen=True)
class VersionSnapshot:
    """Read-only contents of one published version, keyed by interaction id."""
    name: str
    interactions: Mapping[str, Interaction]
    labels: Mapping[str, Label]
    metadata: DatasetVersion | None = None


class VersionRepository:
    """Reads and locates published versions under one datasets directory."""

    def __init__(self, datasets_dir: Path):
        self.datasets_dir = Path(datasets_dir)

    def version_dir(self, name: str) -> Path:
        return self.datasets_dir / sanitize_version_name(name)

    def exists(self, name: str) -> bool:
        return self.version_dir(name).exists()

    def load(self, name: str) -> VersionSnapshot:
        """
        Load a version's interactions and labels.

        Raises:
            NotFoundError: The version directory or its interactions file is
                           missing.
            VersionParseError: A stored record is malformed.
        """
        version_dir = self.version_dir(name)
        if not version_dir.exists():
            raise NotFoundError(name)

        interactions_path = version_dir / INTERACTIONS_FILE
        if not interactions_path.exists():
            raise NotFoundError(
                name, f"Interactions file not found for version '{name}': {interactions_path}"
            )

        interactions = self._check(name, interactions_path, parse_interactions(interactions_path))
        interaction_map = {i.interaction_id: i for i in interactions}

        labels_path = version_dir / LABELS_FILE
        label_map: dict[str, Label] = {}
        if labels_path.exists():
            labels = self._check(name, labels_path, parse_labels(labels_path))
            label_map = {label.interaction_id: label for label in labels}

            dangling = sorted(set(label_map) - set(interaction_map))
            if dangling:
                logger.warning(
                    f"Version '{name}': {len(dangling)} labels reference interactions "
                    f"outside the version (e.g. {dangling[0]})"
                )

        logger.debug(f"Loaded version '{name}': {len(interaction_map)} interactions, {len(label_map)} labels")
        return VersionSnapshot(
            name=name,
            interactions=MappingProxyType(interaction_map),
            labels=MappingProxyType(label_map),
            metadata=self.load_metadata(name),
        )

    def load_metadata(self, name: str) -> DatasetVersion | None:
        path = self.version_dir(name) / DATASET_FILE
        if not path.exists():
            return None
        try:
            return DatasetVersion.from_dict(read_json(path))
        except (ValueError, KeyError, TypeError) as e:
            raise VersionParseError(name, str(path), 0, str(e)) from e

    @staticmethod
    def _check(name: str, path: Path, result: ParseResult) -> list:
        if result.errors:
            first = result.errors[0]
            raise VersionParseError(name, str(path), first.line, first.error)
        return result.items
