"""Shared fixtures and record factories."""

import json
from pathlib import Path

import pytest

from goldenset.datasets.versions import INTERACTIONS_FILE, LABELS_FILE, VersionRepository
from goldenset.types import Interaction, Label

TS = "2026-01-01T00:00:00Z"


def make_interaction(interaction_id, text=None, dimensions=None, tags=None, **kwargs):
    return Interaction(
        interaction_id=str(interaction_id),
        input_text=text if text is not None else f"prompt {interaction_id}",
        timestamp=TS,
        dimensions=dimensions,
        tags=tags,
        **kwargs,
    )


def make_label(interaction_id, verdict="pass", reviewer="alice"):
    return Label(
        interaction_id=str(interaction_id),
        verdict=verdict,
        reviewed_at=TS,
        reviewer=reviewer,
    )


def write_jsonl_lines(path: Path, rows):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for row in rows:
            f.write((row if isinstance(row, str) else json.dumps(row)) + "\n")


def write_version(datasets_dir: Path, name: str, interactions, labels=None):
    """Lay out a version directory by hand (no reference checks)."""
    version_dir = datasets_dir / name.replace("/", "_")
    write_jsonl_lines(version_dir / INTERACTIONS_FILE, [i.to_dict() for i in interactions])
    if labels is not None:
        write_jsonl_lines(version_dir / LABELS_FILE, [label.to_dict() for label in labels])
    return version_dir


@pytest.fixture
def datasets_dir(tmp_path):
    path = tmp_path / "datasets"
    path.mkdir()
    return path


@pytest.fixture
def repository(datasets_dir):
    return VersionRepository(datasets_dir)


@pytest.fixture
def fixture_interactions():
    """Eight interactions over intent x dept: group sizes 2, 1, 2, 3."""
    rows = [
        ("1", "policy", "eng"),
        ("2", "policy", "eng"),
        ("3", "policy", "hr"),
        ("4", "incident", "eng"),
        ("5", "incident", "eng"),
        ("6", "incident", "hr"),
        ("7", "incident", "hr"),
        ("8", "incident", "hr"),
    ]
    return [
        make_interaction(i, text=chr(ord("a") + n), dimensions={"intent": intent, "dept": dept})
        for n, (i, intent, dept) in enumerate(rows)
    ]
