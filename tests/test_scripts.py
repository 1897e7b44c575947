"""scripts/recompute_version_stats.py"""

import importlib.util
from pathlib import Path

import pytest
from conftest import make_interaction

from goldenset.datasets.publish import publish_dataset
from goldenset.datasets.versions import (
    CHECKSUM_FILE,
    DATASET_FILE,
    INTERACTIONS_FILE,
    LABELS_FILE,
    STATS_FILE,
)
from goldenset.utils.io import read_json, sha256_file, write_json

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "recompute_version_stats.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("recompute_version_stats", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_clean_versions_pass(script, datasets_dir, fixture_interactions, capsys):
    publish_dataset("golden/v1", fixture_interactions, [], datasets_dir)
    assert script.list_versions(datasets_dir) == ["golden_v1"]
    assert script.main(["--datasets", str(datasets_dir), "--all"]) == 0
    assert "golden_v1: ok (8 interactions)" in capsys.readouterr().out


def test_drift_detected_and_rewritten(script, datasets_dir):
    publish_dataset("v1", [make_interaction("1", dimensions={"k": "a"})], [], datasets_dir)
    stats_path = datasets_dir / "v1" / STATS_FILE
    expected = read_json(stats_path)
    write_json(stats_path, {"total": 99})

    assert script.main(["--datasets", str(datasets_dir), "v1"]) == 2
    assert script.main(["--datasets", str(datasets_dir), "v1", "--write"]) == 0
    assert read_json(stats_path) == expected
    assert script.main(["--datasets", str(datasets_dir), "v1"]) == 0


def test_errors(script, datasets_dir):
    assert script.main(["--datasets", str(datasets_dir)]) == 1
    assert script.main(["--datasets", str(datasets_dir), "nope"]) == 1


def test_write_leaves_snapshot_untouched(script, datasets_dir):
    publish_dataset("v1", [make_interaction("1", dimensions={"k": "a"})], [], datasets_dir)
    version_dir = datasets_dir / "v1"
    snapshot_files = (INTERACTIONS_FILE, LABELS_FILE, DATASET_FILE, CHECKSUM_FILE)
    before = {name: sha256_file(version_dir / name) for name in snapshot_files}

    (version_dir / STATS_FILE).unlink()
    assert script.main(["--datasets", str(datasets_dir), "v1", "--write"]) == 0
    assert (version_dir / STATS_FILE).exists()
    assert {name: sha256_file(version_dir / name) for name in snapshot_files} == before
