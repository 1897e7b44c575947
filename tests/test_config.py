"""YAML configuration loading."""

import pytest

from goldenset.config import load_config
from goldenset.errors import ConfigurationError


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path)
    assert config.sample.seed is None
    assert config.sample.min_per_group == 1
    assert config.sample.dedupe == "exact"
    assert config.diff.limit == 10
    assert config.db_path == tmp_path / ".goldenset" / "db.sqlite"
    assert config.datasets_dir == tmp_path / "datasets"


def test_reads_default_file(tmp_path):
    (tmp_path / "goldenset.yaml").write_text(
        "paths:\n"
        "  datasets_dir: golden\n"
        "sample:\n"
        "  seed: 42\n"
        "  min_per_group: 0\n"
        "  dedupe: none\n"
        "diff:\n"
        "  limit: 3\n"
    )
    config = load_config(tmp_path)
    assert config.sample.seed == 42
    assert config.sample.min_per_group == 0
    assert config.sample.dedupe == "none"
    assert config.diff.limit == 3
    assert config.datasets_dir == tmp_path / "golden"
    assert config.stats.top_tags == 10


def test_explicit_path(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("stats:\n  top_tags: 5\n")
    assert load_config(tmp_path, path).stats.top_tags == 5


def test_empty_file_uses_defaults(tmp_path):
    (tmp_path / "goldenset.yaml").write_text("")
    assert load_config(tmp_path).diff.limit == 10


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Config not found"):
        load_config(tmp_path, tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "bogus:\n  x: 1\n",
        "sample:\n  sed: 1\n",
        "sample:\n  seed: abc\n",
        "sample:\n  min_per_group: -1\n",
        "sample:\n  dedupe: fuzzy\n",
        "diff:\n  limit: 0\n",
        "sample: [1, 2]\n",
        "- just a list\n",
        "sample: {seed: [\n",
    ],
)
def test_invalid_config(tmp_path, content):
    (tmp_path / "goldenset.yaml").write_text(content)
    with pytest.raises(ConfigurationError):
        load_config(tmp_path)
