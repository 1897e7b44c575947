"""
Configuration loading for goldenset.

Settings come from an optional YAML file (``goldenset.yaml`` in the project
root, or the path passed with ``--config``). Every key is optional; missing
keys fall back to the defaults below and CLI flags override both.

Example goldenset.yaml:
    ```yaml
    paths:
      data_dir: .goldenset
      datasets_dir: datasets
    sample:
      seed: 42
      min_per_group: 1
      dedupe: exact
    diff:
      limit: 10
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from goldenset.errors import ConfigurationError

DEFAULT_CONFIG_FILE = "goldenset.yaml"
DEDUPE_METHODS = ("exact", "none")


@dataclass
class PathsConfig:
    data_dir: str = ".goldenset"
    datasets_dir: str = "datasets"


@dataclass
class SampleConfig:
    seed: int | None = None
    min_per_group: int = 1
    dedupe: str = "exact"


@dataclass
class DiffConfig:
    limit: int = 10


@dataclass
class StatsConfig:
    top_tags: int = 10


@dataclass
class PublishConfig:
    changelog_top_tags: int = 20


@dataclass
class GoldensetConfig:
    """Resolved configuration for one project root."""
    root: Path = field(default_factory=Path.cwd)
    paths: PathsConfig = field(default_factory=PathsConfig)
    sample: SampleConfig = field(default_factory=SampleConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)

    @property
    def data_dir(self) -> Path:
        return self.root / self.paths.data_dir

    @property
    def db_path(self) -> Path:
        return self.data_dir / "db.sqlite"

    @property
    def datasets_dir(self) -> Path:
        return self.root / self.paths.datasets_dir


_SECTIONS = {
    "paths": PathsConfig,
    "sample": SampleConfig,
    "diff": DiffConfig,
    "stats": StatsConfig,
    "publish": PublishConfig,
}


def _build_section(name: str, cls: type, values: Any):
    if values is None:
        return cls()
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    known = cls.__dataclass_fields__.keys()
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ConfigurationError(f"Unknown keys in config section '{name}': {unknown}")
    return cls(**values)


def _validate(config: GoldensetConfig) -> None:
    seed = config.sample.seed
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigurationError(f"sample.seed must be an integer, got {seed!r}")
    if not isinstance(config.sample.min_per_group, int) or config.sample.min_per_group < 0:
        raise ConfigurationError(
            f"sample.min_per_group must be >= 0, got {config.sample.min_per_group!r}"
        )
    if config.sample.dedupe not in DEDUPE_METHODS:
        raise ConfigurationError(
            f"sample.dedupe must be one of {DEDUPE_METHODS}, got {config.sample.dedupe!r}"
        )
    if not isinstance(config.diff.limit, int) or config.diff.limit < 1:
        raise ConfigurationError(f"diff.limit must be >= 1, got {config.diff.limit!r}")
    for name, value in (
        ("stats.top_tags", config.stats.top_tags),
        ("publish.changelog_top_tags", config.publish.changelog_top_tags),
    ):
        if not isinstance(value, int) or value < 0:
            raise ConfigurationError(f"{name} must be >= 0, got {value!r}")


def load_config(root: Path, config_path: Path | None = None) -> GoldensetConfig:
    """
    Load and validate configuration for a project root.

    Args:
        root: Project root; relative paths in the config resolve against it.
        config_path: Explicit YAML file. Must exist when given. When omitted,
                     ``<root>/goldenset.yaml`` is used if present.

    Raises:
        ConfigurationError: On a missing explicit file, unknown sections or
                            keys, or out-of-range values.
    """
    if config_path is None:
        candidate = root / DEFAULT_CONFIG_FILE
        config_path = candidate if candidate.exists() else None
    elif not config_path.exists():
        raise ConfigurationError(f"Config not found: {config_path}")

    raw: dict[str, Any] = {}
    if config_path is not None:
        with open(config_path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config root must be a mapping: {config_path}")

    unknown = sorted(set(raw) - set(_SECTIONS))
    if unknown:
        raise ConfigurationError(f"Unknown config sections: {unknown}")

    sections = {name: _build_section(name, cls, raw.get(name)) for name, cls in _SECTIONS.items()}
    config = GoldensetConfig(root=root, **sections)
    _validate(config)
    return config
