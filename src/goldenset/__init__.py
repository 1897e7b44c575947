"""
goldenset: curate, sample, version and diff golden datasets of LLM interactions.

This package provides tools to:
1. Ingest and validate interactions, artifacts and labels from JSONL
2. Summarize dimension and tag distributions
3. Draw deterministic stratified samples with per-group coverage
4. Publish immutable dataset versions and diff them
"""

__version__ = "0.1.0"

from goldenset.analytics import (
    SampleOptions,
    allocate_quotas,
    compute_stats,
    dedupe_exact,
    stratified_sample,
)
from goldenset.types import MISSING, Artifact, DatasetVersion, Interaction, Label

__all__ = [
    "__version__",
    "allocate_quotas",
    "Artifact",
    "compute_stats",
    "DatasetVersion",
    "dedupe_exact",
    "Interaction",
    "Label",
    "MISSING",
    "SampleOptions",
    "stratified_sample",
]
