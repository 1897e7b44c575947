"""
Export a dataset version's interactions and labels as JSONL.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from goldenset.errors import UnsupportedFormatError
from goldenset.types import Interaction, Label
from goldenset.utils.io import write_jsonl

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("jsonl",)


def labels_output_path(output_path: Path) -> Path:
    """``foo.jsonl`` -> ``foo_labels.jsonl``; anything else gets ``_labels.jsonl`` appended."""
    if output_path.suffix == ".jsonl":
        return output_path.with_name(f"{output_path.stem}_labels.jsonl")
    return output_path.with_name(f"{output_path.name}_labels.jsonl")


def export_dataset(
    interactions: Sequence[Interaction],
    labels: Sequence[Label],
    output_path: Path,
    format: str = "jsonl",
) -> tuple[Path, Path]:
    """
    Write interactions to ``output_path`` and labels beside it.

    Returns:
        (interactions path, labels path)
    """
    if format not in EXPORT_FORMATS:
        raise UnsupportedFormatError(f"Unsupported export format: {format}")

    output_path = Path(output_path)
    labels_path = labels_output_path(output_path)
    write_jsonl(output_path, (i.to_dict() for i in interactions))
    write_jsonl(labels_path, (label.to_dict() for label in labels))

    logger.info(f"Exported {len(interactions)} interactions to {output_path}")
    logger.info(f"Exported {len(labels)} labels to {labels_path}")
    return output_path, labels_path
