"""
JSONL ingestion with per-line validation.

Every non-blank line is parsed and validated independently; failures are
collected as ParseError entries (with line number and a truncated copy of
the offending content) instead of aborting the whole file, so callers can
load the valid records and report the rest.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Generic, TypeVar

from goldenset.errors import RecordValidationError
from goldenset.types import Artifact, Interaction, Label

logger = logging.getLogger(__name__)

T = TypeVar("T")

UTF8_BOM = "\ufeff"
MAX_ERROR_CONTENT_LENGTH = 100


@dataclass
class ParseError:
    """One rejected line."""
    line: int
    error: str
    content: str | None = None


@dataclass
class ParseResult(Generic[T]):
    items: list[T] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)


def parse_jsonl(file_path: Path, parse_record: Callable[[object], T]) -> ParseResult[T]:
    """
    Parse a JSONL file, validating each line with ``parse_record``.

    Blank lines are skipped and a UTF-8 BOM on the first line is stripped.
    Lines that are not valid UTF-8 are reported like any other bad line.
    Line numbers are 1-based and count blank lines.
    """
    result: ParseResult[T] = ParseResult()

    with open(file_path, "rb") as f:
        for line_number, raw in enumerate(f, start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                result.errors.append(
                    ParseError(
                        line=line_number,
                        error=f"Invalid UTF-8: {e.reason} at byte {e.start}",
                        content=raw.decode("utf-8", errors="replace").strip()[:MAX_ERROR_CONTENT_LENGTH],
                    )
                )
                continue

            trimmed = line.strip()
            if line_number == 1:
                trimmed = trimmed.lstrip(UTF8_BOM).strip()
            if not trimmed:
                continue

            try:
                data = json.loads(trimmed)
            except json.JSONDecodeError as e:
                result.errors.append(
                    ParseError(
                        line=line_number,
                        error=f"Invalid JSON: {e.msg}",
                        content=trimmed[:MAX_ERROR_CONTENT_LENGTH],
                    )
                )
                continue

            try:
                result.items.append(parse_record(data))
            except RecordValidationError as e:
                result.errors.append(
                    ParseError(
                        line=line_number,
                        error="; ".join(e.issues),
                        content=trimmed[:MAX_ERROR_CONTENT_LENGTH],
                    )
                )

    if result.errors:
        logger.debug(f"{file_path}: {len(result.items)} valid, {len(result.errors)} invalid lines")
    return result


def parse_interactions(file_path: Path) -> ParseResult[Interaction]:
    return parse_jsonl(file_path, Interaction.from_dict)


def parse_labels(file_path: Path) -> ParseResult[Label]:
    return parse_jsonl(file_path, Label.from_dict)


def parse_artifacts(file_path: Path) -> ParseResult[Artifact]:
    return parse_jsonl(file_path, Artifact.from_dict)
