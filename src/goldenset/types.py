"""
Record types for goldenset.

Interactions, labels and artifacts arrive as JSON objects with open-ended
optional fields. Each type validates its wire form in ``from_dict`` (raising
RecordValidationError with one issue per problem) and serializes back to the
camelCase wire form in ``to_dict``. Unknown keys are kept in ``extra`` so a
record survives ingest -> store -> publish -> export unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from goldenset.errors import RecordValidationError

# Counted value for a dimension key an interaction does not carry
MISSING = "__missing__"

VERDICTS = ("pass", "fail", "needs_clarification")


# =============================================================================
# Validation helpers
# =============================================================================

class _Checker:
    """Collects validation issues for one record."""

    def __init__(self, data: Any):
        self.issues: list[str] = []
        if not isinstance(data, dict):
            self.issues.append("<root>: Expected object")

    def fail(self, path: str, message: str) -> None:
        self.issues.append(f"{path}: {message}")

    def string(self, data: dict, key: str, path: str, required: bool = True) -> str | None:
        value = data.get(key)
        if value is None:
            if required:
                self.fail(path, "Required")
            return None
        if not isinstance(value, str):
            self.fail(path, f"Expected string, received {type(value).__name__}")
            return None
        return value

    def timestamp(self, data: dict, key: str, path: str, required: bool = True) -> str | None:
        value = self.string(data, key, path, required)
        if value is not None and not is_iso_datetime(value):
            self.fail(path, "Invalid ISO datetime")
            return None
        return value

    def string_list(self, data: dict, key: str, path: str) -> list[str] | None:
        value = data.get(key)
        if value is None:
            return None
        if not isinstance(value, list):
            self.fail(path, "Expected array")
            return None
        for i, item in enumerate(value):
            if not isinstance(item, str):
                self.fail(f"{path}.{i}", "Expected string")
        return list(value)

    def string_map(self, data: dict, key: str, path: str) -> dict[str, str] | None:
        value = data.get(key)
        if value is None:
            return None
        if not isinstance(value, dict):
            self.fail(path, "Expected object")
            return None
        for k, v in value.items():
            if not isinstance(v, str):
                self.fail(f"{path}.{k}", "Expected string")
        return dict(value)

    def obj(self, data: dict, key: str, path: str, required: bool = False) -> dict | None:
        value = data.get(key)
        if value is None:
            if required:
                self.fail(path, "Required")
            return None
        if not isinstance(value, dict):
            self.fail(path, "Expected object")
            return None
        return value

    def raise_if_failed(self) -> None:
        if self.issues:
            raise RecordValidationError(self.issues)


def is_iso_datetime(value: str) -> bool:
    """Check for an ISO-8601 date-time (date and time, optional Z/offset)."""
    if "T" not in value:
        return False
    candidate = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        return False
    return True


def _extra(data: dict, known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


# =============================================================================
# Interactions
# =============================================================================

@dataclass
class RetrievalItem:
    """One retrieved chunk attached to an interaction's context."""
    artifact_id: str | None = None
    chunk_id: str | None = None
    snippet_text: str | None = None
    score: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("artifactId", "chunkId", "snippetText", "score")

    @classmethod
    def parse(cls, data: Any, checker: _Checker, path: str) -> "RetrievalItem":
        if not isinstance(data, dict):
            checker.fail(path, "Expected object")
            return cls()
        score = data.get("score")
        if score is not None and (isinstance(score, bool) or not isinstance(score, (int, float))):
            checker.fail(f"{path}.score", "Expected number")
            score = None
        return cls(
            artifact_id=checker.string(data, "artifactId", f"{path}.artifactId", required=False),
            chunk_id=checker.string(data, "chunkId", f"{path}.chunkId", required=False),
            snippet_text=checker.string(data, "snippetText", f"{path}.snippetText", required=False),
            score=score,
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.artifact_id is not None:
            d["artifactId"] = self.artifact_id
        if self.chunk_id is not None:
            d["chunkId"] = self.chunk_id
        if self.snippet_text is not None:
            d["snippetText"] = self.snippet_text
        if self.score is not None:
            d["score"] = self.score
        d.update(self.extra)
        return d


@dataclass
class Interaction:
    """A single recorded prompt/response exchange.

    Attributes:
        interaction_id: Identity within a collection. Assumed unique, but
                        duplicates are tolerated (grouping is positional).
        timestamp: ISO-8601 string as ingested.
        input_text: The prompt text; the only field deduplication looks at.
        dimensions: Free-form string key/value stratification axes.
        tags: Free-form labels counted by the distribution counter.
    """
    interaction_id: str
    input_text: str
    timestamp: str = ""
    output_text: str | None = None
    retrieval: list[RetrievalItem] | None = None
    context_extra: dict[str, Any] = field(default_factory=dict)
    dimensions: dict[str, str] | None = None
    tags: list[str] | None = None
    source: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = (
        "interactionId", "timestamp", "input", "output", "context",
        "dimensions", "tags", "source",
    )

    @classmethod
    def from_dict(cls, data: Any) -> "Interaction":
        """Validate and build an Interaction from its wire form."""
        checker = _Checker(data)
        checker.raise_if_failed()

        interaction_id = checker.string(data, "interactionId", "interactionId")
        timestamp = checker.timestamp(data, "timestamp", "timestamp")

        input_text = None
        input_obj = checker.obj(data, "input", "input", required=True)
        if input_obj is not None:
            input_text = checker.string(input_obj, "text", "input.text")

        output_text = None
        output_obj = checker.obj(data, "output", "output")
        if output_obj is not None:
            output_text = checker.string(output_obj, "text", "output.text")

        retrieval = None
        context_extra: dict[str, Any] = {}
        context = checker.obj(data, "context", "context")
        if context is not None:
            context_extra = _extra(context, ("retrieval",))
            retrieval_obj = checker.obj(context, "retrieval", "context.retrieval")
            if retrieval_obj is not None:
                items = retrieval_obj.get("items")
                if not isinstance(items, list):
                    checker.fail("context.retrieval.items", "Expected array")
                else:
                    retrieval = [
                        RetrievalItem.parse(item, checker, f"context.retrieval.items.{i}")
                        for i, item in enumerate(items)
                    ]

        dimensions = checker.string_map(data, "dimensions", "dimensions")
        tags = checker.string_list(data, "tags", "tags")
        source = checker.string(data, "source", "source", required=False)

        checker.raise_if_failed()
        return cls(
            interaction_id=interaction_id,
            input_text=input_text,
            timestamp=timestamp,
            output_text=output_text,
            retrieval=retrieval,
            context_extra=context_extra,
            dimensions=dimensions,
            tags=tags,
            source=source,
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire form."""
        d: dict[str, Any] = {
            "interactionId": self.interaction_id,
            "timestamp": self.timestamp,
            "input": {"text": self.input_text},
        }
        if self.output_text is not None:
            d["output"] = {"text": self.output_text}
        if self.retrieval is not None or self.context_extra:
            context: dict[str, Any] = dict(self.context_extra)
            if self.retrieval is not None:
                context["retrieval"] = {"items": [r.to_dict() for r in self.retrieval]}
            d["context"] = context
        if self.dimensions is not None:
            d["dimensions"] = dict(self.dimensions)
        if self.tags is not None:
            d["tags"] = list(self.tags)
        if self.source is not None:
            d["source"] = self.source
        d.update(self.extra)
        return d


# =============================================================================
# Labels and artifacts
# =============================================================================

@dataclass
class Label:
    """A human review verdict for one interaction."""
    interaction_id: str
    verdict: str
    reviewed_at: str = ""
    reviewer: str = ""
    notes: str | None = None
    expected: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("interactionId", "reviewedAt", "reviewer", "verdict", "notes", "expected")
    _EXPECTED_STRINGS = ("expectedAnswer",)
    _EXPECTED_LISTS = (
        "mustInclude", "mustNotInclude", "allowedArtifactIds", "blockedArtifactIds",
    )

    @classmethod
    def from_dict(cls, data: Any) -> "Label":
        """Validate and build a Label from its wire form."""
        checker = _Checker(data)
        checker.raise_if_failed()

        interaction_id = checker.string(data, "interactionId", "interactionId")
        reviewed_at = checker.timestamp(data, "reviewedAt", "reviewedAt")
        reviewer = checker.string(data, "reviewer", "reviewer")
        verdict = checker.string(data, "verdict", "verdict")
        if verdict is not None and verdict not in VERDICTS:
            checker.fail(
                "verdict",
                f"Invalid option: expected one of {'|'.join(VERDICTS)}",
            )
        notes = checker.string(data, "notes", "notes", required=False)

        expected = checker.obj(data, "expected", "expected")
        if expected is not None:
            for key in expected:
                if key not in cls._EXPECTED_STRINGS + cls._EXPECTED_LISTS:
                    checker.fail(f"expected.{key}", "Unrecognized key")
            for key in cls._EXPECTED_STRINGS:
                checker.string(expected, key, f"expected.{key}", required=False)
            for key in cls._EXPECTED_LISTS:
                checker.string_list(expected, key, f"expected.{key}")

        checker.raise_if_failed()
        return cls(
            interaction_id=interaction_id,
            verdict=verdict,
            reviewed_at=reviewed_at,
            reviewer=reviewer,
            notes=notes,
            expected=dict(expected) if expected is not None else None,
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "interactionId": self.interaction_id,
            "reviewedAt": self.reviewed_at,
            "reviewer": self.reviewer,
            "verdict": self.verdict,
        }
        if self.notes is not None:
            d["notes"] = self.notes
        if self.expected is not None:
            d["expected"] = dict(self.expected)
        d.update(self.extra)
        return d


@dataclass
class Artifact:
    """A document or source that retrieval items point at."""
    artifact_id: str
    type: str
    title: str | None = None
    uri: str | None = None
    updated_at: str | None = None
    meta: dict[str, str | int | float | bool] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = ("artifactId", "type", "title", "uri", "updatedAt", "meta")

    @classmethod
    def from_dict(cls, data: Any) -> "Artifact":
        checker = _Checker(data)
        checker.raise_if_failed()

        artifact_id = checker.string(data, "artifactId", "artifactId")
        type_ = checker.string(data, "type", "type")
        title = checker.string(data, "title", "title", required=False)
        uri = checker.string(data, "uri", "uri", required=False)
        updated_at = checker.timestamp(data, "updatedAt", "updatedAt", required=False)

        meta = checker.obj(data, "meta", "meta")
        if meta is not None:
            for k, v in meta.items():
                if not isinstance(v, (str, int, float, bool)):
                    checker.fail(f"meta.{k}", "Expected string, number or boolean")

        checker.raise_if_failed()
        return cls(
            artifact_id=artifact_id,
            type=type_,
            title=title,
            uri=uri,
            updated_at=updated_at,
            meta=dict(meta) if meta is not None else None,
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"artifactId": self.artifact_id, "type": self.type}
        if self.title is not None:
            d["title"] = self.title
        if self.uri is not None:
            d["uri"] = self.uri
        if self.updated_at is not None:
            d["updatedAt"] = self.updated_at
        if self.meta is not None:
            d["meta"] = dict(self.meta)
        d.update(self.extra)
        return d


# =============================================================================
# Dataset versions
# =============================================================================

@dataclass(frozen=True)
class DatasetVersion:
    """An immutable, named snapshot of a chosen interaction subset."""
    name: str
    created_at: str
    interaction_ids: tuple[str, ...]
    by_dimension: dict[str, dict[str, int]]
    tag_counts: dict[str, int]
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "DatasetVersion":
        stats = data.get("stats", {})
        return cls(
            name=data["name"],
            created_at=data["createdAt"],
            interaction_ids=tuple(data.get("interactionIds", [])),
            by_dimension=stats.get("byDimension", {}),
            tag_counts=stats.get("tagCounts", {}) or {},
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name, "createdAt": self.created_at}
        if self.description is not None:
            d["description"] = self.description
        d["interactionIds"] = list(self.interaction_ids)
        d["stats"] = {"byDimension": self.by_dimension, "tagCounts": self.tag_counts}
        return d
