"""JSONL parsing and record validation."""

import json

import pytest
from conftest import write_jsonl_lines

from goldenset.errors import RecordValidationError
from goldenset.ingest import parse_artifacts, parse_interactions, parse_labels
from goldenset.types import Interaction, Label

VALID_INTERACTION = {
    "interactionId": "i-1",
    "timestamp": "2026-01-01T12:00:00Z",
    "input": {"text": "How do I reset my VPN token?"},
    "output": {"text": "Open the portal."},
    "context": {
        "retrieval": {"items": [{"artifactId": "kb-1", "chunkId": "c1", "score": 0.8}]},
        "channel": "slack",
    },
    "dimensions": {"intent": "how_to", "dept": "it"},
    "tags": ["vpn"],
    "source": "prod",
    "traceId": "abc",
}


def test_parse_valid_interactions(tmp_path):
    path = tmp_path / "interactions.jsonl"
    write_jsonl_lines(path, [VALID_INTERACTION, {**VALID_INTERACTION, "interactionId": "i-2"}])

    result = parse_interactions(path)
    assert result.errors == []
    assert [i.interaction_id for i in result.items] == ["i-1", "i-2"]

    first = result.items[0]
    assert first.input_text == "How do I reset my VPN token?"
    assert first.output_text == "Open the portal."
    assert first.dimensions == {"intent": "how_to", "dept": "it"}
    assert first.retrieval[0].artifact_id == "kb-1"
    assert first.to_dict() == VALID_INTERACTION


def test_invalid_json_reports_line_number(tmp_path):
    path = tmp_path / "interactions.jsonl"
    write_jsonl_lines(path, [VALID_INTERACTION, "", "{broken"])

    result = parse_interactions(path)
    assert len(result.items) == 1
    assert len(result.errors) == 1
    assert result.errors[0].line == 3
    assert result.errors[0].error.startswith("Invalid JSON")
    assert result.errors[0].content == "{broken"


def test_missing_fields_reported_with_paths(tmp_path):
    path = tmp_path / "interactions.jsonl"
    record = {"interactionId": "i-1", "timestamp": "yesterday", "input": {}}
    write_jsonl_lines(path, [record])

    error = parse_interactions(path).errors[0]
    assert "input.text: Required" in error.error
    assert "timestamp: Invalid ISO datetime" in error.error


def test_non_object_line(tmp_path):
    path = tmp_path / "interactions.jsonl"
    write_jsonl_lines(path, ["[1, 2]"])
    assert parse_interactions(path).errors[0].error == "<root>: Expected object"


def test_error_content_truncated(tmp_path):
    path = tmp_path / "interactions.jsonl"
    write_jsonl_lines(path, ["x" * 500])
    assert len(parse_interactions(path).errors[0].content) == 100


def test_bom_and_blank_lines(tmp_path):
    path = tmp_path / "interactions.jsonl"
    path.write_text(
        "\ufeff" + json.dumps(VALID_INTERACTION) + "\n\n   \n"
        + json.dumps({**VALID_INTERACTION, "interactionId": "i-2"}) + "\n",
        encoding="utf-8",
    )
    result = parse_interactions(path)
    assert result.errors == []
    assert len(result.items) == 2


def test_labels_validate_verdict(tmp_path):
    path = tmp_path / "labels.jsonl"
    good = {
        "interactionId": "i-1",
        "reviewedAt": "2026-01-02T00:00:00+00:00",
        "reviewer": "alice",
        "verdict": "fail",
        "expected": {"mustInclude": ["portal"]},
    }
    write_jsonl_lines(path, [good, {**good, "verdict": "maybe"}])

    result = parse_labels(path)
    assert [label.verdict for label in result.items] == ["fail"]
    assert result.items[0].expected == {"mustInclude": ["portal"]}
    assert result.errors[0].line == 2
    assert "verdict: Invalid option" in result.errors[0].error


def test_label_rejects_unknown_expected_keys():
    with pytest.raises(RecordValidationError) as exc_info:
        Label.from_dict({
            "interactionId": "i-1",
            "reviewedAt": "2026-01-02T00:00:00Z",
            "reviewer": "alice",
            "verdict": "pass",
            "expected": {"mustRhyme": True},
        })
    assert "expected.mustRhyme: Unrecognized key" in exc_info.value.issues


def test_interaction_type_errors():
    with pytest.raises(RecordValidationError) as exc_info:
        Interaction.from_dict({
            "interactionId": 7,
            "timestamp": "2026-01-01T00:00:00Z",
            "input": {"text": "hi"},
            "tags": ["ok", 3],
        })
    issues = exc_info.value.issues
    assert "interactionId: Expected string, received int" in issues
    assert "tags.1: Expected string" in issues


def test_parse_artifacts(tmp_path):
    path = tmp_path / "artifacts.jsonl"
    write_jsonl_lines(path, [
        {"artifactId": "kb-1", "type": "doc", "title": "VPN"},
        {"type": "doc"},
    ])
    result = parse_artifacts(path)
    assert [a.artifact_id for a in result.items] == ["kb-1"]
    assert result.errors[0].line == 2


def test_invalid_utf8_line_is_reported(tmp_path):
    path = tmp_path / "interactions.jsonl"
    path.write_bytes(
        json.dumps(VALID_INTERACTION).encode("utf-8") + b"\n"
        + b'\xff\xfe{"bad": 1}\n'
        + json.dumps({**VALID_INTERACTION, "interactionId": "i-2"}).encode("utf-8") + b"\n"
    )

    result = parse_interactions(path)
    assert [i.interaction_id for i in result.items] == ["i-1", "i-2"]
    assert len(result.errors) == 1
    assert result.errors[0].line == 2
    assert result.errors[0].error.startswith("Invalid UTF-8")
    assert '{"bad": 1}' in result.errors[0].content


def test_non_ascii_text_survives(tmp_path):
    path = tmp_path / "interactions.jsonl"
    record = {**VALID_INTERACTION, "input": {"text": "Wie setze ich mein Passwort zurück? 密码"}}
    path.write_text(json.dumps(record, ensure_ascii=False) + "\n", encoding="utf-8")

    result = parse_interactions(path)
    assert result.errors == []
    assert result.items[0].input_text == "Wie setze ich mein Passwort zurück? 密码"
