"""Diff rendering."""

import json

import pytest

from goldenset.datasets.diff import CountDelta, DatasetDiff, InteractionDiff, LabelDiff
from goldenset.datasets.report import diff_to_dict, format_diff_json, format_diff_text


def make_diff(**overrides):
    fields = dict(
        from_version="v1",
        to_version="v2",
        interactions=InteractionDiff(added=["4"], removed=["1"], unchanged=["2", "3"]),
        dimensions={
            "intent": {
                "how_to": CountDelta(2, 1),
                "troubleshooting": CountDelta(1, 3),
                "billing": CountDelta(1, 1),
            }
        },
        tags={"vpn": CountDelta(1, 1), "urgent": CountDelta(0, 2)},
        labels=LabelDiff(added=1, removed=2, verdict_changes={"pass->fail": 1}),
    )
    fields.update(overrides)
    return DatasetDiff(**fields)


def test_text_report_sections():
    text = format_diff_text(make_diff())
    lines = text.splitlines()

    assert lines[0] == "Diff: v1 → v2"
    assert "  Added: 1" in lines
    assert "  Removed: 1" in lines
    assert "  Unchanged: 2" in lines
    assert "  Added IDs: 4" in lines
    assert "  Removed IDs: 1" in lines
    assert "Dimension: intent" in lines
    assert "Tags:" in lines
    assert "  New: 1" in lines
    assert "  Verdict changes:" in lines
    assert "    pass->fail: 1" in lines


def test_text_report_sorts_by_magnitude_then_name():
    lines = format_diff_text(make_diff()).splitlines()
    start = lines.index("Dimension: intent") + 1
    names = [line.split()[0] for line in lines[start:start + 3]]
    assert names == ["troubleshooting", "how_to", "billing"]

    entry = lines[start]
    assert entry == f"  {'troubleshooting':<20}    1 →    3  (+2)"
    assert lines[start + 1].endswith("(-1)")
    assert lines[start + 2].endswith("(+0)")


def test_text_report_limit():
    tags = {f"tag{i:02d}": CountDelta(0, i + 1) for i in range(15)}
    lines = format_diff_text(make_diff(tags=tags), limit=10).splitlines()
    start = lines.index("Tags:") + 1
    shown = lines[start:start + 10]
    assert shown[0].split()[0] == "tag14"
    assert lines[start + 10] == "  ... and 5 more"

    unlimited = format_diff_text(make_diff(tags=tags), limit=None)
    assert "more" not in unlimited


def test_text_report_hides_long_id_lists():
    many = InteractionDiff(added=[str(i) for i in range(20)], removed=[], unchanged=[])
    text = format_diff_text(make_diff(interactions=many), limit=10)
    assert "  Added: 20" in text
    assert "Added IDs" not in text


def test_json_report():
    doc = json.loads(format_diff_json(make_diff()))
    assert doc["from"] == "v1"
    assert doc["to"] == "v2"
    assert doc["interactions"]["added"] == ["4"]
    assert doc["dimensions"]["intent"]["troubleshooting"] == {"from": 1, "to": 3, "delta": 2}
    assert doc["tags"]["urgent"] == {"from": 0, "to": 2, "delta": 2}
    assert doc["labels"] == {"added": 1, "removed": 2, "verdictChanges": {"pass->fail": 1}}
    assert doc == diff_to_dict(make_diff())


def test_text_report_rejects_limit_below_one():
    for limit in (0, -1):
        with pytest.raises(ValueError):
            format_diff_text(make_diff(), limit=limit)


def test_text_report_limit_one():
    lines = format_diff_text(make_diff(), limit=1).splitlines()
    start = lines.index("Dimension: intent") + 1
    assert lines[start].split()[0] == "troubleshooting"
    assert lines[start + 1] == "  ... and 2 more"
