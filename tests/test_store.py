"""SQLite live store."""

import pytest
from conftest import make_interaction, make_label

from goldenset.errors import VersionExistsError
from goldenset.store import SQLiteStore
from goldenset.types import Artifact, DatasetVersion


@pytest.fixture
def store():
    with SQLiteStore(":memory:") as s:
        yield s


def test_interaction_upsert_and_get(store):
    store.upsert_interaction(make_interaction("1", text="first", dimensions={"dept": "eng"}))
    store.upsert_interaction(make_interaction("1", text="second", dimensions={"dept": "hr"}))

    assert store.count_interactions() == 1
    fetched = store.get_interaction("1")
    assert fetched.input_text == "second"
    assert fetched.dimensions == {"dept": "hr"}
    assert store.get_interaction("missing") is None


def test_bulk_upsert_and_lookup(store):
    count = store.upsert_interactions(make_interaction(str(i)) for i in range(1200))
    assert count == 1200
    assert store.count_interactions() == 1200

    ids = [str(i) for i in range(0, 1200, 2)] + ["nope"]
    fetched = store.get_interactions(ids)
    assert sorted(i.interaction_id for i in fetched) == sorted(ids[:-1])


def test_where_filter_on_dimensions(store):
    store.upsert_interactions([
        make_interaction("1", dimensions={"dept": "eng", "intent": "policy"}),
        make_interaction("2", dimensions={"dept": "eng", "intent": "incident"}),
        make_interaction("3", dimensions={"dept": "hr"}),
        make_interaction("4"),
        make_interaction("5", dimensions={"odd.key": "x"}),
    ])

    assert len(store.get_all_interactions()) == 5
    assert sorted(i.interaction_id for i in store.get_all_interactions({"dept": "eng"})) == ["1", "2"]
    assert [
        i.interaction_id
        for i in store.get_all_interactions({"dept": "eng", "intent": "incident"})
    ] == ["2"]
    assert [i.interaction_id for i in store.get_all_interactions({"odd.key": "x"})] == ["5"]


def test_labels(store):
    store.upsert_interaction(make_interaction("1"))
    store.upsert_label(make_label("1", "pass"))
    store.upsert_labels([make_label("1", "fail")])

    assert store.get_label("1").verdict == "fail"
    assert store.get_label("2") is None
    assert [label.verdict for label in store.get_labels(["1", "2"])] == ["fail"]


def test_artifacts(store):
    store.upsert_artifact(Artifact(artifact_id="kb-1", type="doc", meta={"pages": 3}))
    artifact = store.get_artifact("kb-1")
    assert artifact.type == "doc"
    assert artifact.meta == {"pages": 3}
    assert store.get_artifact("kb-2") is None


def make_version(name, created_at, ids=("1", "2")):
    return DatasetVersion(
        name=name,
        created_at=created_at,
        interaction_ids=tuple(ids),
        by_dimension={"dept": {"eng": len(ids)}},
        tag_counts={},
        description=f"{name} desc",
    )


def test_dataset_versions(store):
    store.create_dataset_version(make_version("golden/v1", "2026-01-01T00:00:00+00:00"))
    store.create_dataset_version(make_version("golden/v2", "2026-02-01T00:00:00+00:00", ids=("1",)))

    version = store.get_dataset_version("golden/v1")
    assert version == make_version("golden/v1", "2026-01-01T00:00:00+00:00")
    assert store.get_dataset_version("golden/v3") is None

    listed = store.list_dataset_versions()
    assert [v["name"] for v in listed] == ["golden/v2", "golden/v1"]
    assert listed[0]["interaction_count"] == 1


def test_duplicate_version_name_rejected(store):
    store.create_dataset_version(make_version("v1", "2026-01-01T00:00:00+00:00"))
    with pytest.raises(VersionExistsError):
        store.create_dataset_version(make_version("v1", "2026-01-02T00:00:00+00:00"))


def test_file_backed_store_persists(tmp_path):
    db_path = tmp_path / "data" / "db.sqlite"
    with SQLiteStore(db_path) as store:
        store.upsert_interaction(make_interaction("1"))
    assert db_path.exists()

    with SQLiteStore(db_path) as store:
        assert store.count_interactions() == 1


def test_closed_store_raises():
    store = SQLiteStore(":memory:")
    store.close()
    with pytest.raises(RuntimeError):
        store.count_interactions()
