"""
SQLite-backed live store for interactions, artifacts, labels and versions.

The store is constructed explicitly and closed by its owner:

    ```python
    with SQLiteStore(config.db_path) as store:
        store.upsert_interaction(interaction)
    ```

Nested objects are stored as JSON text columns and rebuilt through the same
``from_dict`` constructors used at ingestion.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Mapping

from goldenset.errors import VersionExistsError
from goldenset.types import Artifact, DatasetVersion, Interaction, Label
from goldenset.utils.io import ensure_dir

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS artifacts (
    artifactId TEXT PRIMARY KEY,
    body TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS interactions (
    interactionId TEXT PRIMARY KEY,
    timestamp TEXT NOT NULL,
    dimensions TEXT,
    source TEXT,
    body TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS labels (
    interactionId TEXT PRIMARY KEY,
    verdict TEXT NOT NULL,
    body TEXT NOT NULL,
    FOREIGN KEY (interactionId) REFERENCES interactions(interactionId)
);

CREATE TABLE IF NOT EXISTS dataset_versions (
    name TEXT PRIMARY KEY,
    createdAt TEXT NOT NULL,
    description TEXT,
    interactionIds TEXT NOT NULL,
    stats TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_interactions_timestamp ON interactions(timestamp);
CREATE INDEX IF NOT EXISTS idx_interactions_source ON interactions(source);
"""

# SQLite caps bound parameters per statement; chunk IN (...) lookups
_MAX_PARAMS = 500


def _json_path(key: str) -> str:
    escaped = key.replace("\\", "\\\\").replace('"', '\\"')
    return f'$."{escaped}"'


class SQLiteStore:
    """Single-writer store backed by one SQLite database file."""

    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)
        in_memory = self.db_path == ":memory:"
        if not in_memory:
            ensure_dir(Path(self.db_path).parent)
        self._conn: sqlite3.Connection | None = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        if not in_memory:
            self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    def __enter__(self) -> "SQLiteStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Store is closed")
        return self._conn

    # =========================================================================
    # Artifacts
    # =========================================================================

    def upsert_artifact(self, artifact: Artifact) -> None:
        self.conn.execute(
            """
            INSERT INTO artifacts (artifactId, body) VALUES (?, ?)
            ON CONFLICT(artifactId) DO UPDATE SET body = excluded.body
            """,
            (artifact.artifact_id, json.dumps(artifact.to_dict())),
        )
        self.conn.commit()

    def get_artifact(self, artifact_id: str) -> Artifact | None:
        row = self.conn.execute(
            "SELECT body FROM artifacts WHERE artifactId = ?", (artifact_id,)
        ).fetchone()
        return Artifact.from_dict(json.loads(row["body"])) if row else None

    # =========================================================================
    # Interactions
    # =========================================================================

    def upsert_interaction(self, interaction: Interaction, commit: bool = True) -> None:
        self.conn.execute(
            """
            INSERT INTO interactions (interactionId, timestamp, dimensions, source, body)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(interactionId) DO UPDATE SET
                timestamp = excluded.timestamp,
                dimensions = excluded.dimensions,
                source = excluded.source,
                body = excluded.body
            """,
            (
                interaction.interaction_id,
                interaction.timestamp,
                json.dumps(interaction.dimensions) if interaction.dimensions is not None else None,
                interaction.source,
                json.dumps(interaction.to_dict()),
            ),
        )
        if commit:
            self.conn.commit()

    def upsert_interactions(self, interactions: Iterable[Interaction]) -> int:
        count = 0
        with self.conn:
            for interaction in interactions:
                self.upsert_interaction(interaction, commit=False)
                count += 1
        return count

    def get_interaction(self, interaction_id: str) -> Interaction | None:
        row = self.conn.execute(
            "SELECT body FROM interactions WHERE interactionId = ?", (interaction_id,)
        ).fetchone()
        return Interaction.from_dict(json.loads(row["body"])) if row else None

    def get_interactions(self, interaction_ids: Iterable[str]) -> list[Interaction]:
        """Fetch interactions by id; unknown ids are skipped, order is arbitrary."""
        return [
            Interaction.from_dict(json.loads(row["body"]))
            for row in self._select_in("interactions", "body", list(interaction_ids))
        ]

    def get_all_interactions(self, where: Mapping[str, str] | None = None) -> list[Interaction]:
        """All interactions ordered by id, optionally filtered by exact dimension values."""
        query = "SELECT body FROM interactions"
        params: list[Any] = []
        if where:
            conditions = []
            for key, value in where.items():
                conditions.append("json_extract(dimensions, ?) = ?")
                params.extend([_json_path(key), value])
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY interactionId"
        rows = self.conn.execute(query, params).fetchall()
        return [Interaction.from_dict(json.loads(row["body"])) for row in rows]

    def count_interactions(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM interactions").fetchone()[0]

    # =========================================================================
    # Labels
    # =========================================================================

    def upsert_label(self, label: Label, commit: bool = True) -> None:
        self.conn.execute(
            """
            INSERT INTO labels (interactionId, verdict, body) VALUES (?, ?, ?)
            ON CONFLICT(interactionId) DO UPDATE SET
                verdict = excluded.verdict,
                body = excluded.body
            """,
            (label.interaction_id, label.verdict, json.dumps(label.to_dict())),
        )
        if commit:
            self.conn.commit()

    def upsert_labels(self, labels: Iterable[Label]) -> int:
        count = 0
        with self.conn:
            for label in labels:
                self.upsert_label(label, commit=False)
                count += 1
        return count

    def get_label(self, interaction_id: str) -> Label | None:
        row = self.conn.execute(
            "SELECT body FROM labels WHERE interactionId = ?", (interaction_id,)
        ).fetchone()
        return Label.from_dict(json.loads(row["body"])) if row else None

    def get_labels(self, interaction_ids: Iterable[str]) -> list[Label]:
        return [
            Label.from_dict(json.loads(row["body"]))
            for row in self._select_in("labels", "body", list(interaction_ids))
        ]

    # =========================================================================
    # Dataset versions
    # =========================================================================

    def create_dataset_version(self, version: DatasetVersion) -> None:
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO dataset_versions
                        (name, createdAt, description, interactionIds, stats)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        version.name,
                        version.created_at,
                        version.description,
                        json.dumps(list(version.interaction_ids)),
                        json.dumps({
                            "byDimension": version.by_dimension,
                            "tagCounts": version.tag_counts,
                        }),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise VersionExistsError(version.name) from e

    def get_dataset_version(self, name: str) -> DatasetVersion | None:
        row = self.conn.execute(
            "SELECT * FROM dataset_versions WHERE name = ?", (name,)
        ).fetchone()
        if row is None:
            return None
        return DatasetVersion.from_dict({
            "name": row["name"],
            "createdAt": row["createdAt"],
            "description": row["description"],
            "interactionIds": json.loads(row["interactionIds"]),
            "stats": json.loads(row["stats"]),
        })

    def list_dataset_versions(self) -> list[dict[str, Any]]:
        """Version summaries, newest first."""
        rows = self.conn.execute(
            """
            SELECT name, createdAt, description, interactionIds
            FROM dataset_versions ORDER BY createdAt DESC, name ASC
            """
        ).fetchall()
        return [
            {
                "name": row["name"],
                "created_at": row["createdAt"],
                "description": row["description"],
                "interaction_count": len(json.loads(row["interactionIds"])),
            }
            for row in rows
        ]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _select_in(self, table: str, column: str, ids: list[str]) -> list[sqlite3.Row]:
        rows: list[sqlite3.Row] = []
        for start in range(0, len(ids), _MAX_PARAMS):
            chunk = ids[start : start + _MAX_PARAMS]
            placeholders = ",".join("?" for _ in chunk)
            rows.extend(
                self.conn.execute(
                    f"SELECT {column} FROM {table} WHERE interactionId IN ({placeholders})",
                    chunk,
                ).fetchall()
            )
        return rows
