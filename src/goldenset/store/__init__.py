"""
Live store for ingested records.

Callers construct a SQLiteStore for the project's database path and close it
when done; there is no process-wide handle.
"""

from goldenset.store.sqlite import SQLiteStore

__all__ = ["SQLiteStore"]
