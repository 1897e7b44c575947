"""
Utility modules for goldenset.

Provides JSON/JSONL writers and SHA256 helpers shared by publish, export
and deduplication.
"""

from goldenset.utils.io import (
    ensure_dir,
    hash_string,
    read_json,
    sha256_file,
    write_json,
    write_jsonl,
    write_text,
)

__all__ = [
    "ensure_dir",
    "hash_string",
    "read_json",
    "sha256_file",
    "write_json",
    "write_jsonl",
    "write_text",
]
