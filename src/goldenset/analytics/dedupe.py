"""
Exact deduplication on prompt text.

Two interactions are duplicates when their input text is equal after
trimming surrounding whitespace and lowercasing. Output text, retrieval
context, metadata and timestamps are ignored: the goal is one copy per
prompt intent, while different responses to distinct prompts are kept.
"""

from __future__ import annotations

import logging
from typing import Iterable

from goldenset.types import Interaction
from goldenset.utils.io import hash_string

logger = logging.getLogger(__name__)


def canonical_text(text: str) -> str:
    return text.strip().lower()


def hash_interaction(interaction: Interaction) -> str:
    """SHA256 of the canonical input text."""
    return hash_string(canonical_text(interaction.input_text))


def dedupe_exact(interactions: Iterable[Interaction]) -> list[Interaction]:
    """Drop later duplicates; the first occurrence wins and order is kept."""
    seen: set[str] = set()
    deduped: list[Interaction] = []
    dropped = 0

    for interaction in interactions:
        digest = hash_interaction(interaction)
        if digest in seen:
            dropped += 1
            continue
        seen.add(digest)
        deduped.append(interaction)

    if dropped:
        logger.info(f"Dedupe (exact): dropped {dropped} duplicate prompts")
    return deduped
