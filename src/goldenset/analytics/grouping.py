"""
Filtering and composite-key grouping of interactions.

A group's composite key is the tuple of its values over the chosen dimension
keys, with MISSING standing in for absent keys. Tuples are used directly as
dict keys, so a value containing any delimiter character can never collide
with a different value sequence.
"""

from __future__ import annotations

import json
from collections import defaultdict
from typing import Iterable, Mapping, Sequence

from goldenset.types import MISSING, Interaction

CompositeKey = tuple[str, ...]


def parse_where(spec: str | None) -> dict[str, str] | None:
    """
    Parse ``"k1=v1,k2=v2"`` into a filter mapping.

    Pairs with an empty key or value are ignored; returns None when nothing
    usable remains.
    """
    if not spec:
        return None
    where: dict[str, str] = {}
    for part in spec.split(","):
        key, sep, value = part.partition("=")
        key, value = key.strip(), value.strip()
        if sep and key and value:
            where[key] = value
    return where or None


def parse_keys(spec: str | None) -> list[str]:
    """Parse ``"k1,k2"`` into a list of dimension keys."""
    if not spec:
        return []
    return [k.strip() for k in spec.split(",") if k.strip()]


def matches_where(interaction: Interaction, where: Mapping[str, str]) -> bool:
    """Exact-match conjunction over dimension values."""
    dims = interaction.dimensions
    if not dims:
        return False
    return all(dims.get(k) == v for k, v in where.items())


def filter_where(
    interactions: Iterable[Interaction],
    where: Mapping[str, str] | None,
) -> list[Interaction]:
    """Apply a where-filter; an absent or empty filter keeps everything."""
    if not where:
        return list(interactions)
    return [i for i in interactions if matches_where(i, where)]


def composite_key(interaction: Interaction, keys: Sequence[str]) -> CompositeKey:
    dims = interaction.dimensions or {}
    return tuple(dims.get(k, MISSING) for k in keys)


def stable_order(interaction: Interaction) -> tuple[str, str, str]:
    # Ties on duplicated ids fall back to the full record so input order never leaks
    return (
        interaction.interaction_id,
        interaction.input_text,
        json.dumps(interaction.to_dict(), sort_keys=True, ensure_ascii=False),
    )


def group_by_keys(
    interactions: Iterable[Interaction],
    keys: Sequence[str],
) -> dict[CompositeKey, list[Interaction]]:
    """
    Partition interactions by composite key.

    Returns a dict whose keys are in sorted order and whose groups are sorted
    by interaction id, so anything consuming the groups depends only on the
    content, never on the input order.
    """
    groups: dict[CompositeKey, list[Interaction]] = defaultdict(list)
    for interaction in interactions:
        groups[composite_key(interaction, keys)].append(interaction)

    return {
        key: sorted(groups[key], key=stable_order)
        for key in sorted(groups)
    }


def format_key(key: CompositeKey, keys: Sequence[str]) -> str:
    """Display form of a composite key, e.g. ``intent=policy, dept=eng``."""
    return ", ".join(f"{k}={v}" for k, v in zip(keys, key))
