"""
Stratified sampling of interactions.

Selects N representative interactions across one or more dimension keys:
- Filter with an exact-match ``where`` clause
- Group by the composite key of the ``by`` dimensions
- Allocate per-group quotas (coverage floor + largest remainder)
- Draw each quota with a partial Fisher-Yates shuffle

With a seed the result is a pure function of (filtered content, by, where,
seed, min_per_group): groups and their members are put in a canonical order
first, and one counter-based Philox stream is consumed across groups in that
order. Without a seed the stream is seeded from OS entropy.

Usage:
    ```python
    sampled = stratified_sample(
        interactions,
        SampleOptions(n=200, by=["intent", "dept"], seed=42),
    )
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence, TypeVar

import numpy as np

from goldenset.analytics.allocate import allocate_quotas
from goldenset.analytics.grouping import filter_where, format_key, group_by_keys
from goldenset.types import Interaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SampleOptions:
    """Parameters for one stratified draw."""
    n: int
    by: list[str]
    where: dict[str, str] | None = None
    seed: int | None = None  # any integer; None means non-reproducible
    min_per_group: int = 1


@dataclass
class SamplePlan:
    """Per-group quotas computed before drawing; useful for summaries."""
    target: int
    filtered_count: int
    allocations: dict[tuple[str, ...], int] = field(default_factory=dict)
    group_sizes: dict[tuple[str, ...], int] = field(default_factory=dict)


SEED_SPACE = 2**64


def make_rng(seed: int | None = None) -> np.random.Generator:
    """
    Counter-based generator; ``seed=None`` draws entropy from the OS.

    Any integer is a valid seed: negative seeds are reduced modulo 2**64.
    """
    if seed is not None and seed < 0:
        seed %= SEED_SPACE
    return np.random.Generator(np.random.Philox(seed))


def sample_from_group(items: Sequence[T], count: int, rng: np.random.Generator) -> list[T]:
    """
    Select ``count`` items by partially shuffling the first ``count`` slots.

    Only ``count`` swaps are made. When ``count`` covers the whole group the
    items are returned unchanged and no randomness is consumed.
    """
    if count <= 0:
        return []
    if count >= len(items):
        return list(items)

    arr = list(items)
    n = len(arr)
    for i in range(count):
        j = i + int(rng.integers(0, n - i))
        arr[i], arr[j] = arr[j], arr[i]
    return arr[:count]


def plan_sample(
    interactions: Sequence[Interaction],
    options: SampleOptions,
) -> tuple[SamplePlan, dict[tuple[str, ...], list[Interaction]]]:
    """Filter, group and allocate without drawing."""
    filtered = filter_where(interactions, options.where)
    groups = group_by_keys(filtered, options.by)
    target = max(0, min(options.n, len(filtered)))

    sizes = {key: len(members) for key, members in groups.items()}
    allocations = allocate_quotas(sizes, target, options.min_per_group)

    plan = SamplePlan(
        target=target,
        filtered_count=len(filtered),
        allocations=allocations,
        group_sizes=sizes,
    )
    return plan, groups


def stratified_sample(
    interactions: Sequence[Interaction],
    options: SampleOptions,
) -> list[Interaction]:
    """
    Draw a stratified sample.

    Returns exactly ``min(n, count matching where)`` interactions, ordered by
    group (sorted composite key) and then by selection order. Never raises
    for ``n`` larger than what is available.
    """
    if options.n <= 0:
        return []

    plan, groups = plan_sample(interactions, options)
    if plan.target == 0:
        return []

    rng = make_rng(options.seed)
    sampled: list[Interaction] = []
    for key, members in groups.items():
        count = plan.allocations.get(key, 0)
        if count <= 0:
            continue
        logger.debug(f"Group [{format_key(key, options.by)}]: {count}/{len(members)}")
        sampled.extend(sample_from_group(members, count, rng))

    # Quotas already sum to target; this only guards the contract
    if len(sampled) > plan.target:
        sampled = sampled[: plan.target]

    if plan.target < options.n:
        logger.warning(
            f"Requested {options.n} interactions but only {plan.filtered_count} "
            f"match; returning {len(sampled)}"
        )
    return sampled


def summarize_sample(
    sampled: Sequence[Interaction],
    by: Sequence[str],
) -> dict[str, int]:
    """Count sampled interactions per composite key, for display."""
    summary: dict[str, int] = {}
    for key, members in group_by_keys(sampled, by).items():
        summary[format_key(key, by)] = len(members)
    return summary
