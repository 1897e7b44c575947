"""
Quota allocation across strata.

Splits a target sample size into per-group integer quotas in three passes:

1. Coverage floor: every non-empty group gets ``min(min_per_group, size)``,
   in sorted-key order, until the target budget runs out. Coverage is
   best-effort; an infeasible floor gives partial coverage, never an error.
2. Largest remainder: what is left is shared out proportionally to group
   size. Each group takes the floor of its exact share (capped by its spare
   capacity), then leftover units go one at a time to the largest fractional
   remainders, ties broken by key order, skipping full groups.
3. Top-up: if capacity caps left the total short, groups with spare
   capacity are filled in sorted-key order.

Guarantees, for any sizes, target and min_per_group:
- ``0 <= quota[k] <= sizes[k]``
- ``sum(quota) == min(target, sum(sizes))`` (target < 0 counts as 0)
- output depends only on the inputs, not on mapping iteration order
"""

from __future__ import annotations

from typing import Hashable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)


def allocate_quotas(
    group_sizes: Mapping[K, int],
    target: int,
    min_per_group: int = 0,
) -> dict[K, int]:
    """
    Allocate ``target`` units across groups.

    Args:
        group_sizes: Capacity of each group. Keys must be mutually sortable.
        target: Requested total. Capped at the total capacity.
        min_per_group: Coverage floor per non-empty group (0 disables it).

    Returns:
        Quota per group, in sorted key order, including zero quotas.
    """
    keys = sorted(group_sizes)
    sizes = {k: max(0, int(group_sizes[k])) for k in keys}
    total_size = sum(sizes.values())
    target = max(0, min(int(target), total_size))

    alloc: dict[K, int] = {k: 0 for k in keys}
    if target == 0:
        return alloc

    # 1) Coverage floor
    if min_per_group > 0:
        budget = target
        for k in keys:
            if budget <= 0:
                break
            give = min(min_per_group, sizes[k], budget)
            alloc[k] = give
            budget -= give

    remaining = target - sum(alloc.values())

    # 2) Largest remainder over the rest. Shares are size * remaining /
    # total_size; integer divmod keeps floors and remainders exact, and all
    # remainders share the denominator so they compare directly.
    if remaining > 0:
        to_distribute = remaining
        remainders: list[tuple[int, K]] = []
        for k in keys:
            capacity = sizes[k] - alloc[k]
            if capacity <= 0:
                continue
            base, frac = divmod(sizes[k] * to_distribute, total_size)
            alloc[k] += min(base, capacity)
            remainders.append((frac, k))

        remaining = target - sum(alloc.values())

        # Stable sort: equal remainders stay in key order
        remainders.sort(key=lambda r: r[0], reverse=True)
        for _, k in remainders:
            if remaining <= 0:
                break
            if alloc[k] < sizes[k]:
                alloc[k] += 1
                remaining -= 1

    # 3) Top-up when capacity caps left us short
    for k in keys:
        if remaining <= 0:
            break
        give = min(sizes[k] - alloc[k], remaining)
        if give > 0:
            alloc[k] += give
            remaining -= give

    return alloc
