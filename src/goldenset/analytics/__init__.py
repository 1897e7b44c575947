"""
Analytics over in-memory interaction collections.

Modules:
- stats: dimension value and tag histograms
- grouping: where-filters and composite-key grouping
- allocate: quota allocation across strata
- sample: deterministic stratified sampling
- dedupe: exact prompt deduplication
"""

from goldenset.analytics.allocate import allocate_quotas
from goldenset.analytics.dedupe import dedupe_exact
from goldenset.analytics.grouping import filter_where, group_by_keys
from goldenset.analytics.sample import SampleOptions, stratified_sample
from goldenset.analytics.stats import DimensionStats, compute_stats, format_stats

__all__ = [
    "allocate_quotas",
    "compute_stats",
    "dedupe_exact",
    "DimensionStats",
    "filter_where",
    "format_stats",
    "group_by_keys",
    "SampleOptions",
    "stratified_sample",
]
