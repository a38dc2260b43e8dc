"""Application services for fetching, derivation, scoring and screening."""

from .compounder import build_row
from .concurrency import map_with_concurrency
from .filters import evaluate_filters
from .growth import growth_stats
from .quality_scorer import compute_quality_score
from .screener import CompoundingScreener
from .snapshot_fetcher import CachedSnapshotFetcher, RetryingFetcher
from .valuation import ValuationEngine

__all__ = [
    "CachedSnapshotFetcher",
    "CompoundingScreener",
    "RetryingFetcher",
    "ValuationEngine",
    "build_row",
    "compute_quality_score",
    "evaluate_filters",
    "growth_stats",
    "map_with_concurrency",
]
