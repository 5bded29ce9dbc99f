"""Comparison and grouped statistics over lore entities."""

from .compare import COMPARISONS, CompareEngine, ComparisonSpec
from .stats import AGGREGATORS, Aggregator, StatsEngine

__all__ = ["COMPARISONS", "CompareEngine", "ComparisonSpec", "AGGREGATORS", "Aggregator", "StatsEngine"]
