"""Reduction strategies.

Four interchangeable algorithms sharing one contract:
- TruncateStrategy: recency window plus contiguous backfill
- SlidingWindowStrategy: important turns plus sampled representatives
- PriorityBasedStrategy: globally ranked turns with partial inclusion
- SummarizeStrategy: older turns collapsed into one summary turn
"""

from contextbudget.infrastructure.context.strategies.base import (
    ReductionOutcome,
    ReductionStrategy,
)
from contextbudget.infrastructure.context.strategies.priority_based import PriorityBasedStrategy
from contextbudget.infrastructure.context.strategies.sliding_window import SlidingWindowStrategy
from contextbudget.infrastructure.context.strategies.summarize import SummarizeStrategy
from contextbudget.infrastructure.context.strategies.truncate import TruncateStrategy

__all__ = [
    "ReductionOutcome",
    "ReductionStrategy",
    "TruncateStrategy",
    "SlidingWindowStrategy",
    "PriorityBasedStrategy",
    "SummarizeStrategy",
]
