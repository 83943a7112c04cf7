"""Context compression module for agent transcripts.

This module keeps a transcript within a model's context window:
- Token counting and overflow detection
- Turn classification and priority scoring
- Four reduction strategies (truncate, sliding window, priority-based, summarize)
- Strategy selection and optional tool pairing enforcement
"""

from .classifier import TurnClassifier
from .compression_engine import ContextCompressionEngine, compress_transcript
from .pairing import enforce_tool_pairing, find_orphaned_turns
from .priority import PriorityScorer
from .selector import StrategySelector
from .strategies import (
    PriorityBasedStrategy,
    ReductionOutcome,
    ReductionStrategy,
    SlidingWindowStrategy,
    SummarizeStrategy,
    TruncateStrategy,
)

__all__ = [
    # Engine (recommended entry point)
    "ContextCompressionEngine",
    "compress_transcript",
    # Building blocks
    "TurnClassifier",
    "PriorityScorer",
    "StrategySelector",
    "enforce_tool_pairing",
    "find_orphaned_turns",
    # Strategies
    "ReductionOutcome",
    "ReductionStrategy",
    "TruncateStrategy",
    "SlidingWindowStrategy",
    "PriorityBasedStrategy",
    "SummarizeStrategy",
]
