"""
Compression Model - Strategy descriptors, results and tuning configuration.

Everything here is created per compression call and discarded afterwards:
descriptors are configuration (never mutated), results are reports.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contextbudget.domain.model.transcript import Turn

DEFAULT_CONTEXT_WINDOW = 150_000
DEFAULT_ERROR_KEYWORDS: tuple[str, ...] = (
    "error",
    "exception",
    "failed",
    "failure",
    "invalid",
    "unable",
)
TRUNCATION_MARKER = "... [TRUNCATED]"
SUMMARY_START_MARKER = "[CONTEXT SUMMARY]"
SUMMARY_END_MARKER = "[END SUMMARY]"


class StrategyKind(str, Enum):
    """Reduction strategy kinds."""

    TRUNCATE = "truncate"
    SLIDING_WINDOW = "sliding-window"
    PRIORITY_BASED = "priority-based"
    SUMMARIZE = "summarize"


class SelectionPolicy(str, Enum):
    """How the selector picks a strategy when the caller does not."""

    SAFE = "safe"  # Always truncate
    HEURISTIC = "heuristic"  # Pick from transcript shape, never summarize


@dataclass(frozen=True)
class CompressionStrategy:
    """Strategy descriptor for one compression call."""

    kind: StrategyKind
    max_tokens: int
    preserve_recent: int | None = None
    preserve_important: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "max_tokens": self.max_tokens,
            "preserve_recent": self.preserve_recent,
            "preserve_important": self.preserve_important,
        }


@dataclass(frozen=True)
class PriorityRecord:
    """Importance score of one turn within one scoring call."""

    turn: Turn
    index: int
    score: float
    token_count: int
    is_tool_use: bool
    has_error: bool


@dataclass
class CompressionResult:
    """Result of a compression call."""

    transcript: Sequence[Turn]
    compression_ratio: float
    original_token_count: int
    compressed_token_count: int
    strategy: CompressionStrategy
    summary: str | None = None
    compressed: bool = False
    duration_ms: float = 0.0

    @property
    def tokens_saved(self) -> int:
        return self.original_token_count - self.compressed_token_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy.to_dict(),
            "compressed": self.compressed,
            "original_token_count": self.original_token_count,
            "compressed_token_count": self.compressed_token_count,
            "tokens_saved": self.tokens_saved,
            "compression_ratio": round(self.compression_ratio, 3),
            "turns_after": len(self.transcript),
            "summary_generated": self.summary is not None,
            "duration_ms": round(self.duration_ms, 1),
        }


@dataclass
class PriorityWeights:
    """Additive terms of the priority score."""

    recency: float = 30.0
    user: float = 20.0
    error: float = 25.0
    tool_activity: float = 10.0
    boundary: float = 15.0
    small_bonus: float = 5.0
    large_penalty: float = 10.0
    small_token_limit: int = 100
    large_token_limit: int = 1000


@dataclass
class CompressionConfig:
    """Tuning knobs for the compression engine.

    Passed in at engine construction so tests can pin deterministic values.
    """

    # Overflow detection
    compression_threshold: float = 0.75  # Compress at 75% of the context window
    adaptive_target_ratio: float = 0.60  # Adaptive target = 60% of the window
    default_context_window: int = DEFAULT_CONTEXT_WINDOW
    max_turns_before_compression: int = 50

    # Classification
    error_keywords: tuple[str, ...] = DEFAULT_ERROR_KEYWORDS
    weights: PriorityWeights = field(default_factory=PriorityWeights)

    # Truncate
    preserve_recent: int = 5
    adaptive_max_preserve_recent: int = 10
    adaptive_preserve_fraction: float = 0.3

    # Sliding window
    window_fraction: float = 0.3
    stride_fraction: float = 0.5
    must_keep_fraction: float = 0.3

    # Priority-based
    partial_inclusion_fraction: float = 0.5
    block_partial_fraction: float = 0.8
    truncation_marker: str = TRUNCATION_MARKER

    # Summarize
    summary_preserve_fraction: float = 0.2
    summary_timeout_seconds: float | None = None

    # Loops that may repeat work (summarize rounds, partial trimming)
    max_iterations: int = 32

    # Selection
    selection_policy: SelectionPolicy = SelectionPolicy.SAFE
    heuristic_truncate_occupancy: float = 0.9
    high_priority_error_ratio: float = 0.1
    high_priority_user_ratio: float = 0.4

    # Tool pairing
    strict_tool_pairing: bool = False

    def validate(self) -> None:
        fractions = {
            "compression_threshold": self.compression_threshold,
            "adaptive_target_ratio": self.adaptive_target_ratio,
            "adaptive_preserve_fraction": self.adaptive_preserve_fraction,
            "window_fraction": self.window_fraction,
            "stride_fraction": self.stride_fraction,
            "must_keep_fraction": self.must_keep_fraction,
            "partial_inclusion_fraction": self.partial_inclusion_fraction,
            "block_partial_fraction": self.block_partial_fraction,
            "summary_preserve_fraction": self.summary_preserve_fraction,
        }
        for name, value in fractions.items():
            if not 0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if self.adaptive_target_ratio > self.compression_threshold:
            raise ValueError(
                f"adaptive_target_ratio ({self.adaptive_target_ratio}) must not exceed "
                f"compression_threshold ({self.compression_threshold})"
            )
        if self.preserve_recent < 1:
            raise ValueError(f"preserve_recent must be >= 1, got {self.preserve_recent}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.default_context_window <= 0:
            raise ValueError(
                f"default_context_window must be positive, got {self.default_context_window}"
            )
        if self.summary_timeout_seconds is not None and self.summary_timeout_seconds <= 0:
            raise ValueError(
                f"summary_timeout_seconds must be positive, got {self.summary_timeout_seconds}"
            )
        if not self.error_keywords:
            raise ValueError("error_keywords must not be empty")
