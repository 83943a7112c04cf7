"""
Strategy Selector - Picks a reduction strategy when the caller does not.

Policies:
- SAFE (default): always TRUNCATE. Compression runs on every agent turn and
  must finish quickly; summarization adds model latency and failure modes.
- HEURISTIC: choose from transcript shape and overflow severity
    occupancy >= heuristic_truncate_occupancy -> TRUNCATE
    many user / error turns                   -> PRIORITY_BASED
    otherwise                                 -> SLIDING_WINDOW

SUMMARIZE is never picked automatically; callers request it explicitly.
"""

import logging
from collections.abc import Sequence

from contextbudget.domain.model.compression import (
    CompressionConfig,
    SelectionPolicy,
    StrategyKind,
)
from contextbudget.domain.model.transcript import Turn
from contextbudget.infrastructure.context.classifier import TurnClassifier

logger = logging.getLogger(__name__)


class StrategySelector:
    """Selects a strategy kind from transcript shape and overflow severity."""

    def __init__(self, classifier: TurnClassifier, config: CompressionConfig | None = None) -> None:
        self._classifier = classifier
        self._config = config or CompressionConfig()

    @property
    def policy(self) -> SelectionPolicy:
        return self._config.selection_policy

    def select(
        self,
        transcript: Sequence[Turn],
        current_tokens: int,
        context_window: int,
    ) -> StrategyKind:
        """Select a strategy kind.

        Args:
            transcript: Transcript about to be compressed
            current_tokens: Its token count
            context_window: Target model context window

        Returns:
            Strategy kind to apply
        """
        if self.policy == SelectionPolicy.SAFE:
            return StrategyKind.TRUNCATE

        occupancy = current_tokens / context_window if context_window > 0 else 1.0
        if occupancy >= self._config.heuristic_truncate_occupancy:
            kind = StrategyKind.TRUNCATE
        elif self.has_high_priority_turns(transcript):
            kind = StrategyKind.PRIORITY_BASED
        else:
            kind = StrategyKind.SLIDING_WINDOW

        logger.debug(
            f"Strategy selected: kind={kind.value}, "
            f"occupancy={occupancy:.1%} ({current_tokens}/{context_window})"
        )
        return kind

    def has_high_priority_turns(self, transcript: Sequence[Turn]) -> bool:
        """True when error turns or user turns dominate the transcript."""
        if not transcript:
            return False
        error_count = sum(1 for turn in transcript if self._classifier.has_error_signal(turn))
        user_count = sum(1 for turn in transcript if self._classifier.is_user_authored(turn))
        return (
            error_count > len(transcript) * self._config.high_priority_error_ratio
            or user_count > len(transcript) * self._config.high_priority_user_ratio
        )
