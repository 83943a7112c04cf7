"""
Priority Scorer - Per-turn importance scores for budget-constrained selection.

Scores are additive so each term can be tuned independently:
- recency: (index / length) * weights.recency
- user-authored, error signal, tool activity bonuses
- boundary bonus for the first and last turn
- size adjustment: small turns are cheap to keep, large ones expensive

Scores are not normalized and are only comparable within one scoring call.
"""

import logging
from collections.abc import Sequence

from contextbudget.domain.model.compression import PriorityRecord, PriorityWeights
from contextbudget.domain.model.transcript import Turn
from contextbudget.infrastructure.context.classifier import TurnClassifier
from contextbudget.infrastructure.llm.token_estimator import TokenEstimator

logger = logging.getLogger(__name__)


class PriorityScorer:
    """Assigns each turn of a transcript a deterministic importance score."""

    def __init__(
        self,
        estimator: TokenEstimator,
        classifier: TurnClassifier,
        weights: PriorityWeights | None = None,
    ) -> None:
        self._estimator = estimator
        self._classifier = classifier
        self._weights = weights or PriorityWeights()

    @property
    def weights(self) -> PriorityWeights:
        return self._weights

    def score(self, transcript: Sequence[Turn]) -> list[PriorityRecord]:
        """Score every turn; records come back in transcript order."""
        length = len(transcript)
        records = [self._score_turn(turn, index, length) for index, turn in enumerate(transcript)]
        if records:
            logger.debug(
                f"Scored {length} turns: "
                f"max={max(r.score for r in records):.1f}, min={min(r.score for r in records):.1f}"
            )
        return records

    def _score_turn(self, turn: Turn, index: int, length: int) -> PriorityRecord:
        w = self._weights
        score = (index / length) * w.recency

        if self._classifier.is_user_authored(turn):
            score += w.user

        has_error = self._classifier.has_error_signal(turn)
        if has_error:
            score += w.error

        is_tool_use = self._classifier.has_tool_activity(turn)
        if is_tool_use:
            score += w.tool_activity

        if index == 0 or index == length - 1:
            score += w.boundary

        token_count = self._estimator.count_turn(turn)
        if token_count < w.small_token_limit:
            score += w.small_bonus
        elif token_count > w.large_token_limit:
            score -= w.large_penalty

        return PriorityRecord(
            turn=turn,
            index=index,
            score=score,
            token_count=token_count,
            is_tool_use=is_tool_use,
            has_error=has_error,
        )
