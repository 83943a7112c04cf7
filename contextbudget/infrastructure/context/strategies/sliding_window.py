"""Sliding window strategy: structurally important turns plus sampled representatives."""

import logging
import math
from collections.abc import Sequence

from contextbudget.domain.model.compression import CompressionStrategy, StrategyKind
from contextbudget.domain.model.transcript import Turn
from contextbudget.infrastructure.context.strategies.base import (
    ReductionOutcome,
    ReductionStrategy,
)

logger = logging.getLogger(__name__)


class SlidingWindowStrategy(ReductionStrategy):
    """Samples the transcript evenly while keeping the turns that matter most.

    Pass 1 keeps user-authored, error-bearing and boundary turns within a
    sub-budget (``must_keep_fraction`` of the budget). Pass 2 slides a window
    backward over the transcript and adds one representative per window until
    a representative would overflow the budget.
    """

    kind = StrategyKind.SLIDING_WINDOW

    async def reduce(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        descriptor: CompressionStrategy,
    ) -> ReductionOutcome:
        preserve_important = descriptor.preserve_important is not False
        return ReductionOutcome(
            transcript=self.slide(transcript, max_tokens, preserve_important=preserve_important)
        )

    def slide(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        preserve_important: bool = True,
    ) -> list[Turn]:
        turns = list(transcript)
        if not turns:
            return []

        counts = self._estimator.count_each(turns)
        selected: set[int] = set()
        total = 0

        if preserve_important:
            must_keep_budget = max_tokens * self._config.must_keep_fraction
            for index in self.important_indices(turns):
                if total + counts[index] <= must_keep_budget:
                    selected.add(index)
                    total += counts[index]
        must_keep = len(selected)

        width = math.ceil(len(turns) * self._config.window_fraction)
        stride = max(1, math.floor(width * self._config.stride_fraction))

        for end in range(len(turns) - 1, -1, -stride):
            window = range(max(0, end - width), end + 1)
            representative = self._select_representative(turns, counts, window)
            if representative in selected:
                continue
            if total + counts[representative] > max_tokens:
                break
            selected.add(representative)
            total += counts[representative]

        logger.debug(
            f"Sliding window: width={width}, stride={stride}, must-keep={must_keep}, "
            f"kept {len(selected)}/{len(turns)} turns ({total}/{max_tokens} tokens)"
        )
        return [turns[index] for index in sorted(selected)]

    def important_indices(self, turns: Sequence[Turn]) -> list[int]:
        """Indices of user-authored, error-bearing and boundary turns, ascending."""
        last = len(turns) - 1
        return [
            index
            for index, turn in enumerate(turns)
            if index in (0, last)
            or self._classifier.is_user_authored(turn)
            or self._classifier.has_error_signal(turn)
        ]

    def _select_representative(
        self,
        turns: Sequence[Turn],
        counts: Sequence[int],
        window: range,
    ) -> int:
        """Prefer a user turn, then an error turn, then the smallest turn."""
        for index in window:
            if self._classifier.is_user_authored(turns[index]):
                return index
        for index in window:
            if self._classifier.has_error_signal(turns[index]):
                return index
        return min(window, key=lambda index: counts[index])
