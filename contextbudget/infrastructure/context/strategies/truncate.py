"""Truncate strategy: keep a recency window, then backfill older turns."""

import logging
from collections.abc import Sequence

from contextbudget.domain.model.compression import CompressionStrategy, StrategyKind
from contextbudget.domain.model.transcript import Turn
from contextbudget.infrastructure.context.strategies.base import (
    ReductionOutcome,
    ReductionStrategy,
)

logger = logging.getLogger(__name__)


class TruncateStrategy(ReductionStrategy):
    """Keeps the longest suffix of the transcript that fits the budget.

    The most recent ``preserve_recent`` turns form the recency window. If the
    window alone exceeds the budget it shrinks one turn at a time down to a
    single turn, which is kept even when it is oversized. Older turns are then
    prepended while they fit; the walk stops at the first turn that does not,
    so the kept history stays contiguous.
    """

    kind = StrategyKind.TRUNCATE

    async def reduce(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        descriptor: CompressionStrategy,
    ) -> ReductionOutcome:
        preserve_recent = (
            descriptor.preserve_recent
            if descriptor.preserve_recent is not None
            else self._config.preserve_recent
        )
        return ReductionOutcome(transcript=self.truncate(transcript, max_tokens, preserve_recent))

    def truncate(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        preserve_recent: int = 5,
    ) -> list[Turn]:
        turns = list(transcript)
        if not turns:
            return []

        counts = self._estimator.count_each(turns)
        window = max(1, min(preserve_recent, len(turns)))
        start = len(turns) - window
        total = sum(counts[start:])

        # Shrink the recency window; each pass drops one turn, never the last
        while window > 1 and total > max_tokens:
            total -= counts[start]
            start += 1
            window -= 1

        # Backfill older turns until the first one that does not fit
        for index in range(start - 1, -1, -1):
            if total + counts[index] > max_tokens:
                break
            total += counts[index]
            start = index

        if total > max_tokens:
            logger.debug(f"Truncate: single turn of {total} tokens exceeds budget {max_tokens}")
        else:
            logger.debug(
                f"Truncate: kept {len(turns) - start}/{len(turns)} turns "
                f"(recency window={window}, {total}/{max_tokens} tokens)"
            )
        return turns[start:]
