"""Priority-based strategy: keep the highest-scoring turns that fit."""

import logging
from collections.abc import Sequence

from contextbudget.domain.model.compression import (
    CompressionConfig,
    CompressionStrategy,
    StrategyKind,
)
from contextbudget.domain.model.transcript import Turn
from contextbudget.infrastructure.context.classifier import TurnClassifier
from contextbudget.infrastructure.context.priority import PriorityScorer
from contextbudget.infrastructure.context.strategies.base import (
    ReductionOutcome,
    ReductionStrategy,
)
from contextbudget.infrastructure.llm.token_estimator import TokenEstimator

logger = logging.getLogger(__name__)


class PriorityBasedStrategy(ReductionStrategy):
    """Ranks turns globally by score and keeps them greedily.

    A turn that does not fit whole is partially included (trimmed to the
    remaining budget) while less than ``partial_inclusion_fraction`` of the
    budget is used. Ties keep their original order (stable sort).
    """

    kind = StrategyKind.PRIORITY_BASED

    def __init__(
        self,
        estimator: TokenEstimator,
        classifier: TurnClassifier,
        config: CompressionConfig,
        scorer: PriorityScorer,
    ) -> None:
        super().__init__(estimator, classifier, config)
        self._scorer = scorer

    async def reduce(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        descriptor: CompressionStrategy,
    ) -> ReductionOutcome:
        return ReductionOutcome(transcript=self.prioritize(transcript, max_tokens))

    def prioritize(self, transcript: Sequence[Turn], max_tokens: int) -> list[Turn]:
        records = self._scorer.score(transcript)
        ranked = sorted(records, key=lambda record: record.score, reverse=True)

        kept: dict[int, Turn] = {}
        total = 0
        partial_count = 0
        for record in ranked:
            if total >= max_tokens:
                break
            if total + record.token_count <= max_tokens:
                kept[record.index] = record.turn
                total += record.token_count
            elif total < max_tokens * self._config.partial_inclusion_fraction:
                partial = self.truncate_turn(record.turn, max_tokens - total)
                if partial is not None:
                    kept[record.index] = partial
                    total += self._estimator.count_turn(partial)
                    partial_count += 1

        logger.debug(
            f"Priority-based: kept {len(kept)}/{len(records)} turns "
            f"({partial_count} partial, {total}/{max_tokens} tokens)"
        )
        return [kept[index] for index in sorted(kept)]
