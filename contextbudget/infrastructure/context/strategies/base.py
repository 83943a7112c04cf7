"""Base reduction strategy interface and shared turn trimming."""

from __future__ import annotations

import dataclasses
import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from contextbudget.domain.model.compression import (
    CompressionConfig,
    CompressionStrategy,
    StrategyKind,
)
from contextbudget.domain.model.transcript import ContentBlock, TextBlock, Turn
from contextbudget.infrastructure.context.classifier import TurnClassifier
from contextbudget.infrastructure.llm.token_estimator import TokenEstimator

logger = logging.getLogger(__name__)


@dataclass
class ReductionOutcome:
    """Turns kept by a strategy, in chronological order."""

    transcript: list[Turn]
    summary: str | None = None


class ReductionStrategy(ABC):
    """Abstract base class for reduction strategies.

    All strategies share one contract: given a transcript and a token budget,
    return a smaller transcript whose turns keep their original relative order.
    """

    kind: ClassVar[StrategyKind]

    def __init__(
        self,
        estimator: TokenEstimator,
        classifier: TurnClassifier,
        config: CompressionConfig,
    ) -> None:
        self._estimator = estimator
        self._classifier = classifier
        self._config = config

    @abstractmethod
    async def reduce(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        descriptor: CompressionStrategy,
    ) -> ReductionOutcome:
        """Reduce a transcript to fit ``max_tokens``.

        Args:
            transcript: Turns in chronological order
            max_tokens: Target token budget
            descriptor: The caller's strategy descriptor (for optional knobs)

        Returns:
            ReductionOutcome with the kept turns
        """

    def truncate_turn(self, turn: Turn, max_tokens: int) -> Turn | None:
        """Shorten a turn to at most ``max_tokens``, appending a truncation marker.

        Raw text is cut proportionally. For block content, whole blocks are
        kept while they fit and the first text block that does not fit is cut,
        provided less than ``block_partial_fraction`` of the budget is used.

        Returns:
            The turn itself if it already fits, a shortened copy, or None when
            nothing useful fits
        """
        if max_tokens <= 0:
            return None

        if isinstance(turn.content, str):
            if self._estimator.count_text(turn.content) <= max_tokens:
                return turn
            text = self._trim_text(turn.content, max_tokens)
            return dataclasses.replace(turn, content=text) if text is not None else None

        kept: list[ContentBlock] = []
        current = 0
        for block in turn.content:
            block_tokens = self._estimator.count_block(block)
            if current + block_tokens <= max_tokens:
                kept.append(block)
                current += block_tokens
            elif (
                isinstance(block, TextBlock)
                and current < max_tokens * self._config.block_partial_fraction
            ):
                text = self._trim_text(block.text, max_tokens - current)
                if text is not None:
                    kept.append(TextBlock(text))
                break

        if not kept:
            return None
        return dataclasses.replace(turn, content=tuple(kept))

    def _trim_text(self, text: str, max_tokens: int) -> str | None:
        """Cut ``text`` so that text plus marker fits ``max_tokens``."""
        marker = self._config.truncation_marker
        text_tokens = self._estimator.count_text(text)
        budget = max_tokens - self._estimator.count_text(marker)
        if budget <= 0 or text_tokens == 0:
            return None

        cut = math.floor(len(text) * min(1.0, budget / text_tokens))
        for _ in range(self._config.max_iterations):
            if cut <= 0:
                return None
            candidate = text[:cut] + marker
            candidate_tokens = self._estimator.count_text(candidate)
            if candidate_tokens <= max_tokens:
                return candidate
            # Tokenization is not linear in characters; shrink and retry
            cut = min(cut - 1, math.floor(cut * max_tokens / candidate_tokens))

        logger.debug(f"Gave up trimming {len(text)} chars to {max_tokens} tokens")
        return None
