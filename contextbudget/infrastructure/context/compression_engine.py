"""
Context Compression Engine - Fits agent transcripts into a model context window.

The engine is the only entry point callers need:
- count_tokens / detect_context_overflow: measure a transcript against a window
- compress: reduce with an explicit strategy descriptor
- adaptive_compress: detect overflow, pick a strategy, compress to 60% of the window

Compression target:
    target = floor(min(strategy.max_tokens, context_window * compression_threshold))

A transcript already within target is returned unchanged (same object, ratio
exactly 1.0) without invoking any strategy.

The engine holds configuration and collaborators only. Each call creates its
own working state, so one engine can serve concurrent calls.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from contextbudget.domain.exceptions import InvalidStrategyError
from contextbudget.domain.model.compression import (
    DEFAULT_CONTEXT_WINDOW,
    CompressionConfig,
    CompressionResult,
    CompressionStrategy,
    StrategyKind,
)
from contextbudget.domain.model.transcript import Turn
from contextbudget.domain.ports.summarizer_port import SummarizerPort
from contextbudget.infrastructure.context.classifier import TurnClassifier
from contextbudget.infrastructure.context.pairing import enforce_tool_pairing
from contextbudget.infrastructure.context.priority import PriorityScorer
from contextbudget.infrastructure.context.selector import StrategySelector
from contextbudget.infrastructure.context.strategies import (
    PriorityBasedStrategy,
    ReductionStrategy,
    SlidingWindowStrategy,
    SummarizeStrategy,
    TruncateStrategy,
)
from contextbudget.infrastructure.llm.summarizers import (
    ExtractiveSummarizer,
    LiteLLMSummarizer,
)
from contextbudget.infrastructure.llm.token_estimator import TokenEstimator

if TYPE_CHECKING:
    from contextbudget.configuration.config import CompressionSettings

logger = logging.getLogger(__name__)


class ContextCompressionEngine:
    """Budget-driven transcript compression.

    Orchestrates four reduction strategies (truncate, sliding window,
    priority-based, summarize) behind one call, measuring the result and
    optionally repairing broken tool_use/tool_result pairs.
    """

    def __init__(
        self,
        estimator: TokenEstimator | None = None,
        summarizer: SummarizerPort | None = None,
        config: CompressionConfig | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            estimator: Token counter; defaults to the LiteLLM tokenizer
            summarizer: Summary generator for the summarize strategy;
                defaults to the offline extractive summarizer
            config: Tuning configuration; validated here

        Raises:
            ValueError: If the configuration is invalid
        """
        self._config = config or CompressionConfig()
        self._config.validate()

        self._estimator = estimator or TokenEstimator()
        self._summarizer = summarizer or ExtractiveSummarizer()
        self._classifier = TurnClassifier(self._config.error_keywords)
        self._scorer = PriorityScorer(self._estimator, self._classifier, self._config.weights)
        self._selector = StrategySelector(self._classifier, self._config)

        strategies: list[ReductionStrategy] = [
            TruncateStrategy(self._estimator, self._classifier, self._config),
            SlidingWindowStrategy(self._estimator, self._classifier, self._config),
            PriorityBasedStrategy(self._estimator, self._classifier, self._config, self._scorer),
            SummarizeStrategy(self._estimator, self._classifier, self._config, self._summarizer),
        ]
        self._strategies: dict[StrategyKind, ReductionStrategy] = {
            strategy.kind: strategy for strategy in strategies
        }

    @classmethod
    def from_settings(cls, settings: CompressionSettings | None = None) -> ContextCompressionEngine:
        """Build an engine wired from environment settings."""
        from contextbudget.configuration.config import get_settings

        settings = settings or get_settings()
        summarizer: SummarizerPort
        if settings.summary_model:
            summarizer = LiteLLMSummarizer(
                model=settings.summary_model,
                max_tokens=settings.summary_max_tokens,
                temperature=settings.summary_temperature,
            )
        else:
            summarizer = ExtractiveSummarizer()

        return cls(
            estimator=TokenEstimator(model=settings.tokenizer_model),
            summarizer=summarizer,
            config=settings.to_compression_config(),
        )

    @property
    def config(self) -> CompressionConfig:
        return self._config

    @property
    def estimator(self) -> TokenEstimator:
        return self._estimator

    @property
    def summarizer(self) -> SummarizerPort:
        return self._summarizer

    @property
    def selector(self) -> StrategySelector:
        return self._selector

    def get_strategy(self, kind: StrategyKind | str) -> ReductionStrategy:
        """Look up the strategy implementation for a kind.

        Raises:
            InvalidStrategyError: If the kind is unknown
        """
        try:
            return self._strategies[StrategyKind(kind)]
        except (KeyError, ValueError) as e:
            raise InvalidStrategyError(
                f"Unknown compression strategy: {kind!r}", field="kind", value=kind
            ) from e

    def count_tokens(self, transcript: Sequence[Turn]) -> int:
        return self._estimator.count(transcript)

    def detect_context_overflow(self, current_tokens: int, context_window: int) -> bool:
        """True once ``current_tokens`` reaches the compression threshold of the window."""
        return current_tokens >= context_window * self._config.compression_threshold

    def should_compress(self, transcript: Sequence[Turn]) -> bool:
        """Cheap guard for callers: too many turns, or overflowing the default window."""
        if len(transcript) > self._config.max_turns_before_compression:
            return True
        return self.detect_context_overflow(
            self.count_tokens(transcript), self._config.default_context_window
        )

    async def compress(
        self,
        transcript: Sequence[Turn],
        strategy: CompressionStrategy,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
    ) -> CompressionResult:
        """Compress a transcript with the given strategy.

        Args:
            transcript: Turns in chronological order
            strategy: Strategy descriptor (kind, budget, optional knobs)
            context_window: Target model context window in tokens

        Returns:
            CompressionResult with the reduced transcript and token accounting

        Raises:
            InvalidStrategyError: Unknown kind or negative max_tokens
            TokenEstimationError: The tokenizer failed
            SummarizationError: The summarizer failed or timed out
        """
        start_time = time.monotonic()
        implementation = self._validate(strategy)

        original_tokens = self.count_tokens(transcript)
        target = math.floor(
            min(strategy.max_tokens, context_window * self._config.compression_threshold)
        )

        if original_tokens <= target:
            logger.debug(
                f"No compression needed: {original_tokens} tokens within target {target}"
            )
            return CompressionResult(
                transcript=transcript,
                compression_ratio=1.0,
                original_token_count=original_tokens,
                compressed_token_count=original_tokens,
                strategy=strategy,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

        logger.info(
            f"Compressing context: strategy={implementation.kind.value}, "
            f"tokens={original_tokens}, target={target}, turns={len(transcript)}"
        )

        outcome = await implementation.reduce(transcript, target, strategy)
        compressed = outcome.transcript
        if self._config.strict_tool_pairing:
            compressed = enforce_tool_pairing(transcript, compressed)

        compressed_tokens = self.count_tokens(compressed)
        duration_ms = (time.monotonic() - start_time) * 1000
        result = CompressionResult(
            transcript=compressed,
            compression_ratio=compressed_tokens / original_tokens if original_tokens else 1.0,
            original_token_count=original_tokens,
            compressed_token_count=compressed_tokens,
            strategy=strategy,
            summary=outcome.summary,
            compressed=True,
            duration_ms=duration_ms,
        )

        if compressed_tokens > target:
            logger.warning(
                f"Compression could not reach target: {compressed_tokens}/{target} tokens "
                f"with strategy={implementation.kind.value}"
            )
        logger.info(
            f"Compression complete: strategy={implementation.kind.value}, "
            f"saved={result.tokens_saved} tokens ({original_tokens}->{compressed_tokens}), "
            f"turns={len(transcript)}->{len(compressed)}, "
            f"duration={duration_ms:.0f}ms"
        )
        return result

    async def adaptive_compress(
        self,
        transcript: Sequence[Turn],
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        preferred: StrategyKind | None = None,
    ) -> CompressionResult:
        """Compress only when the transcript overflows the window threshold.

        Args:
            transcript: Turns in chronological order
            context_window: Target model context window in tokens
            preferred: Strategy kind to use instead of the selector's choice

        Returns:
            CompressionResult; a no-op result when there is no overflow
        """
        current_tokens = self.count_tokens(transcript)
        if not self.detect_context_overflow(current_tokens, context_window):
            return CompressionResult(
                transcript=transcript,
                compression_ratio=1.0,
                original_token_count=current_tokens,
                compressed_token_count=current_tokens,
                strategy=CompressionStrategy(
                    kind=StrategyKind.TRUNCATE, max_tokens=context_window
                ),
            )

        occupancy = current_tokens / context_window if context_window > 0 else 1.0
        logger.warning(
            f"Context overflow detected: {current_tokens}/{context_window} tokens "
            f"({occupancy:.1%}), {len(transcript)} turns"
        )

        kind = preferred or self._selector.select(transcript, current_tokens, context_window)
        preserve_recent = max(
            1,
            min(
                self._config.adaptive_max_preserve_recent,
                math.floor(len(transcript) * self._config.adaptive_preserve_fraction),
            ),
        )
        descriptor = CompressionStrategy(
            kind=StrategyKind(kind),
            max_tokens=math.floor(context_window * self._config.adaptive_target_ratio),
            preserve_recent=preserve_recent,
            preserve_important=True,
        )
        return await self.compress(transcript, descriptor, context_window)

    def _validate(self, strategy: CompressionStrategy) -> ReductionStrategy:
        implementation = self.get_strategy(strategy.kind)
        if strategy.max_tokens < 0:
            raise InvalidStrategyError(
                f"max_tokens must be >= 0, got {strategy.max_tokens}",
                field="max_tokens",
                value=strategy.max_tokens,
            )
        if strategy.preserve_recent is not None and strategy.preserve_recent < 1:
            raise InvalidStrategyError(
                f"preserve_recent must be >= 1, got {strategy.preserve_recent}",
                field="preserve_recent",
                value=strategy.preserve_recent,
            )
        return implementation


async def compress_transcript(
    transcript: Sequence[Turn],
    strategy: CompressionStrategy,
    context_window: int = DEFAULT_CONTEXT_WINDOW,
    engine: ContextCompressionEngine | None = None,
) -> CompressionResult:
    """
    Compress a transcript (convenience function).

    Args:
        transcript: Turns in chronological order
        strategy: Strategy descriptor
        context_window: Target model context window in tokens
        engine: Engine to use; defaults to one built from settings

    Returns:
        CompressionResult
    """
    engine = engine or ContextCompressionEngine.from_settings()
    return await engine.compress(transcript, strategy, context_window)
