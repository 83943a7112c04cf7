"""Summarize strategy: collapse the oldest turns into one synthetic summary turn."""

import asyncio
import logging
import math
from collections.abc import Sequence

from contextbudget.domain.exceptions import CompressionError, SummarizationError
from contextbudget.domain.model.compression import (
    SUMMARY_END_MARKER,
    SUMMARY_START_MARKER,
    CompressionConfig,
    CompressionStrategy,
    StrategyKind,
)
from contextbudget.domain.model.transcript import USER_ROLE, TextBlock, Turn
from contextbudget.domain.ports.summarizer_port import SummarizerPort
from contextbudget.infrastructure.context.classifier import TurnClassifier
from contextbudget.infrastructure.context.strategies.base import (
    ReductionOutcome,
    ReductionStrategy,
)
from contextbudget.infrastructure.llm.summarizers import CONVERSATION_HEADER
from contextbudget.infrastructure.llm.token_estimator import TokenEstimator

logger = logging.getLogger(__name__)

# Role-aware truncation limits (chars) for prompt lines. User turns carry
# requirements and constraints, so they get more room.
_ROLE_TRUNCATE_LIMITS = {"user": 800, "assistant": 500}
_DEFAULT_TRUNCATE_LIMIT = 500

SUMMARY_PROMPT = """Summarize the following conversation excerpt concisely.

Priority rules (highest to lowest):
1. User requirements, constraints, and questions
2. Errors, failures, and unresolved blockers
3. Tool calls made and their key outcomes
4. Decisions reached and work completed

{previous_summary_context}{header}
{conversation}

Provide a concise summary:"""


class SummarizeStrategy(ReductionStrategy):
    """Replaces the older part of the transcript with summary prose.

    The newest ``summary_preserve_fraction`` of turns is kept verbatim. When
    summary plus preserved turns still exceed the budget, the preserved turns
    become the next round's input and the previous summary is handed to the
    summarizer as context. Each round's input strictly shrinks.
    """

    kind = StrategyKind.SUMMARIZE

    def __init__(
        self,
        estimator: TokenEstimator,
        classifier: TurnClassifier,
        config: CompressionConfig,
        summarizer: SummarizerPort,
    ) -> None:
        super().__init__(estimator, classifier, config)
        self._summarizer = summarizer

    async def reduce(
        self,
        transcript: Sequence[Turn],
        max_tokens: int,
        descriptor: CompressionStrategy,
    ) -> ReductionOutcome:
        current = list(transcript)
        summary: str | None = None
        summary_turn: Turn | None = None

        for round_number in range(1, self._config.max_iterations + 1):
            if not current:
                break
            preserve_count = min(
                math.floor(len(current) * self._config.summary_preserve_fraction),
                len(current) - 1,
            )
            split = len(current) - preserve_count
            to_summarize, preserved = current[:split], current[split:]

            summary = await self._generate(self.build_prompt(to_summarize, summary))
            summary_turn = self.build_summary_turn(summary)
            candidate = [summary_turn, *preserved]
            candidate_tokens = self._estimator.count(candidate)

            logger.debug(
                f"Summarize round {round_number}: summarized {len(to_summarize)} turns, "
                f"preserved {len(preserved)}, {candidate_tokens}/{max_tokens} tokens"
            )
            if candidate_tokens <= max_tokens:
                return ReductionOutcome(transcript=candidate, summary=summary)
            current = preserved

        if summary_turn is None:
            return ReductionOutcome(transcript=[])

        # Nothing left to preserve (or the round cap was hit): trim the summary
        logger.info(f"Summary exceeds budget of {max_tokens} tokens, trimming it")
        trimmed = self.truncate_turn(summary_turn, max_tokens)
        if trimmed is not None:
            return ReductionOutcome(transcript=[trimmed], summary=summary)

        # No room for even a marked summary: keep the newest input turn instead
        last_turn = transcript[-1]
        logger.info(
            f"Budget of {max_tokens} tokens cannot hold a summary, keeping the last turn"
        )
        kept = self.truncate_turn(last_turn, max_tokens) or last_turn
        return ReductionOutcome(transcript=[kept])

    def build_prompt(self, turns: Sequence[Turn], previous_summary: str | None = None) -> str:
        previous_context = ""
        if previous_summary:
            previous_context = f"Previous context summary:\n{previous_summary}\n\n"
        return SUMMARY_PROMPT.format(
            previous_summary_context=previous_context,
            header=CONVERSATION_HEADER,
            conversation=self._format_turns(turns),
        )

    @staticmethod
    def build_summary_turn(summary: str) -> Turn:
        text = f"{SUMMARY_START_MARKER}\n{summary}\n{SUMMARY_END_MARKER}"
        return Turn(role=USER_ROLE, content=(TextBlock(text),), summary=True)

    def _format_turns(self, turns: Sequence[Turn]) -> str:
        """One "Role: text" line per turn with role-aware truncation."""
        lines = []
        for turn in turns:
            content = " ".join(self._classifier.render_text(turn).split())
            limit = _ROLE_TRUNCATE_LIMITS.get(turn.role, _DEFAULT_TRUNCATE_LIMIT)
            if len(content) > limit:
                content = content[:limit] + "..."
            if content:
                lines.append(f"{turn.role.capitalize()}: {content}")
        return "\n".join(lines)

    async def _generate(self, prompt: str) -> str:
        timeout = self._config.summary_timeout_seconds
        try:
            if timeout is None:
                text = await self._summarizer.generate(prompt)
            else:
                text = await asyncio.wait_for(self._summarizer.generate(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Summarizer timed out after {timeout}s")
            raise SummarizationError(
                f"Summarizer timed out after {timeout}s", timeout_seconds=timeout, cause=e
            ) from e
        except CompressionError:
            raise
        except Exception as e:
            logger.warning(f"Summarizer failed: {e}")
            raise SummarizationError(f"Summarizer failed: {e}", cause=e) from e

        if not text or not text.strip():
            raise SummarizationError("Summarizer returned empty text")
        return text.strip()
