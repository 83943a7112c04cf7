"""
Token Estimation for transcripts.

Counts tokens the way every reduction strategy budgets against them:
text is encoded as-is, structured tool input/result data is encoded from its
canonical JSON form, and unknown block kinds count zero.

Counting is additive (the count of a transcript is the sum of its turns'
counts, with no per-turn overhead), so strategies can keep running totals
instead of re-encoding whole transcripts.

Usage:
    from contextbudget.infrastructure.llm.token_estimator import TokenEstimator

    estimator = TokenEstimator(model="gpt-4o")
    tokens = estimator.count(transcript)
"""

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from contextbudget.domain.exceptions import TokenEstimationError
from contextbudget.domain.model.transcript import (
    ContentBlock,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Turn,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKENIZER_MODEL = "gpt-4o"

# Type alias for the external tokenizer: text -> token sequence
Encoder = Callable[[str], Sequence[Any]]


def canonical_json(value: Any) -> str:
    """Serialize structured data to a stable string for counting and matching."""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)


def litellm_encoder(model: str = DEFAULT_TOKENIZER_MODEL) -> Encoder:
    """Build an encoder backed by LiteLLM's tokenizer for ``model``."""
    import litellm

    def encode(text: str) -> Sequence[Any]:
        return litellm.encode(model=model, text=text)

    return encode


class TokenEstimator:
    """
    Transcript token counter.

    The estimator holds no cache: identical input always re-encodes to the
    same count, and instances can be shared between concurrent calls.

    Example:
        estimator = TokenEstimator(encoder=lambda text: text.split())
        estimator.count([Turn.user("hello world")])  # 2
    """

    def __init__(
        self,
        encoder: Encoder | None = None,
        model: str = DEFAULT_TOKENIZER_MODEL,
    ) -> None:
        """
        Initialize token estimator.

        Args:
            encoder: Tokenizer function; defaults to LiteLLM's tokenizer
            model: Model whose tokenizer LiteLLM should use (ignored with encoder)
        """
        self._model = model
        self._encoder = encoder or litellm_encoder(model)

    @property
    def model(self) -> str:
        return self._model

    def count_text(self, text: str) -> int:
        """
        Count tokens in a piece of text.

        Raises:
            TokenEstimationError: If the tokenizer cannot encode the text
        """
        if not text:
            return 0
        try:
            return len(self._encoder(text))
        except Exception as e:
            logger.error(f"Token encoding failed for {len(text)} chars: {e}")
            raise TokenEstimationError(
                f"Unable to encode text of {len(text)} characters", cause=e
            ) from e

    def count_block(self, block: ContentBlock) -> int:
        """Count tokens in one content block; unknown kinds count zero."""
        if isinstance(block, TextBlock):
            return self.count_text(block.text)
        if isinstance(block, ToolUseBlock):
            return self.count_text(canonical_json(block.input))
        if isinstance(block, ToolResultBlock):
            return self.count_text(canonical_json(block.content))
        return 0

    def count_turn(self, turn: Turn) -> int:
        """Count tokens in one turn."""
        if isinstance(turn.content, str):
            return self.count_text(turn.content)
        return sum(self.count_block(block) for block in turn.content)

    def count(self, transcript: Iterable[Turn]) -> int:
        """Count tokens in a transcript."""
        return sum(self.count_turn(turn) for turn in transcript)

    def count_each(self, transcript: Iterable[Turn]) -> list[int]:
        """Per-turn counts, in transcript order."""
        return [self.count_turn(turn) for turn in transcript]


# Module default estimator (created on first use)
_default_estimator: TokenEstimator | None = None


def get_token_estimator() -> TokenEstimator:
    """
    Get or create the module default estimator (LiteLLM tokenizer).

    Returns:
        Shared TokenEstimator instance
    """
    global _default_estimator
    if _default_estimator is None:
        _default_estimator = TokenEstimator()
    return _default_estimator


def estimate_tokens(transcript: Iterable[Turn]) -> int:
    """
    Count transcript tokens with the default estimator (convenience function).

    Args:
        transcript: Turns to count

    Returns:
        Token count
    """
    return get_token_estimator().count(transcript)
