"""Turn classification predicates used by scoring and selection."""

from collections.abc import Iterable

from contextbudget.domain.model.compression import DEFAULT_ERROR_KEYWORDS
from contextbudget.domain.model.transcript import (
    USER_ROLE,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Turn,
)
from contextbudget.infrastructure.llm.token_estimator import canonical_json


class TurnClassifier:
    """Pure predicates over a single turn.

    Error detection is a keyword heuristic, not a parser: benign text that
    happens to contain a keyword is reported as an error signal.
    """

    def __init__(self, error_keywords: Iterable[str] = DEFAULT_ERROR_KEYWORDS) -> None:
        self._keywords = tuple(keyword.lower() for keyword in error_keywords)

    @property
    def error_keywords(self) -> tuple[str, ...]:
        return self._keywords

    def is_user_authored(self, turn: Turn) -> bool:
        return turn.role == USER_ROLE

    def has_error_signal(self, turn: Turn) -> bool:
        if any(isinstance(b, ToolResultBlock) and b.is_error for b in turn.blocks):
            return True
        text = self._signal_text(turn).lower()
        return any(keyword in text for keyword in self._keywords)

    def has_tool_activity(self, turn: Turn) -> bool:
        return any(isinstance(b, (ToolUseBlock, ToolResultBlock)) for b in turn.blocks)

    @staticmethod
    def render_text(turn: Turn) -> str:
        """Flatten a turn to text: block text, tool name with input, result content."""
        if isinstance(turn.content, str):
            return turn.content
        parts: list[str] = []
        for block in turn.content:
            if isinstance(block, TextBlock):
                parts.append(block.text)
            elif isinstance(block, ToolUseBlock):
                parts.append(f"[tool_use {block.name}] {canonical_json(block.input)}")
            elif isinstance(block, ToolResultBlock):
                parts.append(f"[tool_result] {canonical_json(block.content)}")
        return "\n".join(parts)

    @staticmethod
    def _signal_text(turn: Turn) -> str:
        """Text the error heuristic sees: block text and serialized data, no tool names."""
        if isinstance(turn.content, str):
            return turn.content
        parts: list[str] = []
        for block in turn.content:
            if isinstance(block, TextBlock):
                parts.append(block.text)
            elif isinstance(block, ToolUseBlock):
                parts.append(canonical_json(block.input))
            elif isinstance(block, ToolResultBlock):
                parts.append(canonical_json(block.content))
        return "\n".join(parts)
