"""
Transcript Model - Turns and content blocks exchanged between user and agent.

A transcript is an ordered (chronological) sequence of turns. Each turn is
authored by the user or the assistant and carries either raw text or an
ordered tuple of typed content blocks:

- TextBlock: plain text
- ToolUseBlock: an action the assistant requested
- ToolResultBlock: the observed outcome of a tool_use
- UnknownBlock: any block kind this package does not understand yet

Turns are immutable. Strategies that shorten a turn build a new one with
``dataclasses.replace`` instead of editing it in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Union

Role = Literal["user", "assistant"]

USER_ROLE: Role = "user"
ASSISTANT_ROLE: Role = "assistant"


@dataclass(frozen=True)
class TextBlock:
    """Plain text fragment of a turn."""

    text: str
    type: Literal["text"] = field(default="text", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolUseBlock:
    """Tool invocation requested by the assistant."""

    id: str
    name: str
    input: Any = field(default_factory=dict)
    type: Literal["tool_use"] = field(default="tool_use", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "id": self.id, "name": self.name, "input": self.input}


@dataclass(frozen=True)
class ToolResultBlock:
    """Observed outcome of a tool invocation.

    ``tool_use_id`` links the result to the ToolUseBlock it answers when the
    caller provides it; results without an id are never paired.
    """

    content: Any = ""
    tool_use_id: str | None = None
    is_error: bool = False
    type: Literal["tool_result"] = field(default="tool_result", init=False)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "content": self.content}
        if self.tool_use_id is not None:
            data["tool_use_id"] = self.tool_use_id
        if self.is_error:
            data["is_error"] = True
        return data


@dataclass(frozen=True)
class UnknownBlock:
    """Block of a kind this package does not interpret (kept, never counted)."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.data, "type": self.type}


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock, UnknownBlock]
Content = Union[str, tuple[ContentBlock, ...]]


@dataclass(frozen=True)
class Turn:
    """One message in a transcript.

    Attributes:
        role: "user" or "assistant"
        content: Raw text or an ordered tuple of content blocks
        summary: True only for synthetic summary turns produced by compression
    """

    role: Role
    content: Content
    summary: bool = False

    def __post_init__(self) -> None:
        if self.role not in (USER_ROLE, ASSISTANT_ROLE):
            raise ValueError(f"Unsupported turn role: {self.role!r}")
        # Accept any iterable of blocks but store an immutable tuple
        if not isinstance(self.content, (str, tuple)):
            object.__setattr__(self, "content", tuple(self.content))

    @property
    def is_text(self) -> bool:
        return isinstance(self.content, str)

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        """Content as blocks (raw text is exposed as a single TextBlock)."""
        if isinstance(self.content, str):
            return (TextBlock(self.content),) if self.content else ()
        return self.content

    @classmethod
    def user(cls, content: str | Iterable[ContentBlock]) -> Turn:
        return cls(role=USER_ROLE, content=content)  # type: ignore[arg-type]

    @classmethod
    def assistant(cls, content: str | Iterable[ContentBlock]) -> Turn:
        return cls(role=ASSISTANT_ROLE, content=content)  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Turn:
        """Build a turn from an Anthropic-style message dict."""
        content = data.get("content", "")
        if isinstance(content, str):
            return cls(role=data["role"], content=content, summary=bool(data.get("summary")))
        blocks = tuple(block_from_dict(item) for item in content)
        return cls(role=data["role"], content=blocks, summary=bool(data.get("summary")))

    def to_dict(self) -> dict[str, Any]:
        """Convert to an Anthropic-style message dict."""
        if isinstance(self.content, str):
            content: Any = self.content
        else:
            content = [block.to_dict() for block in self.content]
        data: dict[str, Any] = {"role": self.role, "content": content}
        if self.summary:
            data["summary"] = True
        return data


Transcript = Sequence[Turn]


def block_from_dict(data: Any) -> ContentBlock:
    """Parse one content block; unrecognised kinds become UnknownBlock."""
    if isinstance(data, str):
        return TextBlock(data)
    if not isinstance(data, dict):
        return UnknownBlock(type=type(data).__name__, data={"value": data})

    block_type = data.get("type")
    if block_type == "text":
        return TextBlock(str(data.get("text", "")))
    if block_type == "tool_use":
        return ToolUseBlock(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            input=data.get("input", {}),
        )
    if block_type == "tool_result":
        return ToolResultBlock(
            content=data.get("content", ""),
            tool_use_id=data.get("tool_use_id"),
            is_error=bool(data.get("is_error", False)),
        )
    extra = {k: v for k, v in data.items() if k != "type"}
    return UnknownBlock(type=str(block_type), data=extra)


def transcript_from_messages(messages: Iterable[dict[str, Any]]) -> list[Turn]:
    """Parse a list of message dicts into turns."""
    return [Turn.from_dict(message) for message in messages]


def transcript_to_messages(transcript: Iterable[Turn]) -> list[dict[str, Any]]:
    """Serialize turns back to message dicts."""
    return [turn.to_dict() for turn in transcript]


def iter_tool_use_ids(turn: Turn) -> Iterator[str]:
    for block in turn.blocks:
        if isinstance(block, ToolUseBlock) and block.id:
            yield block.id


def iter_tool_result_ids(turn: Turn) -> Iterator[str]:
    for block in turn.blocks:
        if isinstance(block, ToolResultBlock) and block.tool_use_id:
            yield block.tool_use_id
