# Transcript domain models
from contextbudget.domain.model.transcript import (
    ContentBlock,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Transcript,
    Turn,
    UnknownBlock,
    transcript_from_messages,
    transcript_to_messages,
)

# Compression domain models
from contextbudget.domain.model.compression import (
    CompressionConfig,
    CompressionResult,
    CompressionStrategy,
    PriorityRecord,
    PriorityWeights,
    SelectionPolicy,
    StrategyKind,
)

__all__ = [
    "ContentBlock",
    "TextBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "UnknownBlock",
    "Turn",
    "Transcript",
    "transcript_from_messages",
    "transcript_to_messages",
    "CompressionConfig",
    "CompressionResult",
    "CompressionStrategy",
    "PriorityRecord",
    "PriorityWeights",
    "SelectionPolicy",
    "StrategyKind",
]
