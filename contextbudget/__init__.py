"""Token-budget context compression for agent transcripts."""

from contextbudget.configuration import CompressionSettings, get_settings
from contextbudget.domain.exceptions import (
    CompressionError,
    ErrorCategory,
    InvalidStrategyError,
    SummarizationError,
    TokenEstimationError,
)
from contextbudget.domain.model import (
    CompressionConfig,
    CompressionResult,
    CompressionStrategy,
    SelectionPolicy,
    StrategyKind,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Transcript,
    Turn,
    UnknownBlock,
    transcript_from_messages,
    transcript_to_messages,
)
from contextbudget.domain.ports import SummarizerPort
from contextbudget.infrastructure.context import ContextCompressionEngine, compress_transcript
from contextbudget.infrastructure.llm import (
    ExtractiveSummarizer,
    LiteLLMSummarizer,
    TokenEstimator,
)

__version__ = "0.1.0"

__all__ = [
    "ContextCompressionEngine",
    "compress_transcript",
    "CompressionConfig",
    "CompressionResult",
    "CompressionStrategy",
    "SelectionPolicy",
    "StrategyKind",
    "Turn",
    "Transcript",
    "TextBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "UnknownBlock",
    "transcript_from_messages",
    "transcript_to_messages",
    "TokenEstimator",
    "SummarizerPort",
    "LiteLLMSummarizer",
    "ExtractiveSummarizer",
    "CompressionSettings",
    "get_settings",
    "CompressionError",
    "ErrorCategory",
    "TokenEstimationError",
    "SummarizationError",
    "InvalidStrategyError",
]
