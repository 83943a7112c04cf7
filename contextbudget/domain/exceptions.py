"""Error hierarchy for context compression.

Strategy exhaustion (even one turn exceeds the budget) is not an error:
strategies degrade to a single turn and the compression ratio reports it.
The errors below are the failures a caller must handle.
"""

from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of compression errors."""

    ESTIMATION = "estimation"  # Tokenizer could not encode input
    SUMMARIZATION = "summarization"  # Summarizer failed or returned nothing
    TIMEOUT = "timeout"  # Summarizer exceeded the configured timeout
    VALIDATION = "validation"  # Bad descriptor or unknown strategy


class CompressionError(Exception):
    """Base exception for all compression errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.VALIDATION,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for telemetry."""
        data: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data

    def __str__(self) -> str:
        return f"[{self.category.value.upper()}] {self.message}"


class TokenEstimationError(CompressionError):
    """Raised when the tokenizer cannot encode input."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message=message, category=ErrorCategory.ESTIMATION, cause=cause)


class SummarizationError(CompressionError):
    """Raised when the summarizer fails; the whole compression call fails with it."""

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        category = ErrorCategory.TIMEOUT if timeout_seconds is not None else ErrorCategory.SUMMARIZATION
        super().__init__(message=message, category=category, cause=cause)
        self.timeout_seconds = timeout_seconds

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.timeout_seconds is not None:
            data["timeout_seconds"] = self.timeout_seconds
        return data


class InvalidStrategyError(CompressionError):
    """Raised for an unknown strategy kind or an invalid descriptor."""

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        super().__init__(message=message, category=ErrorCategory.VALIDATION)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        if self.value is not None:
            data["value"] = str(self.value)
        return data
