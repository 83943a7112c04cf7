"""LLM adapters: token estimation and summary generation."""

from .summarizers import ExtractiveSummarizer, LiteLLMSummarizer
from .token_estimator import TokenEstimator, estimate_tokens, get_token_estimator

__all__ = [
    "TokenEstimator",
    "estimate_tokens",
    "get_token_estimator",
    "LiteLLMSummarizer",
    "ExtractiveSummarizer",
]
