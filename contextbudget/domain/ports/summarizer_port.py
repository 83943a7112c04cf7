"""Summarizer Port - Abstract interface for summary text generation."""

from abc import ABC, abstractmethod


class SummarizerPort(ABC):
    """
    Abstract interface for the text generation used by the summarize strategy.

    Implementations may call a hosted model or summarize locally. They may be
    slow or fail; callers layer timeouts on top.
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate summary prose for a prompt.

        Args:
            prompt: Full prompt text including the conversation to summarize

        Returns:
            Summary text
        """
