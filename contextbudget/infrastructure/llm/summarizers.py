"""
Summarizer adapters for the summarize strategy.

- LiteLLMSummarizer: asks a hosted model (any LiteLLM provider) for prose
- ExtractiveSummarizer: deterministic local summary built from the prompt's
  conversation section; used when no summary model is configured
"""

import logging
from typing import Any

from contextbudget.domain.ports.summarizer_port import SummarizerPort

logger = logging.getLogger(__name__)

CONVERSATION_HEADER = "--- CONVERSATION ---"

SUMMARY_SYSTEM_PROMPT = "You are a precise conversation summarizer. Extract key facts only."


class LiteLLMSummarizer(SummarizerPort):
    """Summarizer backed by ``litellm.acompletion``."""

    def __init__(
        self,
        model: str,
        max_tokens: int = 600,
        temperature: float = 0.2,
        **completion_kwargs: Any,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._completion_kwargs = completion_kwargs

    async def generate(self, prompt: str) -> str:
        import litellm

        response = await litellm.acompletion(
            model=self.model,
            messages=[
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            **self._completion_kwargs,
        )
        text = self._extract_response_text(response)
        logger.debug(f"[LiteLLMSummarizer] model={self.model} generated {len(text)} chars")
        return text

    @staticmethod
    def _extract_response_text(response: Any) -> str:
        """Extract text from LLM response (handles both object and dict formats)."""
        if hasattr(response, "choices") and response.choices:
            return (response.choices[0].message.content or "").strip()
        elif isinstance(response, dict):
            return response.get("choices", [{}])[0].get("message", {}).get("content", "").strip()
        return ""


class ExtractiveSummarizer(SummarizerPort):
    """
    Summarizes without a model by extracting the first sentence of each line.

    Reads the lines after CONVERSATION_HEADER in the prompt (one
    "Role: text" line per turn) and keeps a bounded number of bullets.
    """

    def __init__(self, max_items: int = 20, max_line_chars: int = 150) -> None:
        self.max_items = max_items
        self.max_line_chars = max_line_chars

    async def generate(self, prompt: str) -> str:
        _, _, conversation = prompt.partition(CONVERSATION_HEADER)
        lines = [line.strip() for line in (conversation or prompt).splitlines() if line.strip()]

        user_count = sum(1 for line in lines if line.startswith("User:"))
        assistant_count = sum(1 for line in lines if line.startswith("Assistant:"))

        items: list[str] = []
        for line in lines:
            role, sep, text = line.partition(":")
            if not sep:
                continue
            first = text.strip().split(". ")[0].strip()
            if not first:
                continue
            if len(first) > self.max_line_chars:
                first = first[: self.max_line_chars] + "..."
            items.append(f"- [{role.strip().lower()}] {first}")

        if len(items) > self.max_items:
            head = self.max_items // 2
            tail = self.max_items // 4
            items = items[:head] + ["- ... (additional turns omitted) ..."] + items[-tail:]

        key_points = (
            f"Key Points:\n- {user_count} user messages\n- {assistant_count} assistant responses"
        )
        if not items:
            return key_points + "\n\nNo significant content to summarize."
        return key_points + "\n\nSummary of conversation:\n" + "\n".join(items)
