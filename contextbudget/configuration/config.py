"""Configuration management for context compression."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from contextbudget.domain.model.compression import (
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_ERROR_KEYWORDS,
    CompressionConfig,
    SelectionPolicy,
)


class CompressionSettings(BaseSettings):
    """Compression settings loaded from the environment (or a .env file)."""

    # Overflow detection
    compression_threshold: float = Field(default=0.75, alias="CONTEXT_COMPRESSION_THRESHOLD")
    adaptive_target_ratio: float = Field(default=0.60, alias="CONTEXT_ADAPTIVE_TARGET_RATIO")
    default_context_window: int = Field(
        default=DEFAULT_CONTEXT_WINDOW, alias="CONTEXT_DEFAULT_WINDOW"
    )
    max_turns_before_compression: int = Field(default=50, alias="CONTEXT_MAX_TURNS")

    # Strategy behaviour
    preserve_recent: int = Field(default=5, alias="CONTEXT_PRESERVE_RECENT")
    # Comma-separated keyword list
    error_keywords: str = Field(
        default=",".join(DEFAULT_ERROR_KEYWORDS), alias="CONTEXT_ERROR_KEYWORDS"
    )
    selection_policy: SelectionPolicy = Field(
        default=SelectionPolicy.SAFE, alias="CONTEXT_SELECTION_POLICY"
    )
    strict_tool_pairing: bool = Field(default=False, alias="CONTEXT_STRICT_TOOL_PAIRING")
    max_iterations: int = Field(default=32, alias="CONTEXT_MAX_ITERATIONS")

    # Tokenizer
    tokenizer_model: str = Field(default="gpt-4o", alias="TOKENIZER_MODEL")

    # Summarization (no model -> local extractive summaries)
    summary_model: str | None = Field(default=None, alias="SUMMARY_MODEL")
    summary_max_tokens: int = Field(default=600, alias="SUMMARY_MAX_TOKENS")
    summary_temperature: float = Field(default=0.2, alias="SUMMARY_TEMPERATURE")
    summary_timeout_seconds: float | None = Field(default=None, alias="SUMMARY_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("selection_policy", mode="before")
    @classmethod
    def normalize_selection_policy(cls, value: str | SelectionPolicy | None) -> str:
        """Normalize policy value from environment."""
        if value is None:
            return SelectionPolicy.SAFE.value
        if isinstance(value, SelectionPolicy):
            return value.value
        return str(value).strip().lower()

    @field_validator("summary_model", mode="before")
    @classmethod
    def empty_model_is_none(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @property
    def error_keyword_list(self) -> tuple[str, ...]:
        return tuple(
            keyword.strip().lower() for keyword in self.error_keywords.split(",") if keyword.strip()
        )

    def to_compression_config(self) -> CompressionConfig:
        """Build the engine configuration from these settings."""
        config = CompressionConfig(
            compression_threshold=self.compression_threshold,
            adaptive_target_ratio=self.adaptive_target_ratio,
            default_context_window=self.default_context_window,
            max_turns_before_compression=self.max_turns_before_compression,
            error_keywords=self.error_keyword_list,
            preserve_recent=self.preserve_recent,
            summary_timeout_seconds=self.summary_timeout_seconds,
            max_iterations=self.max_iterations,
            selection_policy=self.selection_policy,
            strict_tool_pairing=self.strict_tool_pairing,
        )
        config.validate()
        return config


@lru_cache
def get_settings() -> CompressionSettings:
    """Get cached settings instance."""
    return CompressionSettings()
