"""Tests for environment-backed compression settings."""

import pytest

from contextbudget.configuration.config import CompressionSettings, get_settings
from contextbudget.domain.model.compression import DEFAULT_ERROR_KEYWORDS, SelectionPolicy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CONTEXT_COMPRESSION_THRESHOLD",
        "CONTEXT_ERROR_KEYWORDS",
        "CONTEXT_SELECTION_POLICY",
        "CONTEXT_STRICT_TOOL_PAIRING",
        "SUMMARY_MODEL",
        "SUMMARY_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
class TestCompressionSettings:
    def test_defaults(self):
        settings = CompressionSettings(_env_file=None)

        assert settings.compression_threshold == 0.75
        assert settings.selection_policy == SelectionPolicy.SAFE
        assert settings.summary_model is None
        assert settings.error_keyword_list == DEFAULT_ERROR_KEYWORDS

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CONTEXT_COMPRESSION_THRESHOLD", "0.8")
        monkeypatch.setenv("CONTEXT_ERROR_KEYWORDS", "Timeout, panic ,,")
        monkeypatch.setenv("CONTEXT_SELECTION_POLICY", " HEURISTIC ")
        monkeypatch.setenv("CONTEXT_STRICT_TOOL_PAIRING", "true")
        monkeypatch.setenv("SUMMARY_TIMEOUT_SECONDS", "2.5")

        settings = CompressionSettings(_env_file=None)

        assert settings.compression_threshold == 0.8
        assert settings.error_keyword_list == ("timeout", "panic")
        assert settings.selection_policy == SelectionPolicy.HEURISTIC
        assert settings.strict_tool_pairing is True
        assert settings.summary_timeout_seconds == 2.5

    def test_blank_summary_model_is_none(self, monkeypatch):
        monkeypatch.setenv("SUMMARY_MODEL", "   ")
        assert CompressionSettings(_env_file=None).summary_model is None

    def test_to_compression_config(self, monkeypatch):
        monkeypatch.setenv("CONTEXT_ERROR_KEYWORDS", "oops")
        monkeypatch.setenv("CONTEXT_SELECTION_POLICY", "heuristic")

        config = CompressionSettings(_env_file=None).to_compression_config()

        assert config.error_keywords == ("oops",)
        assert config.selection_policy == SelectionPolicy.HEURISTIC
        assert config.preserve_recent == 5

    def test_invalid_values_rejected(self, monkeypatch):
        monkeypatch.setenv("CONTEXT_COMPRESSION_THRESHOLD", "1.5")

        with pytest.raises(ValueError, match="compression_threshold"):
            CompressionSettings(_env_file=None).to_compression_config()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
