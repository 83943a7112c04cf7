"""Environment-backed configuration."""

from contextbudget.configuration.config import CompressionSettings, get_settings

__all__ = ["CompressionSettings", "get_settings"]
