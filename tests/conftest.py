"""Shared fixtures for context compression tests."""

import pytest

from contextbudget.domain.model.compression import CompressionConfig
from contextbudget.infrastructure.context.classifier import TurnClassifier
from contextbudget.infrastructure.context.compression_engine import ContextCompressionEngine
from contextbudget.infrastructure.llm.token_estimator import TokenEstimator


def whitespace_encoder(text: str) -> list[str]:
    """One token per whitespace-separated word."""
    return text.split()


def chunk_encoder(text: str) -> list[str]:
    """One token per 4 characters, like a rough BPE estimate."""
    return [text[i : i + 4] for i in range(0, len(text), 4)]


@pytest.fixture
def estimator():
    return TokenEstimator(encoder=whitespace_encoder)


@pytest.fixture
def chunk_estimator():
    return TokenEstimator(encoder=chunk_encoder)


@pytest.fixture
def classifier():
    return TurnClassifier()


@pytest.fixture
def config():
    return CompressionConfig()


@pytest.fixture
def engine(estimator):
    """Engine with deterministic word counting and the offline summarizer."""
    return ContextCompressionEngine(estimator=estimator)
