"""Tests for PriorityBasedStrategy."""

import pytest

from contextbudget.domain.model.compression import (
    TRUNCATION_MARKER,
    CompressionStrategy,
    PriorityWeights,
    StrategyKind,
)
from contextbudget.domain.model.transcript import Turn
from contextbudget.infrastructure.context.priority import PriorityScorer
from contextbudget.infrastructure.context.strategies import PriorityBasedStrategy


def filler(words: int) -> str:
    return " ".join(f"note{i}" for i in range(words))


@pytest.fixture
def strategy(estimator, classifier, config):
    scorer = PriorityScorer(estimator, classifier, config.weights)
    return PriorityBasedStrategy(estimator, classifier, config, scorer)


@pytest.mark.unit
class TestPriorityBasedStrategy:
    def test_keeps_error_and_user_turns(self, strategy, estimator):
        turns = [
            Turn.user(filler(20)),
            Turn.assistant(filler(20)),
            Turn.user(filler(20)),
            Turn.assistant("Error: Something failed"),
            Turn.user(filler(20)),
        ]

        result = strategy.prioritize(turns, max_tokens=50)

        assert result == [turns[0], turns[3], turns[4]]
        assert estimator.count(result) <= 50

    def test_partial_inclusion_below_half_budget(self, strategy, estimator):
        long_turn = Turn.assistant(" ".join(f"w{i}" for i in range(40)))
        turns = [Turn.user("a b"), long_turn, Turn.user("c d")]

        result = strategy.prioritize(turns, max_tokens=20)

        assert len(result) == 3
        assert result[0] is turns[0]
        assert result[2] is turns[2]
        assert result[1].content.endswith(TRUNCATION_MARKER)
        assert estimator.count(result) <= 20

    def test_no_partial_inclusion_at_half_budget(self, strategy):
        long_turn = Turn.assistant(" ".join(f"w{i}" for i in range(40)))
        turns = [Turn.user("a b"), long_turn, Turn.user("c d")]

        result = strategy.prioritize(turns, max_tokens=8)

        assert result == [turns[0], turns[2]]

    def test_output_is_ordered_and_unique(self, strategy):
        turns = [
            Turn.user(f"question {i}") if i % 3 == 0 else Turn.assistant(f"answer {i}")
            for i in range(12)
        ]

        result = strategy.prioritize(turns, max_tokens=12)

        indices = [turns.index(turn) for turn in result]
        assert indices == sorted(indices)
        assert len(set(indices)) == len(result)

    def test_ties_keep_original_order(self, estimator, classifier, config):
        scorer = PriorityScorer(estimator, classifier, PriorityWeights(recency=0))
        strategy = PriorityBasedStrategy(estimator, classifier, config, scorer)
        turns = [
            Turn.assistant("x"),
            Turn.assistant("tie one"),
            Turn.assistant("tie two"),
            Turn.assistant("y"),
        ]

        result = strategy.prioritize(turns, max_tokens=4)

        # Boundaries first, then the earlier of the two tied middle turns
        assert result == [turns[0], turns[1], turns[3]]

    def test_budget_monotonicity_for_whole_turns(self, strategy, estimator):
        turns = [Turn.user(filler(5)) if i % 2 == 0 else Turn.assistant(filler(5)) for i in range(8)]
        counts = [
            estimator.count(strategy.prioritize(turns, max_tokens=budget))
            for budget in range(5, 45, 5)
        ]
        assert counts == sorted(counts)

    @pytest.mark.asyncio
    async def test_reduce(self, strategy):
        turns = [Turn.user("a"), Turn.assistant(filler(10))]
        descriptor = CompressionStrategy(kind=StrategyKind.PRIORITY_BASED, max_tokens=1)

        outcome = await strategy.reduce(turns, 1, descriptor)

        assert outcome.transcript == [turns[0]]
