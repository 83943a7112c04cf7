"""Tests for TruncateStrategy and the shared turn trimming."""

import pytest

from contextbudget.domain.model.compression import (
    TRUNCATION_MARKER,
    CompressionStrategy,
    StrategyKind,
)
from contextbudget.domain.model.transcript import TextBlock, Turn
from contextbudget.infrastructure.context.strategies import TruncateStrategy


def make_turns(sizes: list[int]) -> list[Turn]:
    """One turn per size, alternating roles, ``size`` words each."""
    turns = []
    for i, size in enumerate(sizes):
        text = " ".join(f"t{i}w{j}" for j in range(size))
        turns.append(Turn.user(text) if i % 2 == 0 else Turn.assistant(text))
    return turns


@pytest.fixture
def strategy(estimator, classifier, config):
    return TruncateStrategy(estimator, classifier, config)


@pytest.mark.unit
class TestTruncateStrategy:
    def test_keeps_recency_window_and_backfills(self, strategy, estimator):
        turns = make_turns([2] * 10)

        result = strategy.truncate(turns, max_tokens=10, preserve_recent=3)

        assert result == turns[5:]
        assert estimator.count(result) == 10

    def test_backfill_stops_at_first_turn_that_does_not_fit(self, strategy):
        turns = make_turns([1, 1, 10, 1, 1])

        result = strategy.truncate(turns, max_tokens=5, preserve_recent=2)

        # Turns 0 and 1 would fit, but history stays contiguous
        assert result == turns[3:]

    def test_window_shrinks_to_fit(self, strategy):
        turns = make_turns([4, 4, 4])

        result = strategy.truncate(turns, max_tokens=8, preserve_recent=5)

        assert result == turns[1:]

    def test_single_oversized_turn_is_kept(self, strategy):
        turns = make_turns([10, 10, 10])

        result = strategy.truncate(turns, max_tokens=5, preserve_recent=3)

        assert result == [turns[-1]]

    def test_empty_transcript(self, strategy):
        assert strategy.truncate([], max_tokens=10) == []

    def test_recent_turns_are_verbatim(self, strategy):
        turns = make_turns([3] * 20)
        result = strategy.truncate(turns, max_tokens=30, preserve_recent=5)
        assert result[-5:] == turns[-5:]

    def test_budget_monotonicity(self, strategy, estimator):
        turns = make_turns([1, 3, 2, 5, 1, 4, 2, 2, 6, 1])
        counts = [
            estimator.count(strategy.truncate(turns, max_tokens=budget, preserve_recent=3))
            for budget in range(0, 30)
        ]
        assert counts == sorted(counts)

    @pytest.mark.asyncio
    async def test_reduce_uses_descriptor_preserve_recent(self, strategy):
        turns = make_turns([2] * 6)
        descriptor = CompressionStrategy(kind=StrategyKind.TRUNCATE, max_tokens=4, preserve_recent=1)

        outcome = await strategy.reduce(turns, 4, descriptor)

        assert outcome.transcript == turns[4:]
        assert outcome.summary is None


@pytest.mark.unit
class TestTruncateTurn:
    def test_turn_that_fits_is_returned_unchanged(self, strategy):
        turn = Turn.user("short text")
        assert strategy.truncate_turn(turn, 5) is turn

    def test_text_turn_is_cut_with_marker(self, strategy, estimator):
        turn = Turn.assistant(" ".join(f"w{i}" for i in range(40)))

        trimmed = strategy.truncate_turn(turn, 16)

        assert trimmed.content.endswith(TRUNCATION_MARKER)
        assert estimator.count_turn(trimmed) <= 16
        assert trimmed.role == "assistant"

    def test_no_room_for_marker(self, strategy):
        assert strategy.truncate_turn(Turn.user("a b c d e"), 2) is None
        assert strategy.truncate_turn(Turn.user("a b c d e"), 0) is None

    def test_block_turn_cuts_first_text_block_that_does_not_fit(self, strategy, estimator):
        turn = Turn.assistant(
            [TextBlock("one two"), TextBlock(" ".join(f"w{i}" for i in range(10)))]
        )

        trimmed = strategy.truncate_turn(turn, 8)

        assert len(trimmed.content) == 2
        assert trimmed.content[0] == TextBlock("one two")
        assert trimmed.content[1].text.endswith(TRUNCATION_MARKER)
        assert estimator.count_turn(trimmed) <= 8

    def test_block_turn_stops_when_budget_mostly_used(self, strategy):
        first = TextBlock(" ".join(f"a{i}" for i in range(7)))
        turn = Turn.assistant([first, TextBlock(" ".join(f"b{i}" for i in range(10)))])

        trimmed = strategy.truncate_turn(turn, 8)

        assert trimmed.content == (first,)
