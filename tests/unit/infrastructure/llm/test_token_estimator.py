"""Tests for TokenEstimator."""

from unittest.mock import patch

import pytest

from contextbudget.domain.exceptions import TokenEstimationError
from contextbudget.domain.model.transcript import (
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Turn,
    UnknownBlock,
)
from contextbudget.infrastructure.llm import token_estimator
from contextbudget.infrastructure.llm.token_estimator import (
    TokenEstimator,
    canonical_json,
    estimate_tokens,
    get_token_estimator,
)


@pytest.mark.unit
class TestCanonicalJson:
    def test_strings_pass_through(self):
        assert canonical_json("raw output") == "raw output"

    def test_keys_are_sorted_and_compact(self):
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


@pytest.mark.unit
class TestTokenEstimator:
    def test_count_text_turn(self, estimator):
        assert estimator.count([Turn.user("hello brave new world")]) == 4

    def test_empty_text_is_zero(self, estimator):
        assert estimator.count_text("") == 0
        assert estimator.count([]) == 0

    def test_count_structured_turn(self, estimator):
        turn = Turn.assistant(
            [
                TextBlock("checking the files"),
                ToolUseBlock(id="t1", name="bash", input={"cmd": "ls -la /tmp"}),
                ToolResultBlock(content=["a.txt", "b.txt"], tool_use_id="t1"),
            ]
        )
        # 3 words + '{"cmd":"ls -la /tmp"}' (3) + '["a.txt","b.txt"]' (1)
        assert estimator.count_turn(turn) == 7

    def test_unknown_blocks_count_zero(self, estimator):
        turn = Turn.user([UnknownBlock(type="image", data={"bytes": "x" * 100}), TextBlock("hi")])
        assert estimator.count_turn(turn) == 1

    def test_count_is_additive(self, estimator):
        first = [Turn.user("one two"), Turn.assistant("three")]
        second = [Turn.user("four five six")]
        assert estimator.count(first + second) == estimator.count(first) + estimator.count(second)

    def test_count_each(self, estimator):
        transcript = [Turn.user("a b"), Turn.assistant("c")]
        assert estimator.count_each(transcript) == [2, 1]

    def test_encoder_failure_raises(self):
        def broken_encoder(text):
            raise UnicodeEncodeError("utf-8", text, 0, 1, "bad")

        estimator = TokenEstimator(encoder=broken_encoder)

        with pytest.raises(TokenEstimationError) as exc_info:
            estimator.count([Turn.user("hello")])

        assert isinstance(exc_info.value.cause, UnicodeEncodeError)

    def test_default_encoder_uses_litellm(self):
        with patch("litellm.encode", return_value=[101, 102, 103]) as mock_encode:
            estimator = TokenEstimator(model="gpt-4o-mini")
            assert estimator.count_text("hello there") == 3

        mock_encode.assert_called_once_with(model="gpt-4o-mini", text="hello there")
        assert estimator.model == "gpt-4o-mini"

    def test_estimate_tokens_uses_module_default(self, monkeypatch, estimator):
        monkeypatch.setattr(token_estimator, "_default_estimator", estimator)

        assert get_token_estimator() is estimator
        assert estimate_tokens([Turn.user("a b c")]) == 3
