"""Tests for tool_use / tool_result pairing enforcement."""

import pytest

from contextbudget.domain.model.transcript import ToolResultBlock, ToolUseBlock, Turn
from contextbudget.infrastructure.context.pairing import (
    enforce_tool_pairing,
    find_orphaned_turns,
    paired_tool_ids,
)


@pytest.fixture
def session():
    return [
        Turn.user("list the files"),
        Turn.assistant([ToolUseBlock(id="t1", name="bash", input={"cmd": "ls"})]),
        Turn.user([ToolResultBlock(content="a.txt", tool_use_id="t1")]),
        Turn.assistant("There is one file."),
    ]


@pytest.mark.unit
class TestToolPairing:
    def test_paired_ids(self, session):
        assert paired_tool_ids(session) == {"t1"}

    def test_unanswered_tool_use_is_not_paired(self):
        transcript = [Turn.assistant([ToolUseBlock(id="t9", name="bash")])]
        assert paired_tool_ids(transcript) == set()
        assert find_orphaned_turns(transcript, transcript) == []

    def test_find_orphaned_result(self, session):
        reduced = [session[0], session[2], session[3]]
        assert find_orphaned_turns(session, reduced) == [1]

    def test_enforce_drops_orphaned_result(self, session):
        reduced = [session[0], session[2], session[3]]
        assert enforce_tool_pairing(session, reduced) == [session[0], session[3]]

    def test_complete_pair_is_untouched(self, session):
        assert enforce_tool_pairing(session, session) == session

    def test_last_turn_is_always_kept(self, session):
        reduced = [session[0], session[1]]
        assert enforce_tool_pairing(session, reduced) == reduced

    def test_drops_until_stable(self):
        use_a = Turn.assistant([ToolUseBlock(id="a", name="read")])
        # Answers "a" and requests "b" in the same turn
        bridge = Turn.assistant(
            [ToolResultBlock(content="x", tool_use_id="a"), ToolUseBlock(id="b", name="write")]
        )
        result_b = Turn.user([ToolResultBlock(content="ok", tool_use_id="b")])
        done = Turn.assistant("done")
        original = [use_a, bridge, result_b, done]

        # Dropping the bridge orphans result_b on the next pass
        assert enforce_tool_pairing(original, [bridge, result_b, done]) == [done]
        assert enforce_tool_pairing(original, original) == original
