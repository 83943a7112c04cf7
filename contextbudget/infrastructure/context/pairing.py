"""
Tool pairing enforcement.

A tool_result answers a preceding tool_use. Budget-driven selection may keep
one side of a pair and drop the other. In strict mode the engine removes such
orphaned turns after the strategy ran, so the output never holds half a pair
whose partner existed in the input. Blocks are matched by tool-use id;
blocks without an id are never considered paired.
"""

import logging
from collections.abc import Sequence

from contextbudget.domain.model.transcript import (
    Turn,
    iter_tool_result_ids,
    iter_tool_use_ids,
)

logger = logging.getLogger(__name__)


def paired_tool_ids(transcript: Sequence[Turn]) -> set[str]:
    """Ids that appear both as a tool_use and as a tool_result."""
    use_ids = {tool_id for turn in transcript for tool_id in iter_tool_use_ids(turn)}
    result_ids = {tool_id for turn in transcript for tool_id in iter_tool_result_ids(turn)}
    return use_ids & result_ids


def find_orphaned_turns(original: Sequence[Turn], reduced: Sequence[Turn]) -> list[int]:
    """Indices into ``reduced`` of turns whose tool partner was dropped."""
    paired = paired_tool_ids(original)
    if not paired:
        return []

    kept_uses = {tool_id for turn in reduced for tool_id in iter_tool_use_ids(turn)}
    kept_results = {tool_id for turn in reduced for tool_id in iter_tool_result_ids(turn)}

    orphaned = []
    for index, turn in enumerate(reduced):
        missing_result = any(
            tool_id in paired and tool_id not in kept_results for tool_id in iter_tool_use_ids(turn)
        )
        missing_use = any(
            tool_id in paired and tool_id not in kept_uses for tool_id in iter_tool_result_ids(turn)
        )
        if missing_result or missing_use:
            orphaned.append(index)
    return orphaned


def enforce_tool_pairing(original: Sequence[Turn], reduced: Sequence[Turn]) -> list[Turn]:
    """
    Drop turns holding half of a tool pair until no orphan remains.

    Dropping a turn can orphan its own partners, so this repeats until stable.
    The last turn of ``reduced`` is always kept.

    Args:
        original: The transcript before reduction
        reduced: The strategy output

    Returns:
        ``reduced`` without orphaned turns, order preserved
    """
    kept = list(reduced)
    dropped = 0
    while kept:
        last = len(kept) - 1
        orphaned = [index for index in find_orphaned_turns(original, kept) if index != last]
        if not orphaned:
            break
        drop = set(orphaned)
        kept = [turn for index, turn in enumerate(kept) if index not in drop]
        dropped += len(drop)

    if dropped:
        logger.info(f"Strict tool pairing dropped {dropped} orphaned turns")
    return kept
