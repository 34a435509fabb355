"""Character usage history and lead identification"""

import logging
from typing import List, Optional
from dataclasses import dataclass

from scenegate.models import CharacterInfo, CharacterUsageHistory, GatingTunables, DEFAULT_TUNABLES
from .script_format import ScriptFormat, DEFAULT_SCRIPT_FORMAT

logger = logging.getLogger(__name__)


@dataclass
class LeadCandidate:
    """Top-scoring character and whether the lead call is confident"""
    history: CharacterUsageHistory
    score: int
    runner_up_score: int
    confident: bool


def build_usage_history(
    script_text: str,
    characters: List[CharacterInfo],
    script_format: Optional[ScriptFormat] = None,
    tunables: Optional[GatingTunables] = None
) -> List[CharacterUsageHistory]:
    """
    Scan the script for every roster character and mark the probable lead

    Args:
        script_text: Raw script text so far
        characters: Character roster
        script_format: Text conventions to scan with
        tunables: Heuristic constants

    Returns:
        One history entry per roster character, in roster order
    """
    script_format = script_format or DEFAULT_SCRIPT_FORMAT
    tunables = tunables or DEFAULT_TUNABLES
    scenes = script_format.split_scenes(script_text)

    history = []
    for char in characters:
        appears_in = set()
        dialogue_lines = 0
        introduced = False

        # Blank names match every line and are never scanned
        scanned = scenes if char.name.strip() else []
        for scene in scanned:
            text = scene.content

            header_count = script_format.dialogue_header_count(text, char.name)
            if header_count:
                dialogue_lines += header_count
                appears_in.add(scene.scene_number)

            if script_format.has_formal_introduction(text, char.name):
                introduced = True
                appears_in.add(scene.scene_number)

            if script_format.mentions(text, char.name):
                appears_in.add(scene.scene_number)

        appearances = sorted(appears_in)
        history.append(CharacterUsageHistory(
            character_id=char.id,
            name=char.name,
            appears_in_scenes=appearances,
            dialogue_line_count=dialogue_lines,
            has_been_introduced=introduced,
            first_appearance_scene=appearances[0] if appearances else tunables.unseen_first_appearance
        ))

    mark_lead_character(history, tunables)
    logger.debug(f"Built usage history for {len(history)} characters across {len(scenes)} scenes")
    return history


def score_character(usage: CharacterUsageHistory, tunables: Optional[GatingTunables] = None) -> int:
    """Lead score: dialogue weighs most, then appearances, early and formal introductions"""
    tunables = tunables or DEFAULT_TUNABLES
    score = usage.dialogue_line_count * tunables.lead_dialogue_weight
    score += usage.appearance_count * tunables.lead_appearance_weight
    if usage.first_appearance_scene <= tunables.lead_early_intro_scene:
        score += tunables.lead_early_intro_bonus
    if usage.has_been_introduced:
        score += tunables.lead_formal_intro_bonus
    return score


def identify_lead_character(
    history: List[CharacterUsageHistory],
    tunables: Optional[GatingTunables] = None
) -> Optional[LeadCandidate]:
    """
    Rank characters by lead score

    The top scorer is always returned as a best guess. It is only confident
    when its score exceeds the runner-up (0 when alone) by more than the
    dominance margin; ensemble casts produce a non-confident candidate.
    """
    tunables = tunables or DEFAULT_TUNABLES
    if not history:
        return None

    scored = sorted(
        ((score_character(usage, tunables), idx) for idx, usage in enumerate(history)),
        key=lambda item: (-item[0], item[1])
    )
    top_score, top_idx = scored[0]
    runner_up = scored[1][0] if len(scored) > 1 else 0

    return LeadCandidate(
        history=history[top_idx],
        score=top_score,
        runner_up_score=runner_up,
        confident=top_score > runner_up * tunables.lead_dominance_margin
    )


def mark_lead_character(
    history: List[CharacterUsageHistory],
    tunables: Optional[GatingTunables] = None
) -> Optional[CharacterUsageHistory]:
    """Record lead scores and set is_lead on a clearly dominant character"""
    tunables = tunables or DEFAULT_TUNABLES
    for usage in history:
        usage.lead_score = score_character(usage, tunables)
        usage.is_lead = False

    candidate = identify_lead_character(history, tunables)
    if candidate is None:
        return None
    if not candidate.confident:
        logger.debug(
            f"No clear lead: {candidate.history.name} scored {candidate.score} "
            f"against runner-up {candidate.runner_up_score}"
        )
        return None

    candidate.history.is_lead = True
    return candidate.history
