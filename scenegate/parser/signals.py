"""Classification signal extraction from script text and story facts"""

import logging
from typing import List, Optional

from scenegate.models import (
    ClassificationSignals,
    CharacterUsageHistory,
    GatingTunables,
    SceneContext,
    StoryFacts,
    DEFAULT_TUNABLES,
)
from .script_format import ScriptFormat, DEFAULT_SCRIPT_FORMAT
from .usage_history import identify_lead_character

logger = logging.getLogger(__name__)

CONFLICT_KEYWORDS = ("conflict", "tension", "distrust", "antagoni")


def has_conflict_been_established(story_facts: Optional[StoryFacts]) -> bool:
    """Whether the story facts show an open promise, a want held against a constraint, or a hostile relationship"""
    if story_facts is None:
        return False

    if story_facts.open_promises:
        return True

    for char in story_facts.characters:
        if char.current_wants and char.constraints:
            return True

    for char in story_facts.characters:
        for relationship in char.relationship_states:
            state = relationship.state.lower()
            if any(keyword in state for keyword in CONFLICT_KEYWORDS):
                return True

    return False


def extract_classification_signals(
    script_text: str,
    scene_context: Optional[SceneContext],
    story_facts: Optional[StoryFacts],
    usage_history: List[CharacterUsageHistory],
    script_format: Optional[ScriptFormat] = None,
    tunables: Optional[GatingTunables] = None
) -> ClassificationSignals:
    """
    Extract observable signals for classification

    Missing story facts or scene context degrade to "no evidence" values.

    Args:
        script_text: Raw script text so far
        scene_context: Current scene heading and characters present
        story_facts: Facts from the extraction service, if available
        usage_history: Output of build_usage_history
        script_format: Text conventions to scan with
        tunables: Heuristic constants

    Returns:
        ClassificationSignals
    """
    script_format = script_format or DEFAULT_SCRIPT_FORMAT
    tunables = tunables or DEFAULT_TUNABLES

    heading_count = script_format.count_scene_headings(script_text)
    timeline_count = len(story_facts.timeline) if story_facts else 0
    total_scenes = max(heading_count, timeline_count)

    since_break = script_format.count_scenes_since_last_act_break(script_text)
    if since_break is None:
        since_break = total_scenes

    introduced = sum(1 for usage in usage_history if usage.has_been_introduced)
    if not introduced and story_facts:
        introduced = len(story_facts.characters)

    in_scene = scene_context.characters_in_scene if scene_context else []

    lead = identify_lead_character(usage_history, tunables)
    lead_identified = lead is not None and lead.confident
    lead_in_scene = False
    scenes_since_lead = 0
    if lead_identified:
        lead_name = lead.history.name.upper()
        lead_in_scene = any(name.upper() == lead_name for name in in_scene)
        if lead.history.appears_in_scenes:
            scenes_since_lead = max(total_scenes - lead.history.last_appearance_scene, 0)
        else:
            scenes_since_lead = total_scenes

    signals = ClassificationSignals(
        total_scene_count=total_scenes,
        scenes_since_act_break=since_break,
        characters_introduced_count=introduced,
        characters_in_current_scene=len(in_scene),
        conflict_established=has_conflict_been_established(story_facts),
        is_opening_scene=total_scenes <= 1,
        lead_character_identified=lead_identified,
        lead_in_current_scene=lead_in_scene,
        scenes_since_lead_appearance=scenes_since_lead,
        active_tension=bool(story_facts and story_facts.open_promises),
        current_scene_heading=scene_context.scene_heading if scene_context else None
    )

    logger.debug(
        f"Signals: {total_scenes} scenes ({heading_count} headings, {timeline_count} timeline beats), "
        f"{since_break} since act break, lead identified: {lead_identified}"
    )
    return signals
