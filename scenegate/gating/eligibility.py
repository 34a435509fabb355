"""Character Eligibility - who may act in the next beat, and how

Eligibility is derived on every request from the scene state and the usage
history; it is never stored. A character can exist in the roster and still be
held back because their entrance would collapse tension or pacing.
"""

import logging
from typing import Dict, List, Optional, Tuple

from scenegate.models import (
    ActPosition,
    NarrativePhase,
    SceneFocus,
    SceneExclusion,
    SceneState,
    SceneContext,
    CharacterInfo,
    CharacterUsageHistory,
    CharacterEligibility,
    EligibilityStatus,
    GatingTunables,
    LEAD_TARGET,
    DEFAULT_TUNABLES,
)

logger = logging.getLogger(__name__)

Decision = Tuple[EligibilityStatus, str, Optional[List[str]]]


def derive_character_eligibility(
    scene_state: SceneState,
    characters: List[CharacterInfo],
    usage_history: List[CharacterUsageHistory],
    scene_context: Optional[SceneContext],
    tunables: Optional[GatingTunables] = None
) -> List[CharacterEligibility]:
    """
    Derive eligibility for every roster character

    Args:
        scene_state: Classified scene state
        characters: Character roster
        usage_history: Usage history from the same script text
        scene_context: Characters present in the current scene
        tunables: Heuristic constants

    Returns:
        One CharacterEligibility per roster character, in roster order
    """
    tunables = tunables or DEFAULT_TUNABLES
    total_scenes = scene_state.signals.total_scene_count
    in_scene = {name.upper() for name in (scene_context.characters_in_scene if scene_context else [])}
    usage_by_id: Dict[str, CharacterUsageHistory] = {u.character_id: u for u in usage_history}

    eligibility = []
    for char in characters:
        usage = usage_by_id.get(char.id)
        is_lead = usage.is_lead if usage else False
        appearance_count = usage.appearance_count if usage else 0
        last_scene = usage.last_appearance_scene if usage else 0
        scenes_since = max(total_scenes - last_scene, 0)

        status, reason, constraints = determine_eligibility(
            char,
            is_lead=is_lead,
            is_in_current_scene=char.name.upper() in in_scene,
            scene_state=scene_state,
            scene_appearance_count=appearance_count,
            scenes_since_last_appearance=scenes_since,
            usage=usage,
            tunables=tunables
        )

        eligibility.append(CharacterEligibility(
            character_id=char.id,
            name=char.name,
            status=status,
            reason=reason,
            constraints=constraints,
            is_lead=is_lead,
            scene_appearance_count=appearance_count,
            scenes_since_last_appearance=scenes_since
        ))

    logger.debug(
        f"Derived eligibility for {len(eligibility)} characters "
        f"(act {scene_state.act.value}, {scene_state.phase.value}, {scene_state.focus.value})"
    )
    return eligibility


def find_character_exclusion(
    scene_state: SceneState,
    name: str,
    is_lead: bool
) -> Optional[SceneExclusion]:
    """First character exclusion naming this character, or the lead when they are lead"""
    for exclusion in scene_state.character_exclusions():
        if not exclusion.target:
            continue
        if exclusion.target.upper() == name.upper():
            return exclusion
        if exclusion.target == LEAD_TARGET and is_lead:
            return exclusion
    return None


def determine_eligibility(
    char: CharacterInfo,
    is_lead: bool,
    is_in_current_scene: bool,
    scene_state: SceneState,
    scene_appearance_count: int,
    scenes_since_last_appearance: int,
    usage: Optional[CharacterUsageHistory],
    tunables: GatingTunables = DEFAULT_TUNABLES
) -> Decision:
    """Eligibility for a single character. First matching rule wins."""
    total_scenes = scene_state.signals.total_scene_count
    phase = scene_state.phase

    # Hard exclusions take precedence over everything
    exclusion = find_character_exclusion(scene_state, char.name, is_lead)
    if exclusion:
        return EligibilityStatus.EXCLUDED, exclusion.reason, None

    if is_in_current_scene:
        if is_lead and scene_state.focus == SceneFocus.SUPPORTING_CAST:
            return (
                EligibilityStatus.PRESENT_PASSIVE,
                "Lead is present but this is a supporting cast scene - let others drive",
                ["only reactive", "no new dialogue initiatives", "background presence"]
            )

        if not is_lead and scene_appearance_count > total_scenes * tunables.overuse_ratio:
            return (
                EligibilityStatus.PRESENT_PASSIVE,
                f"Character appears in {scene_appearance_count}/{total_scenes} scenes - risk of overuse",
                ["reduced dialogue", "reactive only"]
            )

        return EligibilityStatus.ELIGIBLE, "Character is in the current scene and eligible to act", None

    # Not in the current scene
    introduced = usage.has_been_introduced if usage else False
    if is_lead and scene_state.act == ActPosition.ACT_I and phase == NarrativePhase.SETUP and not introduced:
        return (
            EligibilityStatus.AVAILABLE_DELAYED,
            "Lead character entrance is being protected - establish world first",
            ["do not introduce yet"]
        )

    if is_lead and scenes_since_last_appearance <= tunables.recent_lead_scenes:
        return (
            EligibilityStatus.AVAILABLE_DELAYED,
            "Lead just appeared - give the scene room to develop other elements",
            ["let other characters breathe"]
        )

    if scenes_since_last_appearance <= 0 and scene_appearance_count >= tunables.frequent_appearance_count:
        return (
            EligibilityStatus.AVAILABLE_DELAYED,
            "Character appeared recently - let tension build before their return",
            ["delay entrance"]
        )

    if phase == NarrativePhase.SETUP and not is_lead:
        return EligibilityStatus.ELIGIBLE, "Supporting character available for introduction during setup", None

    if phase in (NarrativePhase.ESCALATION, NarrativePhase.CLIMAX):
        return EligibilityStatus.ELIGIBLE, "Character available for scene entrance", None

    if phase in (NarrativePhase.TRANSITION, NarrativePhase.RELEASE):
        return (
            EligibilityStatus.AVAILABLE_DELAYED,
            f"{phase.value} phase: not the right moment for new character entrances",
            None
        )

    return EligibilityStatus.ELIGIBLE, "Character available", None
