"""Scene State Classifier - labels the current narrative moment before generation

Every rule cascade below returns on its first match. The classifier works on
observable signals only and never calls a model.
"""

import logging
from typing import List, Optional

from scenegate.models import (
    ActPosition,
    NarrativePhase,
    SceneFocus,
    ContributionType,
    ExclusionType,
    SceneExclusion,
    ClassificationSignals,
    SceneState,
    CharacterUsageHistory,
    GatingTunables,
    SceneContext,
    StoryFacts,
    LEAD_TARGET,
    DEFAULT_TUNABLES,
)
from scenegate.parser import ScriptFormat, extract_classification_signals

logger = logging.getLogger(__name__)


def classify_scene_state(
    signals: ClassificationSignals,
    tunables: Optional[GatingTunables] = None
) -> SceneState:
    """
    Classify the scene state from extracted signals

    Args:
        signals: Observable script signals
        tunables: Heuristic constants

    Returns:
        SceneState with act, phase, focus, exclusions and allowed contributions
    """
    tunables = tunables or DEFAULT_TUNABLES

    act = classify_act(signals, tunables)
    phase = classify_phase(signals, act, tunables)
    focus = classify_focus(signals, act, phase, tunables)
    logger.debug(f"Classified {signals.total_scene_count} scenes as Act {act.value}, {phase.value}, {focus.value}")

    return SceneState(
        act=act,
        phase=phase,
        focus=focus,
        exclusions=derive_exclusions(signals, act, phase, focus, tunables),
        allowed_contributions=derive_allowed_contributions(phase, signals),
        confidence=compute_confidence(signals, tunables),
        reasoning=generate_reasoning(signals, act, phase, focus, tunables),
        signals=signals
    )


def classify_from_context(
    script_text: str,
    scene_context: Optional[SceneContext],
    story_facts: Optional[StoryFacts],
    usage_history: List[CharacterUsageHistory],
    script_format: Optional[ScriptFormat] = None,
    tunables: Optional[GatingTunables] = None
) -> SceneState:
    """Extract signals from the script, then classify them"""
    signals = extract_classification_signals(
        script_text,
        scene_context,
        story_facts,
        usage_history,
        script_format=script_format,
        tunables=tunables
    )
    return classify_scene_state(signals, tunables)


def classify_act(signals: ClassificationSignals, tunables: GatingTunables = DEFAULT_TUNABLES) -> ActPosition:
    """Act position from scene count, conflict and distance from the last act break"""
    total = signals.total_scene_count
    # The first band shares the conflict rule of the second
    _, early_two_end, mid_end, late_two_end = tunables.act_thresholds

    if total <= tunables.early_act_scene_limit:
        return ActPosition.ACT_I

    # No established conflict keeps the story in Act I
    if total <= early_two_end:
        if not signals.conflict_established:
            return ActPosition.ACT_I
        return ActPosition.ACT_II_A

    if total <= mid_end:
        if signals.scenes_since_act_break < tunables.act_two_settle_scenes:
            return ActPosition.ACT_II_A
        return ActPosition.ACT_II_B

    if total <= late_two_end:
        return ActPosition.ACT_II_B

    return ActPosition.ACT_III


def classify_phase(
    signals: ClassificationSignals,
    act: ActPosition,
    tunables: GatingTunables = DEFAULT_TUNABLES
) -> NarrativePhase:
    """Narrative phase within the act"""
    if signals.is_opening_scene or signals.total_scene_count <= 1:
        return NarrativePhase.SETUP

    if (signals.scenes_since_act_break <= tunables.transition_window
            and signals.total_scene_count > tunables.early_act_scene_limit):
        return NarrativePhase.TRANSITION

    if act == ActPosition.ACT_I:
        if (signals.characters_introduced_count <= tunables.setup_character_minimum
                or not signals.conflict_established):
            return NarrativePhase.SETUP
        return NarrativePhase.ESCALATION

    if act == ActPosition.ACT_II_A:
        return NarrativePhase.ESCALATION

    if act == ActPosition.ACT_II_B:
        if signals.active_tension:
            return NarrativePhase.ESCALATION
        return NarrativePhase.CLIMAX

    if act == ActPosition.ACT_III:
        if signals.scenes_since_act_break <= tunables.act_three_climax_scenes:
            return NarrativePhase.CLIMAX
        return NarrativePhase.RELEASE

    return NarrativePhase.SETUP


def classify_focus(
    signals: ClassificationSignals,
    act: ActPosition,
    phase: NarrativePhase,
    tunables: GatingTunables = DEFAULT_TUNABLES
) -> SceneFocus:
    """What the moment should foreground"""
    present = signals.characters_in_current_scene
    lead_present = signals.lead_in_current_scene

    if signals.is_opening_scene and present == 0:
        return SceneFocus.WORLD_BUILDING

    if act == ActPosition.ACT_I and phase == NarrativePhase.SETUP:
        if signals.characters_introduced_count <= tunables.setup_character_minimum:
            return SceneFocus.WORLD_BUILDING
        if not lead_present:
            return SceneFocus.SUPPORTING_CAST
        return SceneFocus.LEAD_DRIVEN

    if lead_present and signals.conflict_established:
        return SceneFocus.LEAD_DRIVEN

    if not lead_present and present >= tunables.ensemble_presence:
        return SceneFocus.SUPPORTING_CAST

    if signals.conflict_established and phase == NarrativePhase.ESCALATION:
        return SceneFocus.CONFLICT

    if phase in (NarrativePhase.RELEASE, NarrativePhase.TRANSITION):
        return SceneFocus.THEME

    if lead_present:
        return SceneFocus.LEAD_DRIVEN
    if present > 0:
        return SceneFocus.SUPPORTING_CAST
    return SceneFocus.WORLD_BUILDING


def derive_exclusions(
    signals: ClassificationSignals,
    act: ActPosition,
    phase: NarrativePhase,
    focus: SceneFocus,
    tunables: GatingTunables = DEFAULT_TUNABLES
) -> List[SceneExclusion]:
    """Hard exclusions for the beat. Rules are additive."""
    exclusions = []

    if phase == NarrativePhase.SETUP:
        exclusions.append(SceneExclusion(
            type=ExclusionType.RESOLUTION,
            reason="Setup phase: conflicts should be building, not resolving"
        ))
        if focus == SceneFocus.WORLD_BUILDING and not signals.lead_in_current_scene:
            exclusions.append(SceneExclusion(
                type=ExclusionType.CHARACTER,
                target=LEAD_TARGET,
                reason="World-building phase: establish environment before introducing lead character"
            ))
        exclusions.append(SceneExclusion(
            type=ExclusionType.REVELATION,
            reason="Setup phase: save revelations for after the world and characters are grounded"
        ))

    if focus == SceneFocus.SUPPORTING_CAST:
        if not signals.lead_in_current_scene:
            exclusions.append(SceneExclusion(
                type=ExclusionType.CHARACTER,
                target=LEAD_TARGET,
                reason="Supporting cast focus: let these characters breathe without the lead dominating"
            ))
        exclusions.append(SceneExclusion(
            type=ExclusionType.ACTION,
            target="main-plot-advancement",
            reason="Supporting cast scene: develop these characters, don't advance the main plot"
        ))

    if phase == NarrativePhase.TRANSITION:
        exclusions.append(SceneExclusion(
            type=ExclusionType.ACTION,
            target="climactic-action",
            reason="Transition phase: the audience needs to breathe between acts"
        ))
        exclusions.append(SceneExclusion(
            type=ExclusionType.RESOLUTION,
            reason="Transition phase: carry tension forward, don't resolve it"
        ))

    if phase == NarrativePhase.RELEASE:
        exclusions.append(SceneExclusion(
            type=ExclusionType.ACTION,
            target="new-conflict",
            reason="Release phase: the story is winding down, don't introduce new tensions"
        ))

    if act == ActPosition.ACT_I and signals.total_scene_count <= tunables.early_act_scene_limit:
        exclusions.append(SceneExclusion(
            type=ExclusionType.ACTION,
            target="plot-acceleration",
            reason="Early Act I: the story needs room to establish its world before plot machinery kicks in"
        ))

    if focus == SceneFocus.WORLD_BUILDING:
        exclusions.append(SceneExclusion(
            type=ExclusionType.ACTION,
            target="plot-advancement",
            reason="World-building focus: establish the setting and atmosphere first"
        ))

    return exclusions


# Contributions each phase unlocks on top of question/texture/negativeSpace
PHASE_CONTRIBUTIONS = {
    NarrativePhase.SETUP: [ContributionType.DELAY],
    NarrativePhase.ESCALATION: [ContributionType.TENSION, ContributionType.DIALOGUE, ContributionType.ACTION],
    NarrativePhase.CLIMAX: [ContributionType.TENSION, ContributionType.DIALOGUE, ContributionType.ACTION],
    NarrativePhase.RELEASE: [ContributionType.DELAY, ContributionType.DIALOGUE, ContributionType.NEGATIVE_SPACE],
    NarrativePhase.TRANSITION: [ContributionType.DELAY, ContributionType.TEXTURE],
}

# Phases where dialogue depends on someone being in the scene
PRESENCE_DIALOGUE_PHASES = (NarrativePhase.SETUP, NarrativePhase.TRANSITION)


def derive_allowed_contributions(
    phase: NarrativePhase,
    signals: ClassificationSignals
) -> List[ContributionType]:
    """Contribution types allowed in this phase, ordered and de-duplicated"""
    contributions = [ContributionType.QUESTION, ContributionType.TEXTURE]

    if phase != NarrativePhase.CLIMAX:
        contributions.append(ContributionType.NEGATIVE_SPACE)

    contributions.extend(PHASE_CONTRIBUTIONS[phase])

    if phase in PRESENCE_DIALOGUE_PHASES and signals.characters_in_current_scene > 0:
        contributions.append(ContributionType.DIALOGUE)

    return list(dict.fromkeys(contributions))


def compute_confidence(signals: ClassificationSignals, tunables: GatingTunables = DEFAULT_TUNABLES) -> float:
    """Confidence grows with the amount of evidence available"""
    confidence = tunables.base_confidence

    for step in tunables.confidence_scene_steps:
        if signals.total_scene_count >= step:
            confidence += tunables.confidence_scene_bonus

    if signals.lead_character_identified:
        confidence += tunables.confidence_lead_bonus
    if signals.conflict_established:
        confidence += tunables.confidence_conflict_bonus
    if signals.current_scene_heading:
        confidence += tunables.confidence_heading_bonus
    if signals.characters_in_current_scene > 0:
        confidence += tunables.confidence_presence_bonus

    return min(round(confidence, 4), 1.0)


def generate_reasoning(
    signals: ClassificationSignals,
    act: ActPosition,
    phase: NarrativePhase,
    focus: SceneFocus,
    tunables: GatingTunables = DEFAULT_TUNABLES
) -> str:
    """Human-readable account of the classification, for audit only"""
    parts = [f"Act {act.value}:"]

    if signals.total_scene_count <= tunables.early_act_scene_limit:
        parts.append("very early in the script")
    elif act == ActPosition.ACT_I:
        parts.append(f"{signals.total_scene_count} scenes in, still establishing")
    else:
        parts.append(f"{signals.total_scene_count} scenes deep")

    if phase == NarrativePhase.SETUP:
        parts.append(f"setup phase ({signals.characters_introduced_count} characters introduced)")
    elif phase == NarrativePhase.ESCALATION:
        state = "active" if signals.conflict_established else "building"
        parts.append(f"escalation phase (conflict {state})")
    elif phase == NarrativePhase.TRANSITION:
        parts.append("transition phase (breathing room between beats)")
    else:
        parts.append(f"{phase.value} phase")

    if focus == SceneFocus.WORLD_BUILDING:
        parts.append("focus: establishing the world")
    elif focus == SceneFocus.SUPPORTING_CAST:
        lead = "present" if signals.lead_in_current_scene else "absent"
        parts.append(
            f"focus: supporting cast ({signals.characters_in_current_scene} characters present, lead {lead})"
        )
    elif focus == SceneFocus.LEAD_DRIVEN:
        parts.append("focus: lead character driving the scene")
    else:
        parts.append(f"focus: {focus.value}")

    return " | ".join(parts)
