"""Generation gate - decides whether a requested command should generate at all

Declining is a normal outcome: the decision carries the reason and, where one
can be derived, a contribution type that would be appropriate instead.
"""

from typing import Dict, FrozenSet, List

from scenegate.models import (
    ContributionType,
    CharacterEligibility,
    GateEvaluation,
    NarrativePhase,
    SceneState,
    WritingCommand,
)

# Every command maps to the kind of content it would produce
COMMAND_CONTRIBUTIONS: Dict[WritingCommand, ContributionType] = {
    WritingCommand.CONTINUE: ContributionType.ACTION,
    WritingCommand.DIALOGUE: ContributionType.DIALOGUE,
    WritingCommand.SETTING: ContributionType.TEXTURE,
    WritingCommand.EXPAND: ContributionType.ACTION,
    WritingCommand.POV: ContributionType.ACTION,
    WritingCommand.NEGATIVE_SPACE: ContributionType.NEGATIVE_SPACE,
    WritingCommand.TENSION: ContributionType.TENSION,
    WritingCommand.REWORK: ContributionType.ACTION,
    WritingCommand.ADJUST_TONE: ContributionType.TEXTURE,
    WritingCommand.SHORTEN: ContributionType.TEXTURE,
    WritingCommand.CLEARER: ContributionType.TEXTURE,
    WritingCommand.ELABORATE: ContributionType.TEXTURE,
    WritingCommand.SOFTEN: ContributionType.TEXTURE,
    WritingCommand.IMAGERY: ContributionType.TEXTURE,
    WritingCommand.PACING: ContributionType.TEXTURE,
    WritingCommand.VOICE: ContributionType.TEXTURE,
    WritingCommand.CONTRADICTION: ContributionType.QUESTION,
    WritingCommand.FIX_GRAMMAR: ContributionType.TEXTURE,
    WritingCommand.MAKE_LONGER: ContributionType.TEXTURE,
    WritingCommand.MAKE_CONCISE: ContributionType.TEXTURE,
    WritingCommand.SUMMARIZE: ContributionType.TEXTURE,
    WritingCommand.SCRIPT_DOCTOR: ContributionType.QUESTION,
    WritingCommand.ACTION_ITEMS: ContributionType.QUESTION,
    WritingCommand.EXTRACT_QUESTIONS: ContributionType.QUESTION,
}

# Commands that operate on text already written; they always pass
REVISION_COMMANDS: FrozenSet[WritingCommand] = frozenset({
    WritingCommand.REWORK,
    WritingCommand.ADJUST_TONE,
    WritingCommand.SHORTEN,
    WritingCommand.CLEARER,
    WritingCommand.ELABORATE,
    WritingCommand.SOFTEN,
    WritingCommand.IMAGERY,
    WritingCommand.PACING,
    WritingCommand.VOICE,
    WritingCommand.CONTRADICTION,
    WritingCommand.FIX_GRAMMAR,
    WritingCommand.MAKE_LONGER,
    WritingCommand.MAKE_CONCISE,
    WritingCommand.SUMMARIZE,
})

# Commands that need a character able to carry the beat
CHARACTER_DRIVEN_COMMANDS: FrozenSet[WritingCommand] = frozenset({
    WritingCommand.CONTINUE,
    WritingCommand.DIALOGUE,
    WritingCommand.EXPAND,
    WritingCommand.POV,
})

NO_ELIGIBLE_CHARACTERS_REASON = (
    "No characters are eligible to drive this scene right now. "
    "All characters are either excluded or delayed."
)


def command_contribution(command: WritingCommand) -> ContributionType:
    return COMMAND_CONTRIBUTIONS[command]


def is_revision_command(command: WritingCommand) -> bool:
    return command in REVISION_COMMANDS


def suggest_alternative(scene_state: SceneState) -> ContributionType:
    """First allowed contribution other than question/none, falling back to question"""
    for contribution in scene_state.allowed_contributions:
        if contribution not in (ContributionType.QUESTION, ContributionType.NONE):
            return contribution
    return ContributionType.QUESTION


def evaluate_generation_gate(
    scene_state: SceneState,
    command: WritingCommand,
    eligibility: List[CharacterEligibility]
) -> GateEvaluation:
    """
    Evaluate whether generation should proceed

    Args:
        scene_state: Classified scene state
        command: Requested command
        eligibility: Eligibility for the full roster

    Returns:
        GateEvaluation with the decision, reason and suggested alternative
    """
    if is_revision_command(command):
        return GateEvaluation(
            should_generate=True,
            reason="Revision commands always pass - they refine existing text"
        )

    if command == WritingCommand.TENSION and scene_state.phase == NarrativePhase.RELEASE:
        return GateEvaluation(
            should_generate=False,
            reason="The story is in a release phase - adding tension would undercut the resolution.",
            suggested_alternative=ContributionType.NEGATIVE_SPACE
        )

    if command in CHARACTER_DRIVEN_COMMANDS and eligibility:
        if not any(entry.can_drive for entry in eligibility):
            return GateEvaluation(
                should_generate=False,
                reason=NO_ELIGIBLE_CHARACTERS_REASON,
                suggested_alternative=ContributionType.TEXTURE
            )

    contribution = command_contribution(command)
    if not scene_state.allows(contribution):
        return GateEvaluation(
            should_generate=False,
            reason=(
                f'"{command.value}" maps to "{contribution.value}" which is not allowed in the current '
                f"{scene_state.phase.value} phase ({scene_state.focus.value} focus). {scene_state.reasoning}"
            ),
            suggested_alternative=suggest_alternative(scene_state)
        )

    return GateEvaluation(
        should_generate=True,
        reason=(
            f'"{command.value}" is appropriate for {scene_state.phase.value} phase '
            f"with {scene_state.focus.value} focus"
        )
    )
