"""Constraint envelope - the bounds handed to the generator"""

from typing import List

from scenegate.models import (
    CharacterEligibility,
    ConstraintEnvelope,
    EligibilityStatus,
    EligibleCharacter,
    ExclusionType,
    SceneState,
    SupplementaryWritingContext,
    TitledNote,
    WritingRequest,
)

CONSTRAINT_BLOCK_START = "=== SCENE STATE (SYSTEM-ENFORCED CONSTRAINTS) ==="
CONSTRAINT_BLOCK_END = "=== END SCENE STATE CONSTRAINTS ==="
CONSTRAINT_NOTE_TITLE = "SCENE STATE CONSTRAINTS (SYSTEM-ENFORCED)"

FORBIDDEN_EXCLUSION_TYPES = (ExclusionType.ACTION, ExclusionType.RESOLUTION, ExclusionType.REVELATION)


def build_constraint_envelope(
    scene_state: SceneState,
    eligibility: List[CharacterEligibility]
) -> ConstraintEnvelope:
    """Aggregate scene state and eligibility into a constraint envelope"""
    return ConstraintEnvelope(
        excluded_characters=[e.name for e in eligibility if e.status == EligibilityStatus.EXCLUDED],
        passive_characters=[e.name for e in eligibility if e.status == EligibilityStatus.PRESENT_PASSIVE],
        eligible_characters=[
            EligibleCharacter(name=e.name, constraints=e.constraints)
            for e in eligibility
            if e.status == EligibilityStatus.ELIGIBLE
        ],
        forbidden_actions=[
            exclusion.format_forbidden()
            for exclusion in scene_state.exclusions
            if exclusion.type in FORBIDDEN_EXCLUSION_TYPES
        ],
        allowed_contributions=list(scene_state.allowed_contributions),
        scene_state_summary=scene_state.summary()
    )


def build_constraint_prompt_section(envelope: ConstraintEnvelope) -> str:
    """Render the envelope as the plain-text block injected ahead of the script context"""
    lines = [CONSTRAINT_BLOCK_START, envelope.scene_state_summary, ""]

    if envelope.forbidden_actions:
        lines.append("FORBIDDEN (you MUST NOT do any of these):")
        lines.extend(f"  - {action}" for action in envelope.forbidden_actions)
        lines.append("")

    if envelope.excluded_characters:
        lines.append(f"DO NOT USE THESE CHARACTERS: {', '.join(envelope.excluded_characters)}")
        lines.append("They are excluded from this scene beat for pacing/structural reasons.")
        lines.append("")

    if envelope.passive_characters:
        lines.append(
            f"THESE CHARACTERS ARE PRESENT BUT MUST NOT DRIVE ACTION: {', '.join(envelope.passive_characters)}"
        )
        lines.append("They can react, be background, or be mentioned - but should not initiate new beats.")
        lines.append("")

    constrained = [c for c in envelope.eligible_characters if c.constraints]
    if constrained:
        lines.append("CHARACTER CONSTRAINTS:")
        lines.extend(f"  - {c.name}: {', '.join(c.constraints)}" for c in constrained)
        lines.append("")

    allowed = ", ".join(c.value for c in envelope.allowed_contributions)
    lines.append(f"ALLOWED CONTRIBUTION TYPES: {allowed}")
    lines.append("Your output should align with these contribution types.")
    lines.append("")
    lines.append(CONSTRAINT_BLOCK_END)

    return "\n".join(lines)


def apply_constraints(request: WritingRequest, envelope: ConstraintEnvelope) -> WritingRequest:
    """
    Build the constrained request forwarded to the generator

    The constraint block is prepended to the context and duplicated as a
    supplementary note; hard-excluded characters are dropped from the roster.
    The caller's request is left untouched.
    """
    section = build_constraint_prompt_section(envelope)
    excluded = {name.upper() for name in envelope.excluded_characters}

    supplementary = (
        request.supplementary_context.model_copy(deep=True)
        if request.supplementary_context
        else SupplementaryWritingContext()
    )
    supplementary.other_notes.append(TitledNote(title=CONSTRAINT_NOTE_TITLE, content=section))

    return request.model_copy(update={
        "context": f"{section}\n\n{request.context}",
        "characters": [c for c in request.characters if c.name.upper() not in excluded],
        "supplementary_context": supplementary,
    })
