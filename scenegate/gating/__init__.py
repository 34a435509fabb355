"""Rule engine: classification, eligibility, gate and constraint envelope"""

from .classifier import (
    classify_scene_state,
    classify_from_context,
    classify_act,
    classify_phase,
    classify_focus,
    derive_exclusions,
    derive_allowed_contributions,
    compute_confidence,
    generate_reasoning,
)
from .eligibility import derive_character_eligibility, determine_eligibility, find_character_exclusion
from .gate import (
    COMMAND_CONTRIBUTIONS,
    REVISION_COMMANDS,
    CHARACTER_DRIVEN_COMMANDS,
    evaluate_generation_gate,
    command_contribution,
    is_revision_command,
    suggest_alternative,
)
from .envelope import (
    CONSTRAINT_BLOCK_START,
    CONSTRAINT_BLOCK_END,
    CONSTRAINT_NOTE_TITLE,
    build_constraint_envelope,
    build_constraint_prompt_section,
    apply_constraints,
)

__all__ = [
    "classify_scene_state",
    "classify_from_context",
    "classify_act",
    "classify_phase",
    "classify_focus",
    "derive_exclusions",
    "derive_allowed_contributions",
    "compute_confidence",
    "generate_reasoning",
    "derive_character_eligibility",
    "determine_eligibility",
    "find_character_exclusion",
    "COMMAND_CONTRIBUTIONS",
    "REVISION_COMMANDS",
    "CHARACTER_DRIVEN_COMMANDS",
    "evaluate_generation_gate",
    "command_contribution",
    "is_revision_command",
    "suggest_alternative",
    "CONSTRAINT_BLOCK_START",
    "CONSTRAINT_BLOCK_END",
    "CONSTRAINT_NOTE_TITLE",
    "build_constraint_envelope",
    "build_constraint_prompt_section",
    "apply_constraints",
]
