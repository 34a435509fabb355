"""Pydantic schemas for scene gating"""

from .scene_state import (
    ActPosition,
    NarrativePhase,
    SceneFocus,
    ContributionType,
    ExclusionType,
    SceneExclusion,
    ClassificationSignals,
    SceneState,
    LEAD_TARGET,
)
from .character import (
    CharacterInfo,
    EligibilityStatus,
    CharacterUsageHistory,
    CharacterEligibility,
    count_by_status,
)
from .story_facts import (
    StoryFacts,
    CharacterState,
    RelationshipState,
    PropState,
    TimelineBeat,
)
from .writing import (
    WritingCommand,
    WritingRequest,
    WritingResponse,
    SceneContext,
    SupplementaryWritingContext,
    TitledNote,
    NamedNote,
    PropInfo,
    ScreenplayElement,
    ScreenplayElementType,
)
from .pipeline import (
    PipelineStage,
    GateEvaluation,
    ConstraintEnvelope,
    EligibleCharacter,
    PipelineResult,
)
from .tunables import GatingTunables, DEFAULT_TUNABLES

__all__ = [
    # Scene state
    "ActPosition",
    "NarrativePhase",
    "SceneFocus",
    "ContributionType",
    "ExclusionType",
    "SceneExclusion",
    "ClassificationSignals",
    "SceneState",
    "LEAD_TARGET",
    # Characters
    "CharacterInfo",
    "EligibilityStatus",
    "CharacterUsageHistory",
    "CharacterEligibility",
    "count_by_status",
    # Story facts
    "StoryFacts",
    "CharacterState",
    "RelationshipState",
    "PropState",
    "TimelineBeat",
    # Writing requests
    "WritingCommand",
    "WritingRequest",
    "WritingResponse",
    "SceneContext",
    "SupplementaryWritingContext",
    "TitledNote",
    "NamedNote",
    "PropInfo",
    "ScreenplayElement",
    "ScreenplayElementType",
    # Pipeline
    "PipelineStage",
    "GateEvaluation",
    "ConstraintEnvelope",
    "EligibleCharacter",
    "PipelineResult",
    # Tunables
    "GatingTunables",
    "DEFAULT_TUNABLES",
]
