"""Gate, constraint envelope and pipeline result models"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .character import CharacterEligibility, EligibilityStatus, count_by_status
from .scene_state import ContributionType, SceneState
from .writing import WritingResponse


class PipelineStage(str, Enum):
    """Stage the pipeline reached before returning"""
    CLASSIFIED = "classified"
    CONSTRAINED = "constrained"
    GATED = "gated"
    GENERATED = "generated"
    DECLINED = "declined"


class GateEvaluation(BaseModel):
    """Outcome of the generation gate"""
    should_generate: bool
    reason: str
    suggested_alternative: Optional[ContributionType] = None


class EligibleCharacter(BaseModel):
    name: str
    constraints: Optional[List[str]] = None


class ConstraintEnvelope(BaseModel):
    """Everything the generator is bound by for this beat"""
    excluded_characters: List[str] = Field(default_factory=list)
    passive_characters: List[str] = Field(default_factory=list)
    eligible_characters: List[EligibleCharacter] = Field(default_factory=list)
    forbidden_actions: List[str] = Field(default_factory=list)
    allowed_contributions: List[ContributionType] = Field(default_factory=list)
    scene_state_summary: str = ""


class PipelineResult(BaseModel):
    """Full audit trail of one pipeline run, populated up to the stage reached"""
    stage: PipelineStage
    scene_state: Optional[SceneState] = None
    eligibility: Optional[List[CharacterEligibility]] = None
    gate_passed: bool = False
    gate_reason: Optional[str] = None
    gate_overridden: bool = False
    envelope: Optional[ConstraintEnvelope] = None
    generation: Optional[WritingResponse] = None
    generation_error: Optional[str] = None
    suggestion: Optional[str] = None
    suggested_alternative: Optional[ContributionType] = None

    def eligibility_counts(self) -> Dict[EligibilityStatus, int]:
        return count_by_status(self.eligibility or [])
