"""Scene state classification models"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class ActPosition(str, Enum):
    """Structural act position in the screenplay"""
    ACT_I = "I"
    ACT_II_A = "II-A"
    ACT_II_B = "II-B"
    ACT_III = "III"
    UNKNOWN = "unknown"


class NarrativePhase(str, Enum):
    """Narrative phase within the current act"""
    SETUP = "setup"
    ESCALATION = "escalation"
    CLIMAX = "climax"
    RELEASE = "release"
    TRANSITION = "transition"


class SceneFocus(str, Enum):
    """What the current moment should foreground"""
    WORLD_BUILDING = "world-building"
    SUPPORTING_CAST = "supporting-cast"
    LEAD_DRIVEN = "lead-driven"
    THEME = "theme"
    CONFLICT = "conflict"


class ContributionType(str, Enum):
    """Kinds of content a generation step may produce"""
    QUESTION = "question"  # Ask the writer instead of generating
    TENSION = "tension"  # Hold or raise tension without advancing plot
    DELAY = "delay"  # Slow the pace, breathing room
    TEXTURE = "texture"  # Environmental or behavioral detail
    DIALOGUE = "dialogue"
    ACTION = "action"  # Plot-advancing action, most restricted
    NEGATIVE_SPACE = "negativeSpace"  # Non-advancing organic moments
    NONE = "none"


class ExclusionType(str, Enum):
    """Category of content an exclusion forbids"""
    CHARACTER = "character"
    ACTION = "action"
    REVELATION = "revelation"
    RESOLUTION = "resolution"


# Exclusion target that matches whichever character is the identified lead
LEAD_TARGET = "lead/protagonist"


class SceneExclusion(BaseModel):
    """A hard constraint for the current beat"""
    type: ExclusionType = Field(..., description="What category of thing is excluded")
    target: Optional[str] = Field(default=None, description="Character name or plot point")
    reason: str = Field(..., description="Human-readable reason")

    def format_forbidden(self) -> str:
        """Render as a forbidden-action line: 'type: target (reason)'"""
        text = self.type.value
        if self.target:
            text += f": {self.target}"
        return f"{text} ({self.reason})"


class ClassificationSignals(BaseModel):
    """Observable facts extracted from the script, recomputed per request"""
    total_scene_count: int = Field(default=0, ge=0)
    scenes_since_act_break: int = Field(default=0, ge=0)
    characters_introduced_count: int = Field(default=0, ge=0)
    characters_in_current_scene: int = Field(default=0, ge=0)
    conflict_established: bool = False
    is_opening_scene: bool = False
    lead_character_identified: bool = False
    lead_in_current_scene: bool = False
    scenes_since_lead_appearance: int = Field(default=0, ge=0)
    active_tension: bool = False
    current_scene_heading: Optional[str] = None

    class Config:
        frozen = True


class SceneState(BaseModel):
    """Classified state of the current narrative moment"""
    act: ActPosition
    phase: NarrativePhase
    focus: SceneFocus
    exclusions: List[SceneExclusion] = Field(default_factory=list)
    allowed_contributions: List[ContributionType] = Field(
        default_factory=lambda: [ContributionType.QUESTION]
    )
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning: str = ""
    signals: ClassificationSignals = Field(default_factory=ClassificationSignals)

    @field_validator("allowed_contributions")
    @classmethod
    def _always_allow_question(cls, value: List[ContributionType]) -> List[ContributionType]:
        ordered = list(dict.fromkeys(value))
        if ContributionType.QUESTION not in ordered:
            ordered.insert(0, ContributionType.QUESTION)
        return ordered

    def allows(self, contribution: ContributionType) -> bool:
        return contribution in self.allowed_contributions

    def character_exclusions(self) -> List[SceneExclusion]:
        return [e for e in self.exclusions if e.type == ExclusionType.CHARACTER]

    def summary(self) -> str:
        """One-line summary used in the constraint envelope"""
        return " | ".join([
            f"Act {self.act.value}",
            f"{self.phase.value} phase",
            f"{self.focus.value} focus",
            self.reasoning,
        ])
