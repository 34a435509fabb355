"""Named tunables for the gating heuristics

The defaults are the constants the rule set has always used. The act
thresholds assume a conventional 40-60 scene screenplay; much shorter or
longer works are classified with the same thresholds.
"""

from typing import Tuple
from pydantic import BaseModel, Field


class GatingTunables(BaseModel):
    """Heuristic constants for classification, lead scoring and eligibility"""

    # Lead identification
    lead_dominance_margin: float = Field(
        default=1.3,
        description="Top lead score must exceed the runner-up times this factor"
    )
    lead_dialogue_weight: int = Field(default=2, description="Score per dialogue header")
    lead_appearance_weight: int = Field(default=1, description="Score per scene appeared in")
    lead_early_intro_bonus: int = Field(default=5, description="Bonus for appearing early")
    lead_early_intro_scene: int = Field(default=2, description="Last scene that counts as early")
    lead_formal_intro_bonus: int = Field(default=3, description="Bonus for a formal introduction")
    unseen_first_appearance: int = Field(default=999, description="First-appearance value for unseen characters")

    # Eligibility
    overuse_ratio: float = Field(
        default=0.6,
        description="Non-lead characters in more than this share of scenes go passive"
    )
    recent_lead_scenes: int = Field(default=1, description="Lead seen within this many scenes is delayed")
    frequent_appearance_count: int = Field(default=3, description="Appearances before a just-seen character is delayed")

    # Act classification
    early_act_scene_limit: int = Field(default=3, description="Scenes that are always Act I")
    act_thresholds: Tuple[int, int, int, int] = Field(
        default=(8, 15, 30, 45),
        description="Scene counts bounding the act bands"
    )
    act_two_settle_scenes: int = Field(default=5, description="Scenes after a break before II-A gives way to II-B")
    act_three_climax_scenes: int = Field(default=3, description="Scenes of Act III that stay in climax")

    # Phase and focus
    transition_window: int = Field(default=1, description="Scenes after an act break treated as transition")
    setup_character_minimum: int = Field(default=2, description="Introduced characters at or below this keep setup")
    ensemble_presence: int = Field(default=2, description="Characters present for a supporting-cast scene")

    # Confidence
    base_confidence: float = 0.5
    confidence_scene_steps: Tuple[int, int] = (5, 15)
    confidence_scene_bonus: float = 0.1
    confidence_lead_bonus: float = 0.1
    confidence_conflict_bonus: float = 0.1
    confidence_heading_bonus: float = 0.05
    confidence_presence_bonus: float = 0.05


DEFAULT_TUNABLES = GatingTunables()
