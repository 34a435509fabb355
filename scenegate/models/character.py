"""Character roster, usage history and eligibility models"""

from enum import Enum
from typing import Dict, Iterable, List, Optional
from pydantic import BaseModel, Field, field_validator


class CharacterInfo(BaseModel):
    """Roster entry supplied by the character bank"""
    id: str = Field(..., description="Character ID")
    name: str = Field(..., description="Registered character name")
    color: Optional[str] = Field(default=None, description="Display color")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        # A blank name would match every line of the script
        value = value.strip()
        if not value:
            raise ValueError("Character name must not be blank")
        return value


class EligibilityStatus(str, Enum):
    """Permission level of a character for the next beat"""
    ELIGIBLE = "eligible"  # Can appear and drive action
    PRESENT_PASSIVE = "present-passive"  # In scene, must not drive action
    AVAILABLE_DELAYED = "available-delayed"  # Could enter, but not yet
    EXCLUDED = "excluded"  # Hard exclusion for this beat


class CharacterUsageHistory(BaseModel):
    """How a character has been used in the script so far"""
    character_id: str
    name: str
    appears_in_scenes: List[int] = Field(default_factory=list, description="Sorted unique scene numbers")
    is_lead: bool = False
    dialogue_line_count: int = 0
    has_been_introduced: bool = False
    first_appearance_scene: int = 999
    lead_score: int = Field(default=0, description="Score used for lead identification")

    @property
    def appearance_count(self) -> int:
        return len(self.appears_in_scenes)

    @property
    def last_appearance_scene(self) -> int:
        return max(self.appears_in_scenes) if self.appears_in_scenes else 0


class CharacterEligibility(BaseModel):
    """Eligibility derived for one character at request time"""
    character_id: str
    name: str
    status: EligibilityStatus
    reason: str
    constraints: Optional[List[str]] = None
    is_lead: bool = False
    scene_appearance_count: int = 0
    scenes_since_last_appearance: int = 0

    @property
    def can_drive(self) -> bool:
        """Whether this character can carry a character-driven beat"""
        return self.status in (EligibilityStatus.ELIGIBLE, EligibilityStatus.PRESENT_PASSIVE)


def count_by_status(eligibility: Iterable[CharacterEligibility]) -> Dict[EligibilityStatus, int]:
    """Number of characters per status, with zero entries for unused statuses"""
    counts = {status: 0 for status in EligibilityStatus}
    for entry in eligibility:
        counts[entry.status] += 1
    return counts
