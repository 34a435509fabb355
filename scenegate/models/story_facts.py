"""Story facts supplied by the fact-extraction service

These mirror the structured output of the two-pass extraction service. They
only strengthen signal quality; every field defaults to "no evidence" so a
partial payload still loads.
"""

from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class _FactsModel(BaseModel):
    """Accepts both snake_case and the service's camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RelationshipState(_FactsModel):
    """State of one relationship at a point in the story"""
    with_character: str = Field(..., alias="with")
    state: str
    scene: str = ""


class CharacterState(_FactsModel):
    """What the story has established about one character"""
    character_id: str = ""
    name: str
    current_wants: List[str] = Field(default_factory=list)
    promises: List[str] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    relationship_states: List[RelationshipState] = Field(default_factory=list)
    behavior_pattern: List[str] = Field(default_factory=list)


class PropIntroduction(_FactsModel):
    scene: str
    context: str = ""


class PropUsage(_FactsModel):
    scene: str
    how: str = ""


class PropState(_FactsModel):
    """Setup and payoff history of a prop"""
    prop_id: str = ""
    name: str
    introduced: Optional[PropIntroduction] = None
    usages: List[PropUsage] = Field(default_factory=list)
    rules: List[str] = Field(default_factory=list)
    symbolic_setup: Optional[str] = None


class TimelineBeat(_FactsModel):
    """One scene as modelled by the extraction service"""
    scene: str = ""
    scene_number: int = 0
    characters: List[str] = Field(default_factory=list)
    location: str = ""
    time_of_day: str = ""
    implied_duration: Optional[str] = None
    key_events: List[str] = Field(default_factory=list)


class StoryFacts(_FactsModel):
    """Facts extracted from the whole script"""
    characters: List[CharacterState] = Field(default_factory=list)
    props: List[PropState] = Field(default_factory=list)
    timeline: List[TimelineBeat] = Field(default_factory=list)
    established_rules: List[str] = Field(default_factory=list)
    open_promises: List[str] = Field(default_factory=list)
