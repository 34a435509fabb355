"""Writing request/response models exchanged with the generation service"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from .character import CharacterInfo


class WritingCommand(str, Enum):
    """Commands the writing partner can be asked to perform"""
    # Generative: produce new narrative
    CONTINUE = "continue"
    DIALOGUE = "dialogue"
    SETTING = "setting"
    EXPAND = "expand"
    POV = "pov"
    NEGATIVE_SPACE = "negativeSpace"
    TENSION = "tension"
    # Revision: refine existing screenplay text
    REWORK = "rework"
    ADJUST_TONE = "adjustTone"
    SHORTEN = "shorten"
    CLEARER = "clearer"
    ELABORATE = "elaborate"
    SOFTEN = "soften"
    IMAGERY = "imagery"
    PACING = "pacing"
    VOICE = "voice"
    CONTRADICTION = "contradiction"
    # Document revision
    FIX_GRAMMAR = "fixGrammar"
    MAKE_LONGER = "makeLonger"
    MAKE_CONCISE = "makeConcise"
    SUMMARIZE = "summarize"
    # Analysis
    SCRIPT_DOCTOR = "scriptDoctor"
    ACTION_ITEMS = "actionItems"
    EXTRACT_QUESTIONS = "extractQuestions"


class ScreenplayElementType(str, Enum):
    SCENE_HEADING = "scene-heading"
    ACTION = "action"
    CHARACTER = "character"
    DIALOGUE = "dialogue"
    PARENTHETICAL = "parenthetical"
    TRANSITION = "transition"
    SHOT = "shot"


class ScreenplayElement(BaseModel):
    """A single formatted screenplay block"""
    type: ScreenplayElementType
    text: str


class PropInfo(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None


class SceneContext(BaseModel):
    """Structured context of the scene the cursor is in"""
    scene_heading: Optional[str] = Field(default=None, description="e.g. INT. NURSE'S STATION - DAY")
    characters_in_scene: List[str] = Field(default_factory=list)
    preceding_action: Optional[str] = None


class NamedNote(BaseModel):
    """A supplementary note attached to a character or prop"""
    name: str
    content: str


class TitledNote(BaseModel):
    title: str
    content: str


class SupplementaryWritingContext(BaseModel):
    """Background material from project documents"""
    synopsis: Optional[str] = None
    character_notes: List[NamedNote] = Field(default_factory=list)
    prop_notes: List[NamedNote] = Field(default_factory=list)
    other_notes: List[TitledNote] = Field(default_factory=list)


class WritingRequest(BaseModel):
    """Request forwarded to the generation service"""
    command: WritingCommand
    context: str = Field(default="", description="Script text before the cursor")
    selection: Optional[str] = None
    character_name: Optional[str] = Field(default=None, description="Character for the pov command")
    characters: List[CharacterInfo] = Field(default_factory=list)
    props: List[PropInfo] = Field(default_factory=list)
    setting_hint: Optional[str] = None
    document_title: Optional[str] = None
    template_type: Optional[str] = Field(default=None, description="screenplay, journal, ...")
    tone_option: Optional[str] = None
    supplementary_context: Optional[SupplementaryWritingContext] = None
    scene_context: Optional[SceneContext] = None

    @property
    def is_screenplay(self) -> bool:
        return self.template_type == "screenplay"


class WritingResponse(BaseModel):
    """Result of a generation call"""
    text: str = ""
    error: Optional[str] = None
    is_screenplay: bool = False
    screenplay_elements: List[ScreenplayElement] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None
