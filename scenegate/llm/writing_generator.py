"""Writing generation backed by an LLM provider"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List

from scenegate.models import (
    ScreenplayElement,
    ScreenplayElementType,
    WritingCommand,
    WritingRequest,
    WritingResponse,
)
from .provider import LLMProvider, LLMMessage, LLMProviderError

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 8000

# Token budgets by command class
REASONING_COMMANDS: FrozenSet[WritingCommand] = frozenset({
    WritingCommand.SCRIPT_DOCTOR,
    WritingCommand.NEGATIVE_SPACE,
})
SHORT_COMMANDS: FrozenSet[WritingCommand] = frozenset({WritingCommand.CONTINUE})


class WritingGenerator(ABC):
    """Produces text for a (constrained) writing request"""

    @abstractmethod
    async def generate(self, request: WritingRequest) -> WritingResponse:
        """Generate text; failures are reported through WritingResponse.error"""
        pass


COMMAND_INSTRUCTIONS: Dict[WritingCommand, str] = {
    WritingCommand.CONTINUE: "Continue the text from where it stops. Write only the next short beat; do not race ahead.",
    WritingCommand.DIALOGUE: "Write a short exchange of dialogue between the characters present. Every line must do work.",
    WritingCommand.SETTING: "Describe the current setting through concrete, filmable detail.",
    WritingCommand.EXPAND: "Expand the selected passage with more specific detail while keeping its voice.",
    WritingCommand.POV: "Rewrite the moment from the named character's point of view.",
    WritingCommand.NEGATIVE_SPACE: (
        "Write an organic moment of negative space: a pause, behavior, weather, texture. "
        "Nothing that advances the plot."
    ),
    WritingCommand.TENSION: "Raise the tension of the moment without resolving or advancing the plot.",
    WritingCommand.REWORK: "Rework the selected passage so it reads better while keeping what happens.",
    WritingCommand.ADJUST_TONE: "Rewrite the selected passage in the requested tone.",
    WritingCommand.SHORTEN: "Shorten the selected passage without losing meaning.",
    WritingCommand.CLEARER: "Make the selected passage clearer.",
    WritingCommand.ELABORATE: "Elaborate on the selected passage.",
    WritingCommand.SOFTEN: "Soften the selected passage.",
    WritingCommand.IMAGERY: "Strengthen the imagery of the selected passage.",
    WritingCommand.PACING: "Adjust the pacing of the selected passage.",
    WritingCommand.VOICE: "Sharpen the character voices in the selected passage.",
    WritingCommand.CONTRADICTION: "Point out contradictions between the selected passage and the story so far, as questions.",
    WritingCommand.FIX_GRAMMAR: "Fix spelling and grammar in the selected text. Change nothing else.",
    WritingCommand.MAKE_LONGER: "Make the selected text longer.",
    WritingCommand.MAKE_CONCISE: "Make the selected text more concise.",
    WritingCommand.SUMMARIZE: "Summarize the selected text.",
    WritingCommand.SCRIPT_DOCTOR: "Act as a script doctor: diagnose the biggest problems in the script so far, as questions to the writer.",
    WritingCommand.ACTION_ITEMS: "List the action items implied by the text.",
    WritingCommand.EXTRACT_QUESTIONS: "List the open questions raised by the text.",
}

SCREENPLAY_FORMAT = (
    "Write in standard screenplay format: scene headings in caps (INT./EXT.), "
    "action in present tense, character names in caps, dialogue in normal case.\n"
    f"Element types: {', '.join(t.value for t in ScreenplayElementType)}.\n"
    "Output ONLY valid JSON with an \"elements\" array, no commentary and no preamble:\n"
    '{"elements": [{"type": "action", "text": "MAYA wipes the counter."}, '
    '{"type": "character", "text": "MAYA"}, {"type": "dialogue", "text": "Not tonight."}]}'
)

CODE_BLOCK_PATTERN = re.compile(r'```(?:json)?\s*([\s\S]*?)```')
ELEMENTS_KEY_PATTERN = re.compile(r'"elements"\s*:\s*\[')
# A complete {"type": ..., "text": ...} object, used to salvage truncated output
ELEMENT_OBJECT_PATTERN = re.compile(r'\{\s*"type"\s*:\s*"([^"]+)"\s*,\s*"text"\s*:\s*"((?:[^"\\]|\\.)*)"\s*\}')

PROSE_FORMAT = "Write in prose that matches the document's existing voice."


def build_system_prompt(request: WritingRequest) -> str:
    """System prompt for the request's command and template"""
    parts = [
        "You are a writing partner for a working writer. You protect the story from premature cleverness.",
        COMMAND_INSTRUCTIONS[request.command],
        SCREENPLAY_FORMAT if request.is_screenplay else PROSE_FORMAT,
    ]
    if request.characters:
        names = ", ".join(c.name.upper() if request.is_screenplay else c.name for c in request.characters)
        parts.append(f"Only these characters may be used: {names}")
    return "\n\n".join(parts)


def build_user_prompt(request: WritingRequest) -> str:
    """User prompt carrying the script context and supplementary material"""
    sections: List[str] = []

    if request.document_title:
        sections.append(f"Document: {request.document_title}")

    supplementary = request.supplementary_context
    if supplementary:
        if supplementary.synopsis:
            sections.append(f"SYNOPSIS:\n{supplementary.synopsis}")
        for note in supplementary.character_notes:
            sections.append(f"CHARACTER NOTES - {note.name}:\n{note.content}")
        for note in supplementary.prop_notes:
            sections.append(f"PROP NOTES - {note.name}:\n{note.content}")
        for note in supplementary.other_notes:
            sections.append(f"{note.title}:\n{note.content}")

    scene = request.scene_context
    if scene:
        lines = ["CURRENT SCENE:"]
        if scene.scene_heading:
            lines.append(f"Location: {scene.scene_heading}")
        if scene.characters_in_scene:
            lines.append(f"Characters IN this scene: {', '.join(n.upper() for n in scene.characters_in_scene)}")
        if scene.preceding_action:
            lines.append(f"Recent action: {scene.preceding_action[:500]}")
        sections.append("\n".join(lines))

    if request.character_name:
        sections.append(f"Point-of-view character: {request.character_name}")
    if request.setting_hint:
        sections.append(f"Setting hint: {request.setting_hint}")
    if request.tone_option:
        sections.append(f"Tone: {request.tone_option}")

    context = request.context
    if len(context) > MAX_CONTEXT_CHARS:
        context = "..." + context[-MAX_CONTEXT_CHARS:]
    if context.strip():
        sections.append(f"TEXT SO FAR:\n{context}")

    if request.selection:
        sections.append(f"SELECTED TEXT:\n{request.selection}")

    return "\n\n".join(sections)


def extract_elements_json(text: str) -> str:
    """
    Pull the JSON payload out of a model response

    A fenced code block wins; otherwise the span from the first "{" to the
    last "}" is used when it carries an "elements" key. Anything else is
    returned unchanged.
    """
    match = CODE_BLOCK_PATTERN.search(text)
    if match:
        return match.group(1).strip()

    start = text.find('{')
    end = text.rfind('}')
    if start != -1 and end > start:
        extracted = text[start:end + 1]
        if '"elements"' in extracted:
            return extracted
    return text


def _valid_elements(raw_elements: List[Any]) -> List[ScreenplayElement]:
    """Keep entries with a known type and non-blank text"""
    elements = []
    for item in raw_elements:
        if not isinstance(item, dict):
            continue
        kind, text = item.get("type"), item.get("text")
        if not isinstance(kind, str) or not isinstance(text, str) or not text.strip():
            continue
        try:
            element_type = ScreenplayElementType(kind)
        except ValueError:
            continue
        elements.append(ScreenplayElement(type=element_type, text=text.strip()))
    return elements


def recover_truncated_elements(text: str) -> List[ScreenplayElement]:
    """Salvage the complete element objects of a response cut off mid-array"""
    if not ELEMENTS_KEY_PATTERN.search(text):
        return []

    raw_elements = []
    for kind, body in ELEMENT_OBJECT_PATTERN.findall(text):
        try:
            raw_elements.append({"type": kind, "text": json.loads(f'"{body}"', strict=False)})
        except json.JSONDecodeError:
            continue
    return _valid_elements(raw_elements)


def parse_screenplay_elements(text: str) -> List[ScreenplayElement]:
    """
    Parse screenplay elements from a model response

    Args:
        text: Raw model output, expected to hold {"elements": [...]}

    Returns:
        Valid elements in order; empty when nothing usable was found
    """
    try:
        parsed = json.loads(extract_elements_json(text))
    except json.JSONDecodeError as e:
        logger.warning(f"Screenplay JSON did not parse ({e}), attempting truncated recovery")
        elements = recover_truncated_elements(text)
        if elements:
            logger.info(f"Recovered {len(elements)} elements from truncated JSON")
        return elements

    if not isinstance(parsed, dict) or not isinstance(parsed.get("elements"), list):
        logger.warning("Parsed screenplay JSON has no elements array")
        return []

    elements = _valid_elements(parsed["elements"])
    logger.debug(f"Parsed {len(elements)} valid screenplay elements")
    return elements


def max_tokens_for(command: WritingCommand) -> int:
    if command in REASONING_COMMANDS:
        return 16384
    if command in SHORT_COMMANDS:
        return 2048
    return 4096


class LLMWritingGenerator(WritingGenerator):
    """Renders prompts for a writing request and sends them to an LLM provider"""

    def __init__(self, llm_provider: LLMProvider, temperature: float = 0.7):
        self.llm_provider = llm_provider
        self.temperature = temperature

    async def generate(self, request: WritingRequest) -> WritingResponse:
        has_context = bool(request.context and request.context.strip())
        has_selection = bool(request.selection and request.selection.strip())
        if not has_context and not has_selection:
            return WritingResponse(error="No context provided. Please write some text first.")

        system_prompt = build_system_prompt(request)
        user_prompt = build_user_prompt(request)
        logger.info(
            f"Generating {request.command.value} (screenplay: {request.is_screenplay}) - "
            f"prompt sizes: system {len(system_prompt)}, user {len(user_prompt)} chars"
        )

        try:
            response = await self.llm_provider.generate(
                messages=[
                    LLMMessage(role="system", content=system_prompt),
                    LLMMessage(role="user", content=user_prompt),
                ],
                temperature=self.temperature,
                max_tokens=max_tokens_for(request.command)
            )
        except LLMProviderError as e:
            logger.warning(f"Generation failed for {request.command.value}: {e}")
            return WritingResponse(error=str(e))

        text = response.content.strip()
        if not text:
            return WritingResponse(error="The model returned an empty response.")

        if not request.is_screenplay:
            return WritingResponse(text=text)

        elements = parse_screenplay_elements(text)
        if not elements:
            logger.warning(f"No screenplay elements parsed for {request.command.value}, returning plain text")
            return WritingResponse(text=text)

        return WritingResponse(
            text="\n\n".join(element.text for element in elements),
            is_screenplay=True,
            screenplay_elements=elements
        )

