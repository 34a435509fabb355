"""Tests for the LLM-backed writing generator"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from scenegate.models import (
    CharacterInfo,
    SceneContext,
    SupplementaryWritingContext,
    NamedNote,
    ScreenplayElementType,
    WritingCommand,
    WritingRequest,
)
from scenegate.llm import LLMResponse, LLMProviderError, LLMWritingGenerator
from scenegate.llm.writing_generator import (
    COMMAND_INSTRUCTIONS,
    MAX_CONTEXT_CHARS,
    build_system_prompt,
    build_user_prompt,
    extract_elements_json,
    max_tokens_for,
    parse_screenplay_elements,
)


ELEMENTS_JSON = (
    '{"elements": [{"type": "character", "text": "MAYA"}, '
    '{"type": "dialogue", "text": " Not tonight. "}]}'
)


@pytest.fixture
def provider():
    mock = MagicMock()
    mock.generate = AsyncMock(return_value=LLMResponse(content=ELEMENTS_JSON, model="llama3.1:8b"))
    return mock


def make_request(command=WritingCommand.DIALOGUE, **kwargs):
    kwargs.setdefault("context", "INT. KITCHEN - DAY\n\nThe kettle screams.")
    kwargs.setdefault("template_type", "screenplay")
    return WritingRequest(command=command, **kwargs)


class TestPrompts:
    """Test prompt rendering"""

    def test_every_command_has_instructions(self):
        """Test no command renders without an instruction"""
        assert set(COMMAND_INSTRUCTIONS) == set(WritingCommand)

    def test_system_prompt_lists_roster(self):
        """Test screenplay rosters are rendered in caps"""
        request = make_request(characters=[CharacterInfo(id="m", name="Maya"), CharacterInfo(id="j", name="Jonas")])

        prompt = build_system_prompt(request)

        assert "Only these characters may be used: MAYA, JONAS" in prompt
        assert "screenplay format" in prompt
        assert 'Output ONLY valid JSON with an "elements" array' in prompt
        assert "scene-heading, action, character, dialogue, parenthetical, transition, shot" in prompt

    def test_prose_template(self):
        """Test non-screenplay templates get the prose instruction"""
        prompt = build_system_prompt(make_request(template_type="journal"))

        assert "prose" in prompt
        assert "screenplay format" not in prompt
        assert '"elements"' not in prompt

    def test_user_prompt_sections(self):
        """Test supplementary material and scene context are included"""
        request = make_request(
            document_title="Night Shift",
            supplementary_context=SupplementaryWritingContext(
                synopsis="A nurse covers for a thief.",
                character_notes=[NamedNote(name="Maya", content="Never sleeps")]
            ),
            scene_context=SceneContext(scene_heading="INT. KITCHEN - DAY", characters_in_scene=["Maya"])
        )

        prompt = build_user_prompt(request)

        assert "Document: Night Shift" in prompt
        assert "SYNOPSIS:\nA nurse covers for a thief." in prompt
        assert "CHARACTER NOTES - Maya:\nNever sleeps" in prompt
        assert "Characters IN this scene: MAYA" in prompt
        assert prompt.endswith("TEXT SO FAR:\nINT. KITCHEN - DAY\n\nThe kettle screams.")

    def test_context_is_truncated_from_the_start(self):
        """Test only the most recent context is sent"""
        context = "x" * 100 + "y" * MAX_CONTEXT_CHARS

        prompt = build_user_prompt(make_request(context=context))

        assert prompt.endswith("TEXT SO FAR:\n..." + "y" * MAX_CONTEXT_CHARS)
        assert "x" not in prompt.split("TEXT SO FAR:")[1]

    @pytest.mark.parametrize("command,expected", [
        (WritingCommand.SCRIPT_DOCTOR, 16384),
        (WritingCommand.NEGATIVE_SPACE, 16384),
        (WritingCommand.CONTINUE, 2048),
        (WritingCommand.DIALOGUE, 4096),
        (WritingCommand.FIX_GRAMMAR, 4096),
    ])
    def test_token_budgets(self, command, expected):
        """Test token budgets by command class"""
        assert max_tokens_for(command) == expected


class TestGenerate:
    """Test generation through a provider"""

    @pytest.mark.asyncio
    async def test_generate(self, provider):
        """Test a successful generation"""
        generator = LLMWritingGenerator(provider, temperature=0.4)

        response = await generator.generate(make_request(WritingCommand.CONTINUE))

        assert response.text == "MAYA\n\nNot tonight."
        assert response.error is None
        assert response.is_screenplay is True
        assert [(e.type, e.text) for e in response.screenplay_elements] == [
            (ScreenplayElementType.CHARACTER, "MAYA"),
            (ScreenplayElementType.DIALOGUE, "Not tonight."),
        ]

        kwargs = provider.generate.await_args.kwargs
        assert [m.role for m in kwargs["messages"]] == ["system", "user"]
        assert kwargs["temperature"] == 0.4
        assert kwargs["max_tokens"] == 2048

    @pytest.mark.asyncio
    async def test_no_context_is_an_error(self, provider):
        """Test requests without context or selection are refused"""
        response = await LLMWritingGenerator(provider).generate(make_request(context="   "))

        assert response.failed
        assert response.error == "No context provided. Please write some text first."
        provider.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_selection_without_context(self, provider):
        """Test a selection alone is enough"""
        request = make_request(WritingCommand.FIX_GRAMMAR, context="", selection="Their going home.")

        response = await LLMWritingGenerator(provider).generate(request)

        assert not response.failed
        assert "SELECTED TEXT:\nTheir going home." in provider.generate.await_args.kwargs["messages"][1].content

    @pytest.mark.asyncio
    async def test_provider_error_becomes_error_response(self, provider):
        """Test transport failures are reported, not raised"""
        provider.generate.side_effect = LLMProviderError("Ollama API error: connection refused")

        response = await LLMWritingGenerator(provider).generate(make_request())

        assert response.failed
        assert response.error == "Ollama API error: connection refused"

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self, provider):
        """Test only provider errors are converted"""
        provider.generate.side_effect = KeyError("message")

        with pytest.raises(KeyError):
            await LLMWritingGenerator(provider).generate(make_request())

    @pytest.mark.asyncio
    async def test_empty_model_output(self, provider):
        """Test blank model output is an error"""
        provider.generate.return_value = LLMResponse(content="  \n", model="llama3.1:8b")

        response = await LLMWritingGenerator(provider).generate(make_request())

        assert response.failed

    @pytest.mark.asyncio
    async def test_unstructured_screenplay_output_falls_back_to_text(self, provider):
        """Test screenplay output without elements is returned as plain text"""
        provider.generate.return_value = LLMResponse(content="MAYA\nNot tonight.\n", model="llama3.1:8b")

        response = await LLMWritingGenerator(provider).generate(make_request())

        assert not response.failed
        assert response.text == "MAYA\nNot tonight."
        assert response.is_screenplay is False
        assert response.screenplay_elements == []

    @pytest.mark.asyncio
    async def test_prose_output_is_not_parsed(self, provider):
        """Test non-screenplay templates keep the raw text even if it looks like JSON"""
        response = await LLMWritingGenerator(provider).generate(make_request(template_type="journal"))

        assert response.text == ELEMENTS_JSON
        assert response.is_screenplay is False
        assert response.screenplay_elements == []


class TestScreenplayElements:
    """Test parsing of structured screenplay output"""

    def test_plain_json(self):
        """Test a bare elements object"""
        elements = parse_screenplay_elements(ELEMENTS_JSON)

        assert [e.text for e in elements] == ["MAYA", "Not tonight."]

    def test_code_block(self):
        """Test JSON wrapped in a markdown fence"""
        text = 'Here you go:\n```json\n{"elements": [{"type": "action", "text": "Rain."}]}\n```\nEnjoy.'

        assert extract_elements_json(text) == '{"elements": [{"type": "action", "text": "Rain."}]}'
        assert [e.type for e in parse_screenplay_elements(text)] == [ScreenplayElementType.ACTION]

    def test_surrounding_commentary(self):
        """Test the braced span is extracted from chatter"""
        text = 'Sure! {"elements": [{"type": "shot", "text": "CLOSE ON: the kettle"}]} Hope that helps.'

        elements = parse_screenplay_elements(text)

        assert [(e.type, e.text) for e in elements] == [(ScreenplayElementType.SHOT, "CLOSE ON: the kettle")]

    def test_unknown_types_and_blank_text_are_dropped(self):
        """Test only known element types with text survive"""
        text = (
            '{"elements": [{"type": "montage", "text": "Years pass."}, '
            '{"type": "action", "text": "   "}, "stray", '
            '{"type": "transition", "text": "CUT TO:"}]}'
        )

        elements = parse_screenplay_elements(text)

        assert [(e.type, e.text) for e in elements] == [(ScreenplayElementType.TRANSITION, "CUT TO:")]

    def test_truncated_output_is_recovered(self):
        """Test complete elements are salvaged from output cut off mid-array"""
        text = (
            '{"elements": [{"type": "action", "text": "She says \\"no\\".\\nThen waits."}, '
            '{"type": "character", "text": "JONAS"}, {"type": "dialogue", "text": "Wh'
        )

        elements = parse_screenplay_elements(text)

        assert [(e.type, e.text) for e in elements] == [
            (ScreenplayElementType.ACTION, 'She says "no".\nThen waits.'),
            (ScreenplayElementType.CHARACTER, "JONAS"),
        ]

    def test_missing_elements_array(self):
        """Test JSON without an elements array yields nothing"""
        assert parse_screenplay_elements('{"scenes": []}') == []
        assert parse_screenplay_elements('[{"type": "action", "text": "Rain."}]') == []

    def test_prose_yields_nothing(self):
        """Test ordinary text is not mistaken for elements"""
        assert parse_screenplay_elements("MAYA\nNot tonight.") == []
