"""Tests for the generation gate"""

import pytest

from scenegate.models import (
    ActPosition,
    NarrativePhase,
    SceneFocus,
    ContributionType,
    SceneState,
    CharacterEligibility,
    EligibilityStatus,
    WritingCommand,
)
from scenegate.gating import (
    COMMAND_CONTRIBUTIONS,
    REVISION_COMMANDS,
    evaluate_generation_gate,
    command_contribution,
    suggest_alternative,
)


def make_state(phase=NarrativePhase.ESCALATION, allowed=None):
    if allowed is None:
        allowed = [
            ContributionType.QUESTION,
            ContributionType.TEXTURE,
            ContributionType.NEGATIVE_SPACE,
            ContributionType.TENSION,
            ContributionType.DIALOGUE,
            ContributionType.ACTION,
        ]
    return SceneState(
        act=ActPosition.ACT_II_A,
        phase=phase,
        focus=SceneFocus.CONFLICT,
        allowed_contributions=allowed,
        reasoning="Act II-A: | 10 scenes deep"
    )


def entry(name, status):
    return CharacterEligibility(character_id=name.lower(), name=name, status=status, reason="r")


ELIGIBLE_ROSTER = [entry("Maya", EligibilityStatus.ELIGIBLE)]
BLOCKED_ROSTER = [
    entry("Maya", EligibilityStatus.EXCLUDED),
    entry("Jonas", EligibilityStatus.AVAILABLE_DELAYED),
]


class TestCommandTable:
    """Test the command to contribution mapping"""

    def test_every_command_is_mapped(self):
        """Test no command can fall through the table"""
        assert set(COMMAND_CONTRIBUTIONS) == set(WritingCommand)

    @pytest.mark.parametrize("command,expected", [
        (WritingCommand.CONTINUE, ContributionType.ACTION),
        (WritingCommand.DIALOGUE, ContributionType.DIALOGUE),
        (WritingCommand.SETTING, ContributionType.TEXTURE),
        (WritingCommand.NEGATIVE_SPACE, ContributionType.NEGATIVE_SPACE),
        (WritingCommand.TENSION, ContributionType.TENSION),
        (WritingCommand.SCRIPT_DOCTOR, ContributionType.QUESTION),
    ])
    def test_mapping(self, command, expected):
        """Test representative mappings"""
        assert command_contribution(command) == expected

    def test_tension_is_not_revision(self):
        """Test the tension beat is gated like any generative command"""
        assert WritingCommand.TENSION not in REVISION_COMMANDS


class TestRevisionCommands:
    """Revision commands refine existing text and always proceed"""

    @pytest.mark.parametrize("command", sorted(REVISION_COMMANDS, key=lambda c: c.value))
    @pytest.mark.parametrize("phase", list(NarrativePhase))
    def test_revision_always_passes(self, command, phase):
        """Test revision commands pass in every phase with nothing allowed and nobody eligible"""
        state = make_state(phase=phase, allowed=[ContributionType.QUESTION])

        result = evaluate_generation_gate(state, command, BLOCKED_ROSTER)

        assert result.should_generate is True
        assert result.suggested_alternative is None


class TestDeclines:
    """Gate declines carry a reason and an alternative"""

    def test_tension_during_release(self):
        """Test tension is declined in the release phase"""
        state = make_state(phase=NarrativePhase.RELEASE)

        result = evaluate_generation_gate(state, WritingCommand.TENSION, ELIGIBLE_ROSTER)

        assert result.should_generate is False
        assert result.suggested_alternative == ContributionType.NEGATIVE_SPACE
        assert "release phase" in result.reason

    @pytest.mark.parametrize("command", [
        WritingCommand.DIALOGUE,
        WritingCommand.CONTINUE,
        WritingCommand.EXPAND,
        WritingCommand.POV,
    ])
    def test_no_character_can_drive(self, command):
        """Test character-driven commands need an eligible or present character"""
        result = evaluate_generation_gate(make_state(), command, BLOCKED_ROSTER)

        assert result.should_generate is False
        assert "No characters are eligible" in result.reason
        assert result.suggested_alternative == ContributionType.TEXTURE

    def test_no_character_check_precedes_allowed_check(self):
        """Test the roster decline applies even when the contribution is not allowed"""
        state = make_state(allowed=[ContributionType.QUESTION, ContributionType.TEXTURE])

        result = evaluate_generation_gate(state, WritingCommand.DIALOGUE, BLOCKED_ROSTER)

        assert "No characters are eligible" in result.reason

    def test_passive_character_can_drive(self):
        """Test present-passive characters keep character-driven commands open"""
        roster = BLOCKED_ROSTER + [entry("Priya", EligibilityStatus.PRESENT_PASSIVE)]

        assert evaluate_generation_gate(make_state(), WritingCommand.DIALOGUE, roster).should_generate is True

    def test_contribution_not_allowed(self):
        """Test commands whose contribution the phase does not allow"""
        state = make_state(
            phase=NarrativePhase.SETUP,
            allowed=[
                ContributionType.QUESTION,
                ContributionType.TEXTURE,
                ContributionType.NEGATIVE_SPACE,
                ContributionType.DELAY,
            ]
        )

        result = evaluate_generation_gate(state, WritingCommand.CONTINUE, ELIGIBLE_ROSTER)

        assert result.should_generate is False
        assert result.reason.startswith('"continue" maps to "action" which is not allowed in the current setup phase')
        assert result.suggested_alternative == ContributionType.TEXTURE


class TestProceed:
    """Gate passes"""

    def test_allowed_command(self):
        """Test an allowed contribution with an eligible character"""
        result = evaluate_generation_gate(make_state(), WritingCommand.DIALOGUE, ELIGIBLE_ROSTER)

        assert result.should_generate is True
        assert result.reason == '"dialogue" is appropriate for escalation phase with conflict focus'

    def test_empty_roster_skips_character_check(self):
        """Test an empty roster does not block character-driven commands"""
        assert evaluate_generation_gate(make_state(), WritingCommand.DIALOGUE, []).should_generate is True

    def test_analysis_commands_always_allowed(self):
        """Test question-type commands pass with nobody eligible"""
        state = make_state(allowed=[ContributionType.QUESTION])

        result = evaluate_generation_gate(state, WritingCommand.SCRIPT_DOCTOR, BLOCKED_ROSTER)

        assert result.should_generate is True


class TestSuggestAlternative:
    """Test alternative suggestions"""

    def test_first_non_question(self):
        """Test the first allowed contribution other than question"""
        state = make_state(allowed=[ContributionType.QUESTION, ContributionType.DELAY, ContributionType.TEXTURE])

        assert suggest_alternative(state) == ContributionType.DELAY

    def test_falls_back_to_question(self):
        """Test question is suggested when nothing else is allowed"""
        assert suggest_alternative(make_state(allowed=[ContributionType.QUESTION])) == ContributionType.QUESTION
