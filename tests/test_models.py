"""Tests for Pydantic models"""

import pytest
from pydantic import ValidationError

from scenegate.models import (
    ActPosition,
    NarrativePhase,
    SceneFocus,
    ContributionType,
    ExclusionType,
    SceneExclusion,
    ClassificationSignals,
    SceneState,
    CharacterInfo,
    CharacterUsageHistory,
    CharacterEligibility,
    EligibilityStatus,
    count_by_status,
    StoryFacts,
    WritingCommand,
    WritingRequest,
    WritingResponse,
    PipelineResult,
    PipelineStage,
    GatingTunables,
    LEAD_TARGET,
)


def test_enum_values_serialize_as_wire_strings():
    """Test enum values match the strings exchanged with the editor"""
    assert ActPosition.ACT_II_A.value == "II-A"
    assert EligibilityStatus.PRESENT_PASSIVE.value == "present-passive"
    assert ContributionType.NEGATIVE_SPACE.value == "negativeSpace"
    assert SceneFocus.WORLD_BUILDING.value == "world-building"
    assert WritingCommand("fixGrammar") == WritingCommand.FIX_GRAMMAR


def test_scene_state_always_allows_question():
    """Test question is inserted when missing"""
    state = SceneState(
        act=ActPosition.ACT_I,
        phase=NarrativePhase.SETUP,
        focus=SceneFocus.WORLD_BUILDING,
        allowed_contributions=[ContributionType.TEXTURE]
    )

    assert state.allowed_contributions[0] == ContributionType.QUESTION
    assert state.allows(ContributionType.TEXTURE)
    assert not state.allows(ContributionType.ACTION)


def test_scene_state_deduplicates_contributions():
    """Test allowed contributions keep first-seen order without duplicates"""
    state = SceneState(
        act=ActPosition.ACT_II_A,
        phase=NarrativePhase.ESCALATION,
        focus=SceneFocus.CONFLICT,
        allowed_contributions=[
            ContributionType.QUESTION,
            ContributionType.DIALOGUE,
            ContributionType.TEXTURE,
            ContributionType.DIALOGUE,
        ]
    )

    assert state.allowed_contributions == [
        ContributionType.QUESTION,
        ContributionType.DIALOGUE,
        ContributionType.TEXTURE,
    ]


def test_scene_state_summary():
    """Test one-line summary used in the constraint block"""
    state = SceneState(
        act=ActPosition.ACT_III,
        phase=NarrativePhase.RELEASE,
        focus=SceneFocus.THEME,
        reasoning="Act III: 50 scenes deep"
    )

    assert state.summary() == "Act III | release phase | theme focus | Act III: 50 scenes deep"


def test_scene_state_confidence_bounds():
    """Test confidence is limited to [0, 1]"""
    with pytest.raises(ValidationError):
        SceneState(
            act=ActPosition.ACT_I,
            phase=NarrativePhase.SETUP,
            focus=SceneFocus.THEME,
            confidence=1.5
        )


def test_character_exclusions_filter():
    """Test only character-type exclusions are returned"""
    state = SceneState(
        act=ActPosition.ACT_I,
        phase=NarrativePhase.SETUP,
        focus=SceneFocus.WORLD_BUILDING,
        exclusions=[
            SceneExclusion(type=ExclusionType.RESOLUTION, reason="r"),
            SceneExclusion(type=ExclusionType.CHARACTER, target=LEAD_TARGET, reason="c"),
        ]
    )

    assert [e.target for e in state.character_exclusions()] == [LEAD_TARGET]


def test_exclusion_format_forbidden():
    """Test forbidden-action rendering with and without a target"""
    with_target = SceneExclusion(type=ExclusionType.ACTION, target="new-conflict", reason="winding down")
    without_target = SceneExclusion(type=ExclusionType.RESOLUTION, reason="still building")

    assert with_target.format_forbidden() == "action: new-conflict (winding down)"
    assert without_target.format_forbidden() == "resolution (still building)"


def test_classification_signals_are_frozen():
    """Test signals cannot be modified after extraction"""
    signals = ClassificationSignals(total_scene_count=4)

    with pytest.raises(ValidationError):
        signals.total_scene_count = 5


def test_usage_history_properties():
    """Test appearance count and last appearance"""
    usage = CharacterUsageHistory(character_id="c1", name="Maya", appears_in_scenes=[1, 4, 7])
    unseen = CharacterUsageHistory(character_id="c2", name="Jonas")

    assert usage.appearance_count == 3
    assert usage.last_appearance_scene == 7
    assert unseen.appearance_count == 0
    assert unseen.last_appearance_scene == 0
    assert unseen.first_appearance_scene == 999


def test_character_name_is_stripped_and_required():
    """Test roster names are trimmed and blank names are rejected"""
    assert CharacterInfo(id="m", name="  Maya \n").name == "Maya"

    for blank in ("", "   ", "\t\r\n"):
        with pytest.raises(ValidationError):
            CharacterInfo(id="x", name=blank)


def test_eligibility_can_drive():
    """Test only eligible and present-passive characters can carry a beat"""
    def entry(status):
        return CharacterEligibility(character_id="c", name="C", status=status, reason="r")

    assert entry(EligibilityStatus.ELIGIBLE).can_drive
    assert entry(EligibilityStatus.PRESENT_PASSIVE).can_drive
    assert not entry(EligibilityStatus.AVAILABLE_DELAYED).can_drive
    assert not entry(EligibilityStatus.EXCLUDED).can_drive


def test_story_facts_accepts_camel_case():
    """Test story facts load from the extraction service's camelCase payload"""
    facts = StoryFacts.model_validate({
        "characters": [{
            "characterId": "c1",
            "name": "Maya",
            "currentWants": ["find her brother"],
            "relationshipStates": [{"with": "Jonas", "state": "wary distrust", "scene": "3"}],
        }],
        "timeline": [{"sceneNumber": 1, "timeOfDay": "NIGHT"}],
        "openPromises": ["Who sent the letter?"],
    })

    assert facts.characters[0].character_id == "c1"
    assert facts.characters[0].relationship_states[0].with_character == "Jonas"
    assert facts.timeline[0].scene_number == 1
    assert facts.open_promises == ["Who sent the letter?"]
    assert facts.established_rules == []


def test_story_facts_accepts_snake_case():
    """Test story facts also load by field name"""
    facts = StoryFacts(open_promises=["a"], established_rules=["b"])

    assert facts.open_promises == ["a"]
    assert facts.established_rules == ["b"]


def test_writing_request_is_screenplay():
    """Test screenplay detection by template type"""
    assert WritingRequest(command=WritingCommand.CONTINUE, template_type="screenplay").is_screenplay
    assert not WritingRequest(command=WritingCommand.CONTINUE, template_type="journal").is_screenplay
    assert not WritingRequest(command=WritingCommand.CONTINUE).is_screenplay


def test_writing_response_failed():
    """Test failure flag follows the error field"""
    assert WritingResponse(error="boom").failed
    assert not WritingResponse(text="INT. KITCHEN - DAY").failed


def test_pipeline_result_eligibility_counts():
    """Test per-status counts include zero entries"""
    result = PipelineResult(
        stage=PipelineStage.CONSTRAINED,
        eligibility=[
            CharacterEligibility(character_id="a", name="A", status=EligibilityStatus.ELIGIBLE, reason="r"),
            CharacterEligibility(character_id="b", name="B", status=EligibilityStatus.ELIGIBLE, reason="r"),
            CharacterEligibility(character_id="c", name="C", status=EligibilityStatus.EXCLUDED, reason="r"),
        ]
    )

    counts = result.eligibility_counts()
    assert counts[EligibilityStatus.ELIGIBLE] == 2
    assert counts[EligibilityStatus.EXCLUDED] == 1
    assert counts[EligibilityStatus.AVAILABLE_DELAYED] == 0
    assert PipelineResult(stage=PipelineStage.DECLINED).eligibility_counts()[EligibilityStatus.ELIGIBLE] == 0


def test_count_by_status():
    """Test the shared per-status tally accepts any iterable"""
    entries = (
        CharacterEligibility(character_id=c, name=c, status=EligibilityStatus.PRESENT_PASSIVE, reason="r")
        for c in "ab"
    )

    counts = count_by_status(entries)

    assert counts == {
        EligibilityStatus.ELIGIBLE: 0,
        EligibilityStatus.PRESENT_PASSIVE: 2,
        EligibilityStatus.AVAILABLE_DELAYED: 0,
        EligibilityStatus.EXCLUDED: 0,
    }


def test_gating_tunables_defaults_and_overrides():
    """Test tunables keep the rule-set defaults and accept config values"""
    defaults = GatingTunables()
    assert defaults.lead_dominance_margin == 1.3
    assert defaults.overuse_ratio == 0.6
    assert defaults.act_thresholds == (8, 15, 30, 45)

    tuned = GatingTunables(**{"overuse_ratio": 0.5, "act_thresholds": [10, 20, 40, 60]})
    assert tuned.overuse_ratio == 0.5
    assert tuned.act_thresholds == (10, 20, 40, 60)
    assert tuned.lead_dominance_margin == 1.3
