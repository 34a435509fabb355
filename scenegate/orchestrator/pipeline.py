"""Gated writing pipeline - classify, constrain, gate, then generate

Stages:
1. CLASSIFY  - label the moment with act, phase, focus and exclusions
2. CONSTRAIN - derive character eligibility
3. GATE      - decide whether generation should happen at all
4. GENERATE  - call the generator with the constraint envelope applied

A decline returns immediately but still carries the classification and
eligibility computed so far.
"""

import logging
from typing import List, Optional, Tuple

from scenegate.models import (
    CharacterEligibility,
    EligibilityStatus,
    GateEvaluation,
    GatingTunables,
    PipelineResult,
    PipelineStage,
    SceneState,
    StoryFacts,
    WritingRequest,
    DEFAULT_TUNABLES,
    count_by_status,
)
from scenegate.parser import ScriptFormat, DEFAULT_SCRIPT_FORMAT, build_usage_history
from scenegate.gating import (
    classify_from_context,
    derive_character_eligibility,
    evaluate_generation_gate,
    build_constraint_envelope,
    apply_constraints,
)
from scenegate.llm import WritingGenerator

logger = logging.getLogger(__name__)


class GatedWritingPipeline:
    """Runs the pre-generation gating stages and the single generation call"""

    def __init__(
        self,
        generator: Optional[WritingGenerator] = None,
        tunables: Optional[GatingTunables] = None,
        script_format: Optional[ScriptFormat] = None
    ):
        """
        Args:
            generator: Generation backend, called at most once per run; only needed by run()
            tunables: Heuristic constants
            script_format: Script text conventions
        """
        self.generator = generator
        self.tunables = tunables or DEFAULT_TUNABLES
        self.script_format = script_format or DEFAULT_SCRIPT_FORMAT

    def constrain(
        self,
        request: WritingRequest,
        story_facts: Optional[StoryFacts] = None
    ) -> Tuple[SceneState, List[CharacterEligibility]]:
        """Classify the moment and derive eligibility for the roster"""
        usage_history = build_usage_history(
            request.context,
            request.characters,
            script_format=self.script_format,
            tunables=self.tunables
        )

        scene_state = classify_from_context(
            request.context,
            request.scene_context,
            story_facts,
            usage_history,
            script_format=self.script_format,
            tunables=self.tunables
        )
        logger.info(
            f"Classification: Act {scene_state.act.value} | {scene_state.phase.value} | "
            f"{scene_state.focus.value} | confidence: {scene_state.confidence:.2f}"
        )
        logger.info(f"Exclusions: {len(scene_state.exclusions)}")
        logger.info(f"Allowed: {', '.join(c.value for c in scene_state.allowed_contributions)}")

        eligibility = derive_character_eligibility(
            scene_state,
            request.characters,
            usage_history,
            request.scene_context,
            tunables=self.tunables
        )
        counts = count_by_status(eligibility)
        logger.info(
            f"Eligibility: {counts[EligibilityStatus.ELIGIBLE]} eligible, "
            f"{counts[EligibilityStatus.PRESENT_PASSIVE]} passive, "
            f"{counts[EligibilityStatus.AVAILABLE_DELAYED]} delayed, "
            f"{counts[EligibilityStatus.EXCLUDED]} excluded"
        )

        return scene_state, eligibility

    def _declined(
        self,
        scene_state: SceneState,
        eligibility: List[CharacterEligibility],
        gate: GateEvaluation
    ) -> PipelineResult:
        logger.info(f"Gate DECLINED: {gate.reason}")
        suggestion = None
        if gate.suggested_alternative:
            suggestion = f'Consider using "{gate.suggested_alternative.value}" instead'
        return PipelineResult(
            stage=PipelineStage.DECLINED,
            scene_state=scene_state,
            eligibility=eligibility,
            gate_passed=False,
            gate_reason=gate.reason,
            suggestion=suggestion,
            suggested_alternative=gate.suggested_alternative
        )

    def preview(
        self,
        request: WritingRequest,
        story_facts: Optional[StoryFacts] = None
    ) -> PipelineResult:
        """Run every stage except generation"""
        scene_state, eligibility = self.constrain(request, story_facts)
        gate = evaluate_generation_gate(scene_state, request.command, eligibility)
        if not gate.should_generate:
            return self._declined(scene_state, eligibility, gate)

        return PipelineResult(
            stage=PipelineStage.GATED,
            scene_state=scene_state,
            eligibility=eligibility,
            gate_passed=True,
            gate_reason=gate.reason,
            envelope=build_constraint_envelope(scene_state, eligibility)
        )

    async def run(
        self,
        request: WritingRequest,
        story_facts: Optional[StoryFacts] = None,
        force_override: bool = False
    ) -> PipelineResult:
        """
        Run the full gated pipeline

        Args:
            request: The writing request as issued by the editor
            story_facts: Extracted story facts, if available
            force_override: Skip the gate but still apply the constraint envelope

        Returns:
            PipelineResult with the full chain of reasoning
        """
        logger.info(f"Starting pipeline for command: {request.command.value}")

        scene_state, eligibility = self.constrain(request, story_facts)

        gate_reason = None
        if force_override:
            logger.info("Gate OVERRIDDEN by writer")
        else:
            gate = evaluate_generation_gate(scene_state, request.command, eligibility)
            if not gate.should_generate:
                return self._declined(scene_state, eligibility, gate)
            gate_reason = gate.reason
            logger.info(f"Gate PASSED: {gate.reason}")

        if self.generator is None:
            raise ValueError("GatedWritingPipeline.run requires a generator")

        envelope = build_constraint_envelope(scene_state, eligibility)
        constrained_request = apply_constraints(request, envelope)
        logger.info(
            f"Generating with {len(envelope.forbidden_actions)} forbidden actions, "
            f"{len(envelope.excluded_characters)} excluded characters"
        )

        generation = await self.generator.generate(constrained_request)

        result = PipelineResult(
            stage=PipelineStage.GENERATED,
            scene_state=scene_state,
            eligibility=eligibility,
            gate_passed=True,
            gate_reason=gate_reason,
            gate_overridden=force_override,
            envelope=envelope
        )
        if generation.failed:
            logger.warning(f"Generation returned an error: {generation.error}")
            result.generation_error = generation.error
        else:
            result.generation = generation
        return result


async def run_gated_pipeline(
    request: WritingRequest,
    generator: WritingGenerator,
    story_facts: Optional[StoryFacts] = None,
    force_override: bool = False,
    tunables: Optional[GatingTunables] = None
) -> PipelineResult:
    """Run the gated pipeline once with a fresh GatedWritingPipeline"""
    pipeline = GatedWritingPipeline(generator, tunables=tunables)
    return await pipeline.run(request, story_facts=story_facts, force_override=force_override)
