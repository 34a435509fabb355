"""CLI interface for scenegate"""

import asyncio
import json
import logging
import re
import yaml
from pathlib import Path
from typing import List, Optional, Tuple
import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from pydantic import ValidationError

from scenegate.models import (
    CharacterInfo,
    EligibilityStatus,
    GatingTunables,
    PipelineResult,
    PipelineStage,
    SceneContext,
    StoryFacts,
    WritingCommand,
    WritingRequest,
)
from scenegate.gating import apply_constraints, build_constraint_prompt_section
from scenegate.llm import OllamaClient, LLMWritingGenerator
from scenegate.orchestrator import GatedWritingPipeline


console = Console()

STATUS_STYLES = {
    EligibilityStatus.ELIGIBLE: "green",
    EligibilityStatus.PRESENT_PASSIVE: "yellow",
    EligibilityStatus.AVAILABLE_DELAYED: "cyan",
    EligibilityStatus.EXCLUDED: "red",
}


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.yaml"""
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "config.yaml"
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_structured_file(path: Path):
    """Read a YAML or JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def create_llm_provider(config: dict) -> OllamaClient:
    """Create LLM provider from config"""
    llm_config = config.get("llm", {})
    return OllamaClient(
        model=llm_config.get("model", "llama3.1:8b"),
        base_url=llm_config.get("base_url", "http://localhost:11434"),
        timeout=llm_config.get("timeout", 300)
    )


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def build_roster(names: Tuple[str, ...], roster_file: Optional[Path]) -> List[CharacterInfo]:
    """Roster from --roster (list of {id, name}) plus any --character names"""
    roster = []
    try:
        if roster_file:
            for entry in load_structured_file(roster_file) or []:
                roster.append(CharacterInfo(**entry))
        known = {c.name.upper() for c in roster}
        for name in names:
            if name.upper() not in known:
                roster.append(CharacterInfo(id=slugify(name), name=name))
                known.add(name.upper())
    except ValidationError as e:
        raise click.BadParameter(f"Invalid roster entry: {e}")
    return roster


def build_request(
    script: Path,
    command: WritingCommand,
    characters: Tuple[str, ...],
    roster_file: Optional[Path],
    scene_heading: Optional[str],
    in_scene: Tuple[str, ...],
    template: str
) -> WritingRequest:
    scene_context = None
    if scene_heading or in_scene:
        scene_context = SceneContext(scene_heading=scene_heading, characters_in_scene=list(in_scene))

    return WritingRequest(
        command=command,
        context=script.read_text(encoding="utf-8"),
        characters=build_roster(characters, roster_file),
        template_type=template,
        document_title=script.stem,
        scene_context=scene_context
    )


def print_result(result: PipelineResult):
    """Render a pipeline result with rich"""
    state = result.scene_state
    if state:
        console.print(Panel(
            f"[bold]Act:[/bold] {state.act.value}   [bold]Phase:[/bold] {state.phase.value}   "
            f"[bold]Focus:[/bold] {state.focus.value}   [bold]Confidence:[/bold] {state.confidence:.2f}\n"
            f"[dim]{state.reasoning}[/dim]\n\n"
            f"[bold]Allowed:[/bold] {', '.join(c.value for c in state.allowed_contributions)}",
            title="Scene State",
            border_style="blue"
        ))

        if state.exclusions:
            table = Table(title="Exclusions")
            table.add_column("Type", style="red")
            table.add_column("Target")
            table.add_column("Reason", style="dim")
            for exclusion in state.exclusions:
                table.add_row(exclusion.type.value, exclusion.target or "-", exclusion.reason)
            console.print(table)

    if result.eligibility:
        table = Table(title="Character Eligibility")
        table.add_column("Character", style="bold")
        table.add_column("Status")
        table.add_column("Lead")
        table.add_column("Scenes")
        table.add_column("Reason", style="dim")
        for entry in result.eligibility:
            style = STATUS_STYLES[entry.status]
            table.add_row(
                entry.name,
                f"[{style}]{entry.status.value}[/{style}]",
                "✓" if entry.is_lead else "",
                str(entry.scene_appearance_count),
                entry.reason
            )
        console.print(table)

    if result.gate_reason:
        colour = "green" if result.gate_passed else "yellow"
        label = "Gate passed" if result.gate_passed else "Declined"
        body = result.gate_reason
        if result.suggestion:
            body += f"\n\n[bold]{result.suggestion}[/bold]"
        console.print(Panel(body, title=label, border_style=colour))


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def script_options(func):
    """Options shared by every command that reads a script"""
    options = [
        click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
        click.option("--character", "characters", multiple=True, help="Roster character name (repeatable)"),
        click.option("--roster", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                      help="YAML/JSON list of {id, name}"),
        click.option("--scene-heading", type=str, help="Heading of the scene being written"),
        click.option("--in-scene", multiple=True, help="Character present in the current scene (repeatable)"),
        click.option("--facts", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                     help="Story facts YAML/JSON from the extraction service"),
        click.option("--template", default="screenplay", show_default=True, help="Document template type"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Show pipeline logging")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """scenegate - decide what an AI writing partner may contribute next"""
    configure_logging(verbose)
    config = load_config(config_path)
    ctx.obj = {
        "config": config,
        "tunables": GatingTunables(**(config.get("gating") or {})),
    }


def _pipeline(ctx: click.Context) -> GatedWritingPipeline:
    return GatedWritingPipeline(tunables=ctx.obj["tunables"])


def _facts(path: Optional[Path]) -> Optional[StoryFacts]:
    if path is None:
        return None
    return StoryFacts.model_validate(load_structured_file(path) or {})


COMMAND_CHOICE = click.Choice([c.value for c in WritingCommand])


@main.command()
@script_options
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def classify(ctx, script, characters, roster, scene_heading, in_scene, facts, template, as_json):
    """Classify the current scene and derive character eligibility"""
    request = build_request(
        script, WritingCommand.CONTINUE,
        characters, roster, scene_heading, in_scene, template
    )
    scene_state, eligibility = _pipeline(ctx).constrain(request, _facts(facts))
    result = PipelineResult(stage=PipelineStage.CONSTRAINED, scene_state=scene_state, eligibility=eligibility)

    if as_json:
        click.echo(result.model_dump_json(indent=2, exclude_none=True))
        return
    print_result(result)


@main.command()
@script_options
@click.option("--command", "command", type=COMMAND_CHOICE, required=True, help="Writing command to evaluate")
@click.pass_context
def gate(ctx, script, characters, roster, scene_heading, in_scene, facts, template, command):
    """Evaluate the generation gate without calling a model"""
    request = build_request(
        script, WritingCommand(command), characters, roster, scene_heading, in_scene, template
    )
    result = _pipeline(ctx).preview(request, _facts(facts))
    print_result(result)

    if result.gate_passed and result.envelope:
        constrained = apply_constraints(request, result.envelope)
        console.print(Panel(
            build_constraint_prompt_section(result.envelope),
            title=f"Constraint block ({len(constrained.characters)} characters forwarded)",
            border_style="magenta"
        ))


@main.command()
@script_options
@click.option("--command", "command", type=COMMAND_CHOICE, required=True, help="Writing command to run")
@click.option("--override", is_flag=True, help="Skip the gate; constraints are still applied")
@click.pass_context
def generate(ctx, script, characters, roster, scene_heading, in_scene, facts, template, command, override):
    """Run the full gated pipeline against the configured model"""
    config = ctx.obj["config"]
    request = build_request(
        script, WritingCommand(command), characters, roster, scene_heading, in_scene, template
    )
    story_facts = _facts(facts)

    async def _run() -> PipelineResult:
        llm_provider = create_llm_provider(config)
        generator = LLMWritingGenerator(
            llm_provider,
            temperature=config.get("llm", {}).get("temperature", 0.7)
        )
        pipeline = GatedWritingPipeline(generator, tunables=ctx.obj["tunables"])
        try:
            return await pipeline.run(request, story_facts=story_facts, force_override=override)
        finally:
            await llm_provider.close()

    result = asyncio.run(_run())
    print_result(result)

    if result.generation:
        console.print(Panel(result.generation.text, title="Generated", border_style="green"))
    elif result.generation_error:
        console.print(f"[red]Generation failed: {result.generation_error}[/red]")
        ctx.exit(1)


if __name__ == "__main__":
    main()
