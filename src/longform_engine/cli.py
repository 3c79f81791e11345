"""Command-line interface using Typer."""

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from longform_engine import __version__
from longform_engine.logging import setup_logging

# Setup logging
setup_logging()

app = typer.Typer(
    name="longform-engine",
    help="Longform Engine - chunked long-video rendering CLI",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Longform Engine v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Longform Engine - plan, route and render long marketing videos."""
    pass


def _load_props(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Cannot read props file {path}: {e}[/bold red]")
        raise typer.Exit(code=1)

    if isinstance(data, list):
        data = {"scenes": data}
    if not isinstance(data, dict):
        console.print("[bold red]Props file must hold an object or a list of scenes[/bold red]")
        raise typer.Exit(code=1)
    return data


@app.command()
def plan(
    props_file: Path = typer.Argument(..., help="JSON file with composition props or a scene list"),
    max_chunk: Optional[float] = typer.Option(
        None, "--max", "-m", help="Maximum chunk duration in seconds"
    ),
    fps: Optional[int] = typer.Option(None, "--fps", help="Override the props frame rate"),
) -> None:
    """Show how a video would be split into render chunks."""
    from longform_engine.config import settings
    from longform_engine.domain.render_request import CompositionProps
    from longform_engine.services.chunk_planner import ChunkPlanner

    props = CompositionProps.from_dict(_load_props(props_file), default_fps=settings.default_fps)
    planner = ChunkPlanner(max_chunk_duration_seconds=max_chunk)

    try:
        chunks = planner.plan(props.scenes, fps or props.fps)
    except ValueError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Chunk Plan ({props.total_duration_seconds:.1f}s)")
    table.add_column("Chunk", style="cyan")
    table.add_column("Frames")
    table.add_column("Time")
    table.add_column("Duration")
    table.add_column("Scenes")

    for chunk in chunks:
        table.add_row(
            str(chunk.chunk_index + 1),
            f"{chunk.start_frame}-{chunk.end_frame}",
            f"{chunk.start_time_seconds:.1f}s-{chunk.end_time_seconds:.1f}s",
            f"{chunk.duration_seconds:.1f}s",
            ", ".join(s.scene.id for s in chunk.scenes),
        )

    console.print(table)
    if planner.should_chunk(props.scenes):
        console.print(f"[green]Chunked rendering: {len(chunks)} chunks[/green]")
    else:
        console.print("[dim]Below the chunk threshold; rendered as a single unit[/dim]")


@app.command()
def route(
    visual_direction: str = typer.Argument(..., help="Scene visual direction"),
    scene_type: str = typer.Option("b-roll", "--scene-type", "-s", help="Scene type"),
    preferred: Optional[str] = typer.Option(
        None, "--preferred", "-p", help="Preferred backend id"
    ),
) -> None:
    """Recommend a generation backend for a visual direction."""
    from longform_engine.domain.enums import SceneType
    from longform_engine.services.provider_router import ProviderRouter

    try:
        parsed_type = SceneType(scene_type)
    except ValueError:
        console.print(f"[bold red]Unknown scene type: {scene_type}[/bold red]")
        raise typer.Exit(code=1)

    router = ProviderRouter()
    decision = router.route(visual_direction, parsed_type, preferred)
    complexity = decision.complexity

    console.print(Panel.fit(
        f"[bold]{router.catalog.display_name(decision.recommended_provider)}[/bold] "
        f"({decision.recommended_provider})\n\n"
        f"[cyan]Confidence:[/cyan] {decision.confidence:.0%}\n"
        f"[cyan]Complexity:[/cyan] {complexity.category} ({complexity.score:.2f})\n"
        + "\n".join(f"  - {r}" for r in decision.reasoning),
        title="Routing Decision",
        border_style="green",
    ))

    if decision.alternatives:
        table = Table(title="Alternatives")
        table.add_column("Backend", style="cyan")
        table.add_column("Reason")
        for alt in decision.alternatives:
            table.add_row(alt.provider, alt.reason)
        console.print(table)

    for warning in decision.warnings:
        console.print(f"[bold yellow]Warning: {warning}[/bold yellow]")


@app.command()
def strategy(
    visual_direction: str = typer.Argument(..., help="Scene visual direction"),
    tried: Optional[list[str]] = typer.Option(
        None, "--tried", "-t", help="Backend of a failed attempt (repeat in order)"
    ),
    issue: Optional[list[str]] = typer.Option(
        None, "--issue", "-i", help="Issue reported on every failed attempt"
    ),
    last_partial: bool = typer.Option(
        False, "--last-partial", help="The most recent attempt was close to acceptable"
    ),
    media_url: Optional[str] = typer.Option(
        None, "--media-url", help="URL of the latest usable artifact"
    ),
) -> None:
    """Show the next regeneration strategy for a scene's attempt history."""
    from longform_engine.domain.enums import AttemptOutcome
    from longform_engine.domain.models import RegenerationAttempt
    from longform_engine.services.complexity import ComplexityAnalyzer
    from longform_engine.services.regeneration import (
        RegenerationStrategyEngine,
        StrategyContext,
    )

    providers = tried or []
    attempts = [
        RegenerationAttempt(
            attempt_number=i + 1,
            provider=provider,
            prompt=visual_direction,
            result=AttemptOutcome.FAILURE,
            issues=list(issue or []),
        )
        for i, provider in enumerate(providers)
    ]
    if attempts and last_partial:
        attempts[-1].result = AttemptOutcome.PARTIAL

    engine = RegenerationStrategyEngine()
    decision = engine.determine_strategy(
        StrategyContext(
            attempts=attempts,
            complexity=ComplexityAnalyzer().analyze(visual_direction),
            current_prompt=visual_direction,
            current_media_url=media_url,
        )
    )
    changes = decision.changes

    table = Table(title=f"Attempt {len(attempts) + 1} Strategy")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Approach", str(decision.approach))
    table.add_row("Confidence", f"{decision.confidence:.0%}")
    table.add_row("Backend", changes.provider or "-")
    table.add_row("Prompt", changes.prompt or "(unchanged)")
    table.add_row("Reference", changes.reference_url if changes.use_reference else "-")
    if changes.motion_settings:
        table.add_row(
            "Motion", f"{changes.motion_settings.style} / {changes.motion_settings.intensity}"
        )
    table.add_row("Reasoning", decision.reasoning)
    console.print(table)

    if decision.warning:
        console.print(f"[bold yellow]Warning: {decision.warning}[/bold yellow]")
    console.print(f"[dim]{engine.next_suggestion(decision)}[/dim]")


@app.command()
def render(
    props_file: Path = typer.Argument(..., help="JSON file with composition props"),
    project_id: str = typer.Option(..., "--project-id", "-p", help="Project id for output naming"),
    composition: Optional[str] = typer.Option(
        None, "--composition", "-c", help="Composition id to render"
    ),
    local: bool = typer.Option(
        False, "--local", help="Render in this process instead of enqueueing a job"
    ),
    wait: bool = typer.Option(False, "--wait", "-w", help="Wait for the queued render"),
) -> None:
    """Render a video, chunked when it exceeds the chunk threshold.

    Example:
        longform-engine render props.json --project-id demo --local
    """
    input_props = _load_props(props_file)

    if local:
        _render_locally(project_id, input_props, composition)
        return

    try:
        from longform_engine.jobs.render_tasks import render_long_video_task

        result = render_long_video_task.delay(
            project_id=project_id,
            input_props=input_props,
            composition_id=composition,
        )
        console.print(f"[green]Render enqueued: {result.id}[/green]")

        if wait:
            with console.status("[bold green]Rendering...", spinner="dots"):
                task_result = result.get(timeout=3600)

            if task_result.get("success"):
                console.print("[bold green]Render completed successfully![/bold green]")
                console.print(f"  {task_result.get('url')}")
            else:
                console.print(f"[bold red]Render failed: {task_result.get('error')}[/bold red]")
                raise typer.Exit(code=1)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)


def _render_locally(project_id: str, input_props: dict[str, Any], composition: str | None) -> None:
    from longform_engine.config import settings
    from longform_engine.domain.models import RenderProgress
    from longform_engine.domain.render_request import CompositionProps
    from longform_engine.exceptions import LongformEngineError
    from longform_engine.services.render_orchestrator import RenderOrchestrator
    from longform_engine.utils.async_utils import run_async

    props = CompositionProps.from_dict(input_props, default_fps=settings.default_fps)

    with console.status("[bold green]Preparing...", spinner="dots") as status:

        def on_progress(progress: RenderProgress) -> None:
            status.update(f"[bold green]{progress.overall_percent}% {progress.message}")

        try:
            url = run_async(
                RenderOrchestrator().render_video(project_id, props, composition, on_progress)
            )
        except (LongformEngineError, ValueError) as e:
            console.print(f"[bold red]Render failed: {e}[/bold red]")
            raise typer.Exit(code=1)

    console.print("[bold green]Render completed successfully![/bold green]")
    console.print(f"  {url}")


if __name__ == "__main__":
    app()
