"""Command-line interface using Typer."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from storybeat import __version__
from storybeat.logging import setup_logging

# Setup logging
setup_logging()

app = typer.Typer(
    name="storybeat",
    help="Storybeat - topic to script, beats and visuals",
    add_completion=False,
)

projects_app = typer.Typer(help="Stored project commands")
app.add_typer(projects_app, name="projects")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Storybeat v{__version__}")
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
    verbose: bool = typer.Option(False, "--verbose", help="Log at DEBUG level."),
) -> None:
    """Storybeat - plan narrated videos from a topic."""
    if verbose:
        setup_logging(level="DEBUG")


def _read_script(script: Optional[str], file: Optional[Path]) -> str:
    if file is not None:
        return file.read_text(encoding="utf-8")
    if script:
        return script
    console.print("[bold red]Provide a script argument or --file[/bold red]")
    raise typer.Exit(code=1)


@app.command()
def segment(
    script: Optional[str] = typer.Argument(None, help="Script text"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the script from a file"),
    target: float = typer.Option(540, "--target", "-t", help="Target duration in seconds"),
) -> None:
    """Split a script into beats."""
    from storybeat.services.duration import estimate_beat_duration, format_duration
    from storybeat.services.segmenter import segment as segment_script

    text = _read_script(script, file)
    beats = segment_script(text, target)

    if not beats:
        console.print("[dim]No sentences found.[/dim]")
        return

    table = Table(title=f"Beats (target {format_duration(target)})")
    table.add_column("#", style="dim")
    table.add_column("Text", style="cyan")
    table.add_column("Est. Duration", justify="right")

    total = 0.0
    for index, beat in enumerate(beats, start=1):
        duration = estimate_beat_duration(beat)
        total += duration
        table.add_row(str(index), beat, f"{duration:.1f}s")

    console.print(table)
    console.print(f"[dim]{len(beats)} beats, estimated {format_duration(total)}[/dim]")


@app.command()
def score(
    beat_text: str = typer.Argument(..., help="Beat text"),
    description: str = typer.Argument(..., help="Asset description (alt text)"),
    aggressiveness: float = typer.Option(
        0.5, "--aggressiveness", "-a", min=0.0, max=1.0, help="AI aggressiveness"
    ),
) -> None:
    """Score an asset description against a beat."""
    from storybeat.services.composer import stock_min_score
    from storybeat.services.scorer import score as score_text

    relevance = score_text(beat_text, description)
    threshold = stock_min_score(aggressiveness)
    accepted = relevance >= threshold

    console.print(f"Score: [bold]{relevance:.3f}[/bold]")
    console.print(f"Stock threshold: {threshold:.3f}")
    if accepted:
        console.print("[bold green]✓ Accepted as stock[/bold green]")
    else:
        console.print("[bold yellow]✗ Below threshold[/bold yellow]")


@app.command()
def plan(
    topic: str = typer.Argument(..., help="What the video is about"),
    title: Optional[str] = typer.Option(None, "--title", help="Project title"),
    template: str = typer.Option("explainer", "--template", help="Content template"),
    tone: str = typer.Option("friendly", "--tone", help="Narration tone"),
    duration: int = typer.Option(540, "--duration", "-d", help="Target duration in seconds"),
    aspect_ratio: str = typer.Option("16:9", "--aspect-ratio", help="16:9, 9:16 or 1:1"),
    aggressiveness: float = typer.Option(
        0.5, "--aggressiveness", "-a", help="AI aggressiveness (0.0-1.0)"
    ),
    voice: bool = typer.Option(False, "--voice", help="Also narrate every beat"),
    save: bool = typer.Option(False, "--save", help="Persist the project to the database"),
) -> None:
    """Run the whole pipeline for a topic with the configured providers."""
    from storybeat.domain.errors import ValidationError
    from storybeat.domain.models import ProjectConfig
    from storybeat.services.project_pipeline import ProjectPipeline

    repository = None
    if save:
        from storybeat.db.session import init_db
        from storybeat.services.repository import ProjectRepository

        init_db()
        repository = ProjectRepository()

    try:
        config = ProjectConfig.create(
            title=title or topic[:80],
            topic=topic,
            template=template,
            tone=tone,
            target_duration_seconds=duration,
            aspect_ratio=aspect_ratio,
        )
        pipeline = ProjectPipeline(repository=repository)
        ctx = pipeline.create_project(config, aggressiveness)
    except ValidationError as e:
        for error in e.errors:
            console.print(f"[bold red]✗ {error}[/bold red]")
        raise typer.Exit(code=1)

    async def run() -> list:
        reports = [await pipeline.request_script(ctx)]
        if reports[-1].ok:
            reports.append(await pipeline.request_beats(ctx))
        if reports[-1].ok:
            if voice:
                reports.extend(await pipeline.request_voice_all(ctx))
            reports.extend(await pipeline.request_composition(ctx))
        return reports

    console.print(f"[bold blue]Planning:[/bold blue] {topic}")
    reports = asyncio.run(run())

    failures = [r for r in reports if not r.ok]
    for report in failures:
        console.print(f"[yellow]{report.stage}: {report.outcome} - {report.message}[/yellow]")

    project = ctx.project
    _print_beats(project)

    console.print(
        f"Status: [bold]{project.status}[/bold]  "
        f"[dim]({len(project.beats)} beats, project {project.id})[/dim]"
    )
    if not project.beats:
        raise typer.Exit(code=1)


def _print_beats(project) -> None:
    from storybeat.services.duration import format_duration

    table = Table(title=project.title)
    table.add_column("#", style="dim")
    table.add_column("Start", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Text", style="cyan")
    table.add_column("Asset")
    table.add_column("Score", justify="right")

    for index, beat in enumerate(project.beats, start=1):
        asset = beat.selected_asset
        table.add_row(
            str(index),
            format_duration(beat.start_time) if beat.start_time is not None else "-",
            f"{beat.effective_duration:.1f}s",
            beat.text[:80] + ("..." if len(beat.text) > 80 else ""),
            f"{asset.source}:{asset.id}" if asset else "[red]none[/red]",
            f"{asset.score:.2f}" if asset else "-",
        )

    console.print(table)


@app.command()
def serve() -> None:
    """Start the API server."""
    import uvicorn

    from storybeat.config import settings

    uvicorn.run(
        "storybeat.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


@app.command()
def presets() -> None:
    """List script templates and tones."""
    from storybeat.presets.templates import TEMPLATE_PRESETS, TONE_PRESETS

    for template, preset in TEMPLATE_PRESETS.items():
        console.print(Panel.fit(
            f"[bold]{preset.display_name}[/bold]\n\n{preset.prompt}",
            title=str(template),
            border_style="cyan",
        ))

    table = Table(title="Tones")
    table.add_column("Tone", style="cyan")
    table.add_column("Name")
    table.add_column("Modifier", style="dim")
    for tone, preset in TONE_PRESETS.items():
        table.add_row(str(tone), preset.display_name, preset.modifier)
    console.print(table)


# =============================================================================
# PROJECTS COMMANDS
# =============================================================================


@projects_app.command("list")
def projects_list(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum projects to show"),
) -> None:
    """List stored projects."""
    from storybeat.db.session import init_db
    from storybeat.services.repository import ProjectRepository

    init_db()
    projects = ProjectRepository().list(limit=limit)

    if not projects:
        console.print("[dim]No projects found. Create one with 'storybeat plan --save'[/dim]")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Template")
    table.add_column("Status", style="green")
    table.add_column("Beats", justify="right")
    table.add_column("Updated")

    for project in projects:
        table.add_row(
            str(project.id),
            project.title,
            str(project.config.template),
            str(project.status),
            str(len(project.beats)),
            project.updated_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@projects_app.command("show")
def projects_show(
    project_id: str = typer.Argument(..., help="Project ID (UUID)"),
) -> None:
    """Show a stored project and its beats."""
    from uuid import UUID

    from storybeat.db.session import init_db
    from storybeat.services.repository import ProjectRepository

    try:
        project_uuid = UUID(project_id)
    except ValueError:
        console.print(f"[bold red]Invalid project ID: {project_id}[/bold red]")
        raise typer.Exit(code=1)

    init_db()
    project = ProjectRepository().get(project_uuid)
    if project is None:
        console.print(f"[bold red]Project not found: {project_id}[/bold red]")
        raise typer.Exit(code=1)

    config = project.config
    console.print(Panel.fit(
        f"[bold]{project.title}[/bold]\n\n"
        f"[cyan]Topic:[/cyan] {config.topic}\n"
        f"[cyan]Template:[/cyan] {config.template}  [cyan]Tone:[/cyan] {config.tone}\n"
        f"[cyan]Target:[/cyan] {config.target_duration_seconds}s  "
        f"[cyan]Aspect:[/cyan] {config.aspect_ratio}\n"
        f"[cyan]Status:[/cyan] {project.status}",
        title="Project Details",
        border_style="blue",
    ))
    if project.beats:
        _print_beats(project)


if __name__ == "__main__":
    app()
