"""CLI commands for nudge."""

import asyncio
import json
import sys
from datetime import datetime

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from nudge import __logo__, __version__

app = typer.Typer(
    name="nudge",
    help=f"{__logo__} nudge - personality-aware replies and task extraction",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} nudge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show provider diagnostics"),
):
    """nudge - personality-aware replies and task extraction."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _build_orchestrator():
    from nudge.agent.orchestrator import Orchestrator
    from nudge.config.loader import load_config

    return Orchestrator.from_config(load_config())


@app.command()
def chat(
    message: str = typer.Option(None, "--message", "-m", help="Message to send"),
    intensity: int = typer.Option(0, "--intensity", "-i", help="Intensity level 0-9"),
    style: int = typer.Option(0, "--style", "-s", help="Communication style 0-9"),
):
    """Get a reply from the first provider that answers."""
    from nudge.personality.prompts import PersonalitySettings

    orchestrator = _build_orchestrator()
    personality = PersonalitySettings(intensity_level=intensity, style_type=style)

    if message:
        reply = asyncio.run(orchestrator.generate_response(message, personality))
        console.print(f"\n{__logo__} {reply}")
        return

    console.print(f"{__logo__} Interactive mode (Ctrl+C to exit)\n")

    async def run_interactive():
        while True:
            try:
                user_input = console.input("[bold blue]You:[/bold blue] ")
            except (KeyboardInterrupt, EOFError):
                console.print("\nGoodbye!")
                break
            if not user_input.strip():
                continue
            reply = await orchestrator.generate_response(user_input, personality)
            console.print(f"\n{__logo__} {reply}\n")

    asyncio.run(run_interactive())


@app.command()
def extract(
    text: str = typer.Argument(..., help="Free text describing what needs doing"),
    name: str = typer.Option(None, "--name", help="User name for prompt context"),
    intensity: int = typer.Option(0, "--intensity", "-i", help="Intensity level 0-9"),
    style: int = typer.Option(0, "--style", "-s", help="Communication style 0-9"),
    now: str = typer.Option(None, "--now", help="Reference time (ISO 8601)"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
):
    """Turn free text into structured tasks."""
    from nudge.tasks.extractor import TaskExtractor
    from nudge.tasks.models import ContextHints, UserProfile

    hints = None
    if now:
        try:
            hints = ContextHints(current_time=datetime.fromisoformat(now))
        except ValueError:
            console.print(f"[red]Invalid --now value: {now}[/red]")
            raise typer.Exit(1)

    profile = UserProfile(name=name, intensity_level=intensity, style_type=style)
    extractor = TaskExtractor(orchestrator=_build_orchestrator())
    result = asyncio.run(extractor.extract(text, profile, hints))

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    table = Table(title=f"{len(result.tasks)} task(s)")
    table.add_column("Date", style="cyan")
    table.add_column("Time", style="cyan")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Category", style="green")
    for task in result.tasks:
        table.add_row(task.date, task.time, task.title, task.priority, task.category)

    console.print(table)
    console.print(
        f"[dim]confidence {result.confidence:.2f} · {result.processing_time_ms} ms[/dim]"
    )


@app.command()
def status():
    """Show which providers are configured."""
    health = _build_orchestrator().health()

    table = Table(title=f"{__logo__} Providers (in priority order)")
    table.add_column("Provider", style="cyan")
    table.add_column("Configured")
    table.add_column("Details", style="dim")
    for entry in health["providers"]:
        configured = "[green]✓[/green]" if entry["configured"] else "[red]✗[/red]"
        details = []
        if "endpoints" in entry:
            details.append(", ".join(entry["endpoints"]))
        if "credentials" in entry:
            details.append(f"credentials: {entry['credentials']}")
        table.add_row(entry["name"], configured, "; ".join(details))

    console.print(table)
    console.print(f"Fallback: [cyan]{health['fallback']}[/cyan] (always available)")


if __name__ == "__main__":
    app()
