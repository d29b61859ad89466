"""
DinnerSnap - CLI Entry Point.

Usage:
    dinnersnap serve                     Start the API server
    dinnersnap normalize brocoli tomato  Show the canonical pantry
    dinnersnap suggest chickpeas onion   Suggest recipes for a pantry
    dinnersnap health                    Check configuration
    dinnersnap --help                    Show help
"""

import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

load_dotenv()

app = typer.Typer(
    name="dinnersnap",
    help="DinnerSnap - Turn a pantry photo into dinner.",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log generative prompts to prompt_logs/"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    from dinnersnap.config import get_settings
    from dinnersnap.observability import enable_prompt_logging, setup_logging

    settings = get_settings()
    setup_logging(settings.log_level)
    if log_prompts:
        os.environ["DINNERSNAP_LOG_PROMPTS"] = "1"
        enable_prompt_logging(True)

    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]DinnerSnap API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "dinnersnap.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def normalize(
    tokens: list[str] = typer.Argument(..., help="Raw ingredient tokens"),
    vision: bool = typer.Option(False, "--vision", help="Treat tokens as image labels (phrase joining, seasoning rules)"),
) -> None:
    """Show the canonical pantry for raw tokens."""
    from dinnersnap.pantry import normalize as normalize_tokens
    from dinnersnap.pantry import pantry_from_vision

    pantry = pantry_from_vision(tokens) if vision else normalize_tokens(tokens)

    if not pantry:
        console.print("[yellow]No recognisable ingredients.[/yellow]")
        raise typer.Exit(1)

    console.print(", ".join(pantry.as_list()))


@app.command()
def suggest(
    ingredients: list[str] = typer.Argument(..., help="Pantry ingredients"),
    time: int = typer.Option(25, "--time", "-t", help="Minutes available"),
    diet: str | None = typer.Option(None, "--diet", "-d", help="vegetarian, vegan, pescatarian or none"),
    energy: str | None = typer.Option(None, "--energy", "-e", help="hob, oven, air fryer or microwave"),
    servings: int = typer.Option(2, "--servings", "-s", help="Number of servings"),
    explore: bool = typer.Option(False, "--explore", help="Ask for something less obvious"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log generative prompts to prompt_logs/"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show pipeline logs"),
) -> None:
    """Suggest dinner recipes for a list of ingredients."""
    from dinnersnap.observability import enable_prompt_logging, setup_logging
    from dinnersnap.orchestrator import AnalyzeRequest, build_orchestrator
    from dinnersnap.web.schemas import PrefsIn

    setup_logging("INFO" if verbose else "WARNING", verbose=verbose)
    if log_prompts:
        enable_prompt_logging(True)

    prefs = PrefsIn(time=time, diet=diet, energyMode=energy, servings=servings, explore=explore)
    orchestrator = build_orchestrator()
    request = AnalyzeRequest(pantry_override=tuple(ingredients), prefs=prefs.to_preferences())

    with Live(Spinner("dots", text="Finding dinner..."), console=console, transient=True):
        result = asyncio.run(orchestrator.run_with_watchdog(request))

    console.print(f"\n[bold]Pantry:[/bold] {', '.join(result.pantry.as_list()) or '(empty)'}")

    table = Table(title="Recipes")
    table.add_column("Title", style="bold")
    table.add_column("Time", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Energy")
    table.add_column("Score", justify="right")
    table.add_column("Source")
    for recipe in result.recipes:
        table.add_row(
            recipe.title,
            f"{recipe.time} min",
            f"{recipe.cost:.2f}",
            recipe.energy,
            "-" if recipe.score is None else f"{recipe.score:.2f}",
            ", ".join(b.value for b in recipe.badges),
        )
    console.print(table)

    first = result.recipes[0]
    missing = [i.name for i in first.ingredients if not i.have]
    body = "\n".join(f"{n}. {s.text}" for n, s in enumerate(first.steps, start=1))
    if missing:
        body += f"\n\n[dim]You'll also need: {', '.join(missing)}[/dim]"
    console.print(Panel(body, title=first.title, border_style="green"))

    diagnostics = result.diagnostics
    providers = ", ".join(f"{k}={v}" for k, v in diagnostics.providers.items()) or "none"
    console.print(f"[dim]source={diagnostics.source} providers: {providers} total={diagnostics.total_ms}ms[/dim]")


@app.command()
def health() -> None:
    """Check configuration and which providers are available."""
    from dinnersnap.config import get_settings

    console.print("\n[bold]DinnerSnap Health Check[/bold]\n")

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Check your .env file and environment variables.[/dim]")
        raise typer.Exit(1)

    console.print("✅ Configuration loaded")
    console.print(f"   Environment: {settings.dinnersnap_env}")
    console.print(f"   Log level: {settings.log_level}")

    checks = [
        ("Vision (GCV_KEY)", settings.has_vision),
        ("Recipe search (SPOON_KEY)", settings.has_search),
        ("Generative (OPENAI_API_KEY)", settings.has_generative),
    ]
    for label, configured in checks:
        if configured:
            console.print(f"✅ {label} configured")
        else:
            console.print(f"ℹ️  {label} missing; provider will be skipped")

    console.print(
        f"\n   Budgets: vision {settings.vision_timeout_seconds}s, "
        f"search {settings.search_timeout_seconds}s, "
        f"generative {settings.generative_timeout_seconds}s, "
        f"watchdog {settings.watchdog_seconds}s"
    )
    console.print("\n[green]All checks passed![/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from dinnersnap import __version__

    console.print(f"DinnerSnap version {__version__}")


if __name__ == "__main__":
    app()
