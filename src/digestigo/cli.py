"""Command-line interface for Digestigo."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .exceptions import ClassifierUnavailable, StorageError
from .models.chat import ChatMessage
from .models.tracking import Category
from .services import ChatAssistant, ChatHistory, ReportBuilder, TrackingService
from .services.analysis import dietary_percentages
from .services.orchestrator import OrchestrationResult
from .utils.config import get_settings

app = typer.Typer(
    name="digestigo",
    help="Digestive health assistant - track symptoms, meals and triggers from chat",
    no_args_is_help=True,
)
console = Console()

CATEGORY_STYLES = {
    Category.SYMPTOM: ("Symptom", "red"),
    Category.DIETARY: ("Dietary", "cyan"),
    Category.TRIGGER: ("Trigger", "yellow"),
    Category.GENERAL: ("Not Saved", "dim"),
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for all commands."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def parse_category(value: str) -> Category:
    try:
        return Category(value.lower())
    except ValueError:
        choices = ", ".join(c.value for c in Category)
        console.print(f"[red]Unknown category: {value}[/red]")
        console.print(f"[dim]Use one of: {choices}[/dim]")
        raise typer.Exit(1)


def render_badges(result: OrchestrationResult) -> str:
    badges = []
    for category in result.categories:
        label, style = CATEGORY_STYLES[category]
        badges.append(f"[{style}]● {label}[/{style}]")
    line = "  ".join(badges)
    if result.saved:
        line += "  [green]✓ saved[/green]"
    elif result.discarded:
        line += "  [dim](discarded, data was cleared)[/dim]"
    elif result.duplicates:
        line += "  [dim](already tracked)[/dim]"
    return line


async def _track(service: TrackingService, message: str) -> Optional[OrchestrationResult]:
    try:
        return await service.process_message(message)
    except StorageError as e:
        console.print(f"[red]Could not save tracking data: {e}[/red]")
        return None


@app.command()
def log(
    message: str = typer.Argument(..., help="What happened, in your own words"),
):
    """Categorize a message and save it as tracking entries."""
    with TrackingService() as service:
        result = asyncio.run(_track(service, message))

    if result is None:
        raise typer.Exit(1)

    console.print(render_badges(result))
    for category, summary in result.summaries.items():
        if category != Category.GENERAL:
            console.print(f"  • {summary}")


@app.command()
def override(
    message: str = typer.Argument(..., help="The message to re-categorize"),
    category: str = typer.Argument(..., help="symptom, dietary, trigger or general"),
):
    """Re-categorize a message; the assistant must agree with the change."""
    requested = parse_category(category)

    with TrackingService() as service:
        try:
            result = asyncio.run(service.override(message, requested))
        except StorageError as e:
            console.print(f"[red]Could not save tracking data: {e}[/red]")
            raise typer.Exit(1)

    if not result.accepted:
        kept = ", ".join(c.value for c in result.categories)
        console.print(
            f"[yellow]This message doesn't fit the \"{requested.value}\" category. "
            f"Keeping as \"{kept}\".[/yellow]"
        )
        raise typer.Exit(0)

    if result.saved:
        console.print(f"[green]✓ Changed to {requested.value} and saved[/green]")
    else:
        console.print(f"[dim]Changed to {requested.value} (nothing new to save)[/dim]")


@app.command(name="entries")
def list_entries(
    category: Optional[str] = typer.Option(
        None, "--category", "-c",
        help="Only show one category",
    ),
):
    """List tracked entries."""
    wanted = parse_category(category) if category else None

    with TrackingService() as service:
        entries = asyncio.run(service.list_entries())

    if wanted:
        entries = [e for e in entries if e.category == wanted]

    if not entries:
        console.print("[yellow]No entries found[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Tracked Entries ({len(entries)})")
    table.add_column("When", style="cyan")
    table.add_column("Category")
    table.add_column("Summary")
    table.add_column("Food", justify="center")
    table.add_column("Keywords", style="dim")

    for entry in entries:
        label, style = CATEGORY_STYLES[entry.category]
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"[{style}]{label}[/{style}]",
            entry.summary,
            entry.food_category.value if entry.food_category else "-",
            ", ".join(entry.keywords),
        )

    console.print(table)


@app.command()
def summary():
    """Show symptoms, triggers and the dietary breakdown."""
    with TrackingService() as service:
        result = asyncio.run(service.summary())

    if result.is_empty:
        console.print("[yellow]Start tracking to see your health insights[/yellow]")
        raise typer.Exit(0)

    console.print(Panel(
        f"{result.total_entries} entries | {len(result.symptoms)} symptoms | "
        f"{len(result.triggers)} triggers | {result.dietary.total} categorized meals",
        title="📊 Tracking Summary",
    ))

    for title, items in (("Symptoms", result.symptoms), ("Triggers", result.triggers)):
        console.print(f"\n[bold]{title}:[/bold]")
        if not items:
            console.print("  [dim]None recorded[/dim]")
        for item in items:
            console.print(f"  • {item.summary}")

    console.print("\n[bold]Dietary Breakdown:[/bold]")
    if result.dietary.total == 0:
        console.print("  [dim]None recorded[/dim]")
        return

    table = Table()
    table.add_column("Food", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for name, pct in dietary_percentages(result.dietary).items():
        table.add_row(name.capitalize(), str(getattr(result.dietary, name)), f"{pct}%")
    console.print(table)


@app.command()
def insight(
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Generate a new summary"),
):
    """Show the written health summary."""
    with TrackingService() as service:
        try:
            text = asyncio.run(service.insight(refresh=refresh))
        except StorageError as e:
            console.print(f"[red]Could not save the summary: {e}[/red]")
            raise typer.Exit(1)

    console.print(Panel(text, title="🩺 Health Insights"))


@app.command()
def report(
    output: Path = typer.Option(
        Path("digestive_report.html"), "--output", "-o",
        help="Where to write the HTML report",
    ),
    with_insight: bool = typer.Option(
        True, "--insight/--no-insight",
        help="Include the cached written summary",
    ),
):
    """Write a printable HTML report."""
    with TrackingService() as service:
        summary_data = asyncio.run(service.summary())
        text = asyncio.run(service.insights.cached()) if with_insight else None

    output.write_text(ReportBuilder().render_html(summary_data, text), encoding="utf-8")
    console.print(f"[green]✓ Report written to {output}[/green]")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
):
    """Delete all tracking data. This cannot be undone."""
    if not yes and not Confirm.ask("Delete all tracking data?", default=False):
        raise typer.Exit(0)

    with TrackingService() as service:
        try:
            asyncio.run(service.clear())
        except StorageError as e:
            console.print(f"[red]Could not clear tracking data: {e}[/red]")
            raise typer.Exit(1)

    console.print("[green]✓ Tracking data cleared[/green]")


@app.command()
def chat(
    new: bool = typer.Option(False, "--new", help="Start a fresh conversation"),
):
    """Chat with the assistant; your messages are tracked automatically."""
    asyncio.run(_chat_loop(new))


async def _chat_loop(new: bool) -> None:
    settings = get_settings()
    with TrackingService(settings=settings) as service:
        history = ChatHistory(service.store, key=settings.chat_key)
        assistant = ChatAssistant(service.classifier)

        if new:
            await history.clear()

        messages = await history.load()
        for message in messages[-6:]:
            _print_message(message)

        console.print("[dim]Type 'quit' to leave.[/dim]")

        while True:
            text = Prompt.ask("[bold green]You[/bold green]").strip()
            if text.lower() in ("quit", "exit"):
                break
            if not text:
                continue

            user_message = ChatMessage(role="user", content=text)
            messages.append(user_message)

            try:
                reply = await assistant.reply(messages)
            except ClassifierUnavailable:
                reply = ChatAssistant.ERROR_TEXT
            assistant_message = ChatMessage(role="assistant", content=reply)
            messages.append(assistant_message)
            _print_message(assistant_message)

            result = await _track(service, text)
            if result is not None:
                console.print("   " + render_badges(result))

            try:
                await history.append(user_message, assistant_message)
            except StorageError as e:
                console.print(f"[red]Could not save chat history: {e}[/red]")


def _print_message(message: ChatMessage) -> None:
    if message.is_user:
        console.print(f"[bold green]You:[/bold green] {message.content}")
    else:
        console.print(f"[bold cyan]Digestigo:[/bold cyan] {message.content}")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(8000, help="Port to listen on"),
):
    """Run the HTTP API."""
    from .web import run
    run(host=host, port=port)


if __name__ == "__main__":
    app()
