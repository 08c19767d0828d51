"""
Typer CLI for the trivia engine.

Commands:
    trivia db init          - Create catalog and progress tables
    trivia stats            - Show overall trivia statistics
    trivia categories       - Show per-category mastery and accuracy
    trivia history          - List recent sessions
    trivia session <id>     - Show one session with its answers
    trivia streak           - Show daily streak and the last week of activity
    trivia daily            - Show today's daily trivia status

Usage:
    trivia --help
    trivia db init
    trivia categories --locale de
    trivia history --limit 20
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from trivia_engine import __version__
from trivia_engine.config import Settings, get_settings
from trivia_engine.core.errors import TriviaError
from trivia_engine.db.database import Database
from trivia_engine.trivia.answers import format_accuracy, get_streak_display, index_to_answer
from trivia_engine.trivia.service import TriviaService

T = TypeVar("T")

app = typer.Typer(
    help="Trivia engine: inspect progress, streaks and session history",
    no_args_is_help=True,
)
console = Console()


# ========================================
# Logging & Service Wiring
# ========================================


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Route loguru output to stderr and, if configured, a rotating log file."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=5)


def _run(work: Callable[[TriviaService], Awaitable[T]]) -> T:
    """Run one async unit of work against a freshly opened database."""

    async def runner() -> T:
        settings = get_settings()
        db = Database(settings.get_database_url(), echo=settings.database_echo)
        try:
            return await work(TriviaService(db=db, settings=settings))
        finally:
            await db.dispose()

    try:
        return asyncio.run(runner())
    except TriviaError as e:
        logger.error("{}", e)
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
) -> None:
    """Spaced-practice trivia engine."""
    configure_logging(get_settings(), verbose)


# ========================================
# DATABASE COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Create all tables if they don't exist.

    Safe to run multiple times (idempotent).
    """
    logger.info("Initializing database tables...")

    async def work(service: TriviaService) -> None:
        await service.db.init_db()

    _run(work)
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# PROGRESS COMMANDS
# ========================================


@app.command("stats")
def show_stats(
    locale: Annotated[str | None, typer.Option("--locale", "-l", help="Content locale")] = None,
) -> None:
    """Show overall trivia statistics."""
    stats = _run(lambda service: service.get_overall_stats(locale))

    table = Table(title="Trivia Statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Questions answered", str(stats.total_answered))
    table.add_row("Correct answers", str(stats.total_correct))
    table.add_row("Accuracy", format_accuracy(stats.total_answered, stats.total_correct))
    table.add_row("Mastered questions", str(stats.total_mastered))
    table.add_row("Quizzes taken", str(stats.tests_taken))
    table.add_row("Quizzes this week", str(stats.tests_this_week))
    table.add_row("Answered this week", str(stats.answered_this_week))
    table.add_row("Mastered today", str(stats.mastered_today))
    table.add_row("Correct today", str(stats.correct_today))
    table.add_row("Current streak", str(stats.current_streak))
    table.add_row("Best streak", str(stats.best_streak))
    console.print(table)


@app.command("categories")
def show_categories(
    locale: Annotated[str | None, typer.Option("--locale", "-l", help="Content locale")] = None,
    only: Annotated[
        list[str] | None, typer.Option("--only", help="Restrict to these category slugs")
    ] = None,
) -> None:
    """Show mastery and accuracy per category."""
    categories = _run(lambda service: service.get_categories_with_progress(locale, only or None))

    if not categories:
        rprint("[yellow]No categories with questions yet.[/yellow]")
        return

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Mastered", justify="right")
    table.add_column("Answered", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Done", justify="center")
    for item in categories:
        icon = f"{item.category.icon} " if item.category.icon else ""
        table.add_row(
            f"{icon}{item.name}",
            f"{item.mastered}/{item.total}",
            str(item.answered),
            f"{item.accuracy}%",
            "[green]✓[/green]" if item.is_complete else "",
        )
    console.print(table)


@app.command("history")
def show_history(
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Sessions to show")] = None,
    locale: Annotated[str | None, typer.Option("--locale", "-l", help="Content locale")] = None,
) -> None:
    """List recent trivia sessions, newest first."""
    sessions = _run(lambda service: service.get_recent_sessions(limit, locale))

    if not sessions:
        rprint("[yellow]No trivia sessions yet.[/yellow]")
        return

    table = Table(title="Recent Sessions")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Completed")
    table.add_column("Mode")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Best run", justify="right")
    for item in sessions:
        table.add_row(
            str(item.id),
            item.completed_at.strftime("%Y-%m-%d %H:%M"),
            item.trivia_mode.display_name,
            item.category.name if item.category else (item.category_slug or "-"),
            f"{item.correct_answers}/{item.total_questions} ({item.score_percent}%)",
            str(item.best_streak or 0),
        )
    console.print(table)


@app.command("session")
def show_session(
    session_id: Annotated[int, typer.Argument(help="Session id")],
    locale: Annotated[str | None, typer.Option("--locale", "-l", help="Content locale")] = None,
) -> None:
    """Show one finished session with the answers given."""
    item = _run(lambda service: service.get_session_by_id(session_id, locale))

    if item is None:
        rprint(f"[red]Session {session_id} not found[/red]")
        raise typer.Exit(code=1)

    rprint(
        f"[bold]{item.trivia_mode.display_name}[/bold] #{item.id} - "
        f"{item.correct_answers}/{item.total_questions} ({item.score_percent}%)"
    )
    if item.elapsed_time is not None:
        rprint(f"  Time: {item.elapsed_time // 60}m {item.elapsed_time % 60}s")

    if not item.has_result_data:
        rprint("[dim]No per-question results stored for this session.[/dim]")
        return

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("Question")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    for position, question in enumerate(item.questions, start=1):
        answer = item.answers.get(question.id)
        if answer is None:
            given = "[dim]-[/dim]"
        else:
            picked = answer.text or index_to_answer(question, answer.index)
            given = f"[green]{picked}[/green]" if answer.correct else f"[red]{picked}[/red]"
        text = question.question_text
        if question.id in item.unavailable_question_ids:
            text += " [dim](no longer available)[/dim]"
        table.add_row(str(position), text, given, question.correct_answer)
    console.print(table)


@app.command("streak")
def show_streak(
    days: Annotated[int, typer.Option("--days", "-d", help="Days of activity to show")] = 7,
) -> None:
    """Show the daily streak and recent activity."""

    async def work(service: TriviaService):
        return (
            await service.get_daily_streak(),
            await service.get_best_streak(),
            await service.get_daily_activity(days),
        )

    current, best, activity = _run(work)

    rprint(f"Current streak: [bold]{current}[/bold] {get_streak_display(current)}")
    rprint(f"Best streak: [bold]{best}[/bold]")

    table = Table(title=f"Last {days} days")
    table.add_column("Date")
    table.add_column("Answered", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Quizzes", justify="right")
    for day in activity:
        table.add_row(day.date, str(day.answered), f"{day.accuracy}%", str(day.sessions))
    console.print(table)


@app.command("daily")
def show_daily(
    locale: Annotated[str | None, typer.Option("--locale", "-l", help="Content locale")] = None,
) -> None:
    """Show today's daily trivia status."""

    async def work(service: TriviaService):
        count = await service.get_daily_trivia_questions_count(locale)
        progress = await service.get_today_progress()
        size = min(count, service.settings.daily_questions)
        return count, progress, service.get_estimated_time_minutes(size)

    count, progress, minutes = _run(work)

    if progress is not None and progress.is_completed:
        rprint(
            f"[green]✓[/green] Daily trivia completed: "
            f"{progress.correct_answers}/{progress.total_questions} correct"
        )
    elif progress is not None:
        rprint("[yellow]Daily trivia started but not finished.[/yellow]")
    else:
        rprint("Daily trivia not started yet.")

    if count:
        rprint(f"  {count} questions available today (~{minutes} min)")
    else:
        rprint("[dim]  No questions available today.[/dim]")


@app.command("version")
def version() -> None:
    """Show version information."""
    rprint(f"[bold]trivia-engine[/bold] v{__version__}")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
