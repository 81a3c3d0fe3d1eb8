"""
Curtiz CLI - spaced repetition over annotated Japanese sentences.

Usage:
    curtiz parse FILES...      # Segment sentences, add clozes, write back
    curtiz learn FILES...      # Learn the first unlearned sentence
    curtiz quiz FILES...       # Review the quiz most likely forgotten
    curtiz schedule FILES...   # Show every quiz's recall probability
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import FloatPrompt, Prompt
from rich.table import Table

from .config import CurtizConfig, get_settings
from .errors import CurtizError, WriteConflictError
from .extraction import MecabJdeppSegmenter, QuizItemExtractor, Segmenter, verify_all
from .recall import utcnow
from .study import ContentFile, ReviewScheduler, administer, load_all

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="curtiz",
    help="Spaced repetition for Japanese sentences kept in Markdown",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

Files = Annotated[list[Path], typer.Argument(help="Annotated Markdown files", exists=True, dir_okay=False)]


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


def get_segmenter(config: CurtizConfig) -> Segmenter:
    return MecabJdeppSegmenter(config.segmenter)


def _load(files: list[Path], config: CurtizConfig) -> list[ContentFile]:
    try:
        return load_all(files, config)
    except CurtizError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1) from e


def _save(loaded: list[ContentFile], config: CurtizConfig) -> None:
    for f in loaded:
        try:
            if f.save(config):
                console.print(f"[green]✓[/green] Saved {f.path}")
        except WriteConflictError as e:
            logger.error(str(e))
            console.print(f"[yellow]{f.path} changed on disk, not saved[/yellow]")


def _verify(loaded: list[ContentFile], config: CurtizConfig) -> None:
    """Segment every sentence that needs it; failed sentences are reported and left as they are."""
    segmenter = get_segmenter(config)
    for f in loaded:
        try:
            failures = asyncio.run(verify_all(f.content, segmenter, config))
        except CurtizError as e:
            console.print(f"[red]✗ {f.path}: {escape(str(e))}[/red]")
            raise typer.Exit(1) from e
        for failure in failures:
            console.print(f"[yellow]⚠ {escape(failure.block.sentence)}: {escape(str(failure.error))}[/yellow]")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def parse(files: Files) -> None:
    """
    Segment sentences that need it and write clozes back.

    A sentence is segmented when its reading is empty or it carries a
    `◊pleaseParse` bullet.
    """
    config = get_settings()
    loaded = _load(files, config)
    _verify(loaded, config)
    _save(loaded, config)


@app.command()
def learn(files: Files) -> None:
    """Learn the first sentence that has no recall models yet."""
    config = get_settings()
    loaded = _load(files, config)
    _verify(loaded, config)

    # Sentences whose segmentation failed have no reading to learn yet
    extractor = QuizItemExtractor(config)
    block = next(
        (b for f in loaded for b in f.blocks if not b.learned() and not extractor.needs_verification(b)),
        None,
    )
    if block is None:
        console.print("[dim]Nothing left to learn.[/dim]")
        _save(loaded, config)
        return

    console.print(Panel(
        f"[bold]{escape(block.sentence)}[/bold]\n{escape(block.reading)}\n[dim]{escape(block.translation)}[/dim]",
        title="[bold cyan]LEARN[/bold cyan]",
        border_style="cyan",
    ))
    scale = FloatPrompt.ask("Half-life scale", default=1.0, console=console)
    if scale <= 0:
        console.print("[red]✗ Half-life scale must be positive[/red]")
        raise typer.Exit(1)

    learned = ReviewScheduler(config).learn(block, utcnow(), scale)
    console.print(f"[green]✓[/green] Learned {len(learned)} quizzes")
    _save(loaded, config)


@app.command()
def quiz(files: Files) -> None:
    """Review the quiz most likely to be forgotten."""
    config = get_settings()
    loaded = _load(files, config)
    _verify(loaded, config)
    scheduler = ReviewScheduler(config)

    selection = scheduler.select_quiz([b for f in loaded for b in f.blocks], utcnow())
    if selection is None:
        console.print("[dim]Nothing learned yet, try `curtiz learn` first.[/dim]")
        _save(loaded, config)
        return
    logger.debug(f"Selected {selection.quiz.label} at {selection.probability:.3f}")

    async def read_line() -> str:
        return Prompt.ask("[cyan]>[/cyan]", console=console)

    try:
        responses = asyncio.run(administer(selection.block, selection.quiz, read_line, console))
    except EOFError as e:
        console.print("[dim]Quiz abandoned.[/dim]")
        raise typer.Exit(1) from e

    scale = 1.0
    if selection.unlearned:
        console.print(f"[dim]{selection.unlearned} more quizzes of this sentence will be learned.[/dim]")
        scale = FloatPrompt.ask("Half-life scale", default=1.0, console=console)
        if scale <= 0:
            console.print("[red]✗ Half-life scale must be positive[/red]")
            raise typer.Exit(1)

    try:
        result = scheduler.grade(selection.block, selection.quiz, responses, utcnow(), scale)
    except CurtizError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    if result.correct:
        console.print("[bold green]✓ Correct![/bold green]")
    else:
        expected = " | ".join(" / ".join(answers) for answers in result.expected)
        console.print(f"[bold red]✗ Incorrect.[/bold red] Expected: [yellow]{escape(expected)}[/yellow]")
    console.print(f"[dim]{escape(selection.block.summary)}[/dim]")
    _save(loaded, config)


@app.command()
def schedule(
    files: Files,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Rows to show (0 for all)")] = 0,
) -> None:
    """Show predicted recall for every learned quiz, weakest first."""
    config = get_settings()
    loaded = _load(files, config)
    rows = ReviewScheduler(config).schedule_report([b for f in loaded for b in f.blocks], utcnow())
    if limit > 0:
        rows = rows[:limit]

    if not rows:
        console.print("[dim]Nothing learned yet.[/dim]")
        return

    table = Table(title="Review Schedule", show_header=True)
    table.add_column("Recall", justify="right")
    table.add_column("Half-life (h)", justify="right")
    table.add_column("Quiz")
    table.add_column("Sentence")
    for row in rows:
        color = "red" if row.probability < 0.5 else "green"
        table.add_row(
            f"[{color}]{row.probability:.1%}[/{color}]",
            f"{row.half_life:.2f}",
            escape(row.quiz.label),
            escape(row.block.sentence),
        )
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Entry point for the CLI."""
    configure_logging(get_settings().log_level)
    app()


if __name__ == "__main__":
    run()
