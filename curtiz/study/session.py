"""
Quiz administration: show a gapped prompt, collect one answer per gap.

Answers arrive one line at a time. A line starting with a number fills that
blank (`2 に`); any other line fills the first blank still empty. The quiz
is over once every blank has an answer.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..content.models import Quiz, SentenceBlock, quiz_prompt
from ..context import Cloze

LineReader = Callable[[], Awaitable[str]]

NUMBERED = re.compile(r"^\s*([0-9]+)\s*(.*)$")


class BlankFiller:
    """Collects responses for a fixed number of blanks."""

    def __init__(self, num_blanks: int):
        self.responses: list[str] = [""] * num_blanks

    @property
    def done(self) -> bool:
        return all(self.responses)

    def feed(self, line: str) -> bool:
        """Take one line of input; True once every blank is filled."""
        match = NUMBERED.match(line)
        if match:
            num = int(match.group(1))
            if 1 <= num <= len(self.responses):
                self.responses[num - 1] = match.group(2).strip()
            return self.done

        text = line.strip()
        if text:
            for idx, response in enumerate(self.responses):
                if not response:
                    self.responses[idx] = text
                    break
        return self.done


def render_prompt(cloze: Cloze) -> str:
    """Contexts with the gaps shown as numbered blanks."""
    parts = []
    gap = 0
    for context in cloze.contexts:
        if context is None:
            gap += 1
            parts.append(f"[bold yellow]({gap})[/bold yellow]")
        else:
            parts.append(escape(context))
    return "".join(parts)


def present(cloze: Cloze, console: Console) -> None:
    panel = Panel(
        render_prompt(cloze),
        title="[bold cyan]FILL THE BLANKS[/bold cyan]",
        border_style="cyan",
        box=box.HEAVY,
        padding=(1, 2),
    )
    console.print(panel)
    if cloze.num_gaps > 1:
        console.print('[dim]Enter answers in order, or "# answer" for a specific blank[/dim]')


async def administer(
    block: SentenceBlock,
    quiz: Quiz,
    reader: LineReader,
    console: Console | None = None,
) -> list[str]:
    """Show the quiz (if a console is given) and read answers until every gap is filled."""
    cloze = quiz_prompt(block, quiz)
    if console is not None:
        present(cloze, console)
    filler = BlankFiller(cloze.num_gaps)
    while not filler.done:
        filler.feed(await reader())
    return filler.responses
