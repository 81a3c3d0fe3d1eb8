"""
Content types parsed out of annotated Markdown.

The hierarchy is closed: top-level content is FreeText or a SentenceBlock,
a block's bullets are FreeText or one of the three quiz kinds. Code that
dispatches on these types handles every kind and raises on anything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..context import Cloze, resolve
from ..errors import ClozeNotFoundError
from ..recall import RecallModel


@dataclass
class FreeText:
    """Verbatim lines, never interpreted."""

    lines: list[str]


# =============================================================================
# Quizzes
# =============================================================================


@dataclass(eq=False)
class ClozeQuiz:
    """
    Fill in one gap of the sentence.

    `acceptables[primary]` is the cloze identity (bare literal or
    `left[cloze]right`); every other acceptable is an extra accepted answer
    for the same gap.
    """

    acceptables: list[str]
    cloze: Cloze
    primary: int = 0
    model: RecallModel | None = None

    # Source text, re-emitted verbatim while nothing changed
    raw_line: str | None = None
    raw_model_line: str | None = None
    parsed_model: RecallModel | None = None

    @classmethod
    def from_acceptables(cls, acceptables: list[str], haystack: str, **kwargs) -> "ClozeQuiz":
        """Resolve the first acceptable found in `haystack` as the gap."""
        if not acceptables:
            raise ClozeNotFoundError("Cloze bullet has no answers")
        for idx, needle in enumerate(acceptables):
            try:
                cloze = resolve(haystack, needle)
            except ClozeNotFoundError:
                continue
            cloze.answers[0].extend(a for i, a in enumerate(acceptables) if i != idx)
            return cls(acceptables=list(acceptables), cloze=cloze, primary=idx, **kwargs)
        raise ClozeNotFoundError(f"None of these clozes were found: {' / '.join(acceptables)}")

    @property
    def identity(self) -> str:
        return self.acceptables[self.primary]

    @property
    def label(self) -> str:
        return f"cloze {self.identity}"


@dataclass(eq=False)
class RelatedQuiz:
    """Give the reading of a word related to the sentence."""

    reading: str
    translation: str
    written: str | None = None
    model: RecallModel | None = None

    raw_line: str | None = None
    raw_model_line: str | None = None
    parsed_model: RecallModel | None = None

    @property
    def label(self) -> str:
        return f"related {self.written or self.translation}"


@dataclass(eq=False)
class ReadingQuiz:
    """Give the reading of the whole sentence. One per block, implicit until modeled."""

    model: RecallModel | None = None

    raw_line: str | None = None
    parsed_model: RecallModel | None = None

    @property
    def label(self) -> str:
        return "reading"


Quiz = ClozeQuiz | RelatedQuiz | ReadingQuiz
QUIZ_TYPES = (ClozeQuiz, RelatedQuiz, ReadingQuiz)
Bullet = FreeText | ClozeQuiz | RelatedQuiz | ReadingQuiz


def is_quiz(bullet: object) -> bool:
    return isinstance(bullet, QUIZ_TYPES)


# =============================================================================
# Blocks
# =============================================================================


@dataclass(eq=False)
class SentenceBlock:
    """A `◊sent` header and the bullets beneath it."""

    header: str
    reading: str
    translation: str
    sentence: str
    bullets: list[Bullet] = field(default_factory=list)
    indent: str = ""  # indentation of the block's bullets

    @property
    def haystack(self) -> str:
        """Text cloze contexts are resolved against."""
        return f"{self.sentence} ({self.translation})"

    def quizzes(self) -> list[Quiz]:
        return [b for b in self.bullets if is_quiz(b)]

    def reading_quiz(self) -> ReadingQuiz:
        for b in self.bullets:
            if isinstance(b, ReadingQuiz):
                return b
        quiz = ReadingQuiz()
        self.bullets.append(quiz)
        return quiz

    def learned(self) -> bool:
        """A block is learned once any of its quizzes has a model."""
        return any(q.model is not None for q in self.quizzes())

    def num_unlearned(self) -> int:
        return sum(1 for q in self.quizzes() if q.model is None)

    @property
    def summary(self) -> str:
        return f"{self.sentence} {self.reading} {self.translation}".strip()


Content = FreeText | SentenceBlock


def blocks_of(content: list[Content]) -> list[SentenceBlock]:
    return [c for c in content if isinstance(c, SentenceBlock)]


def quiz_prompt(block: SentenceBlock, quiz: Quiz) -> Cloze:
    """The gapped prompt and accepted answers for a quiz of `block`."""
    if isinstance(quiz, ClozeQuiz):
        return quiz.cloze
    if isinstance(quiz, RelatedQuiz):
        if quiz.written:
            return Cloze(contexts=[f"{quiz.written}: enter reading: ", None], answers=[[quiz.reading, quiz.written]])
        return Cloze(contexts=[f"{quiz.translation}: enter reading: ", None], answers=[[quiz.reading]])
    if isinstance(quiz, ReadingQuiz):
        return Cloze(contexts=[f"{block.sentence}: enter reading: ", None], answers=[[block.reading, block.sentence]])
    raise TypeError(f"Unknown quiz type: {type(quiz).__name__}")
