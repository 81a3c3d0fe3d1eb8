"""
Review Scheduler - what to learn, what to quiz, and what a quiz result means.

Selection always reviews something weak: with few modeled quizzes it takes the
lowest predicted recall; with more it picks at random among the quizzes in
the lowest probability band, so items learned together are not quizzed in the
order they were learned.

Update propagation assumes the whole sentence is shown after every quiz:
- the quizzed item gets a real Bayesian update
- its modeled siblings are only marked as seen (passive update)
- its unmodeled siblings are learned on the spot
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from loguru import logger

from ..config import CurtizConfig, get_settings
from ..content.models import Quiz, ReadingQuiz, SentenceBlock, quiz_prompt
from ..errors import NotLearnedError
from ..kana import kata2hira
from ..recall import RecallModel, ensure_utc, jittered

Jitter = Callable[[], timedelta]


def random_jitter(bound_ms: int, rng: random.Random | None = None) -> Jitter:
    """Uniform offsets in [0, bound_ms) milliseconds."""
    rng = rng or random.Random()

    def draw() -> timedelta:
        if bound_ms <= 0:
            return timedelta(0)
        return timedelta(milliseconds=rng.randrange(bound_ms))

    return draw


def no_jitter() -> timedelta:
    return timedelta(0)


@dataclass
class Selection:
    """The quiz chosen for review and where it lives."""

    block: SentenceBlock
    quiz: Quiz
    probability: float

    @property
    def unlearned(self) -> int:
        return self.block.num_unlearned()


@dataclass
class GradeResult:
    """Outcome of grading one quiz."""

    correct: bool
    responses: list[str]
    expected: list[list[str]]
    updated: list[Quiz] = field(default_factory=list)


@dataclass
class ScheduleRow:
    block: SentenceBlock
    quiz: Quiz
    probability: float
    half_life: float  # hours until predicted recall is 50%


def is_correct(expected: list[list[str]], responses: list[str]) -> bool:
    """Every response must be one of its gap's answers, as typed or folded to hiragana."""
    if len(expected) != len(responses):
        return False
    for answers, response in zip(expected, responses):
        response = response.strip()
        if response not in answers and kata2hira(response) not in answers:
            return False
    return True


class ReviewScheduler:
    """
    Learning, selection and grading over sentence blocks.

    `rng` drives band selection and `jitter` the creation times of sibling
    models; both are injectable so tests can pin them down.
    """

    def __init__(
        self,
        config: CurtizConfig | None = None,
        rng: random.Random | None = None,
        jitter: Jitter | None = None,
    ):
        self.config = config or get_settings()
        self.params = self.config.scheduler
        self.rng = rng or random.Random()
        self.jitter = jitter or random_jitter(self.params.jitter_ms, self.rng)

    def _fresh_model(self, now: datetime, scale: float, exact: bool) -> RecallModel:
        created = ensure_utc(now) if exact else jittered(now, self.jitter())
        return RecallModel.create_default(
            scale * self.params.default_half_life_hours,
            self.params.default_confidence,
            created,
        )

    # =========================================================================
    # Learning
    # =========================================================================

    def learn(self, block: SentenceBlock, now: datetime, scale: float = 1.0) -> list[Quiz]:
        """
        Give every unmodeled quiz of `block` a fresh model.

        The reading quiz is stamped exactly `now`; the others get a small
        random offset so they never tie under probability-sorted selection.
        """
        if scale <= 0:
            raise ValueError(f"Half-life scale must be positive, got {scale}")
        block.reading_quiz()
        learned = []
        for quiz in block.quizzes():
            if quiz.model is None:
                quiz.model = self._fresh_model(now, scale, exact=isinstance(quiz, ReadingQuiz))
                learned.append(quiz)
        logger.info(f"Learned {len(learned)} quizzes of {block.sentence}")
        return learned

    # =========================================================================
    # Selection
    # =========================================================================

    def predictions(self, blocks: Iterable[SentenceBlock], now: datetime) -> list[Selection]:
        return [
            Selection(block, quiz, quiz.model.predict(now))
            for block in blocks
            if block.learned()
            for quiz in block.quizzes()
            if quiz.model is not None
        ]

    def select_quiz(self, blocks: Iterable[SentenceBlock], now: datetime) -> Selection | None:
        """Pick the next quiz to review, or None when nothing is learned."""
        predicted = self.predictions(blocks, now)
        if not predicted:
            return None

        lowest = predicted[0]
        for p in predicted[1:]:
            if p.probability < lowest.probability:
                lowest = p
        if len(predicted) < self.params.min_quizzes_for_band:
            return lowest

        threshold = next((t for t in self.params.band_thresholds if t > lowest.probability), None)
        if threshold is None:
            return lowest
        band = [p for p in predicted if p.probability <= threshold]
        choice = self.rng.choice(band)
        logger.debug(f"Picked from {len(band)} quizzes at or below {threshold}: {choice.quiz.label}")
        return choice

    # =========================================================================
    # Grading
    # =========================================================================

    def grade(
        self,
        block: SentenceBlock,
        quiz: Quiz,
        responses: list[str],
        now: datetime,
        scale: float = 1.0,
    ) -> GradeResult:
        """Grade `responses` to `quiz` and propagate to every quiz in `block`."""
        if not any(q is quiz for q in block.quizzes()):
            raise ValueError(f"Quiz {quiz.label!r} does not belong to {block.sentence!r}")
        if quiz.model is None:
            raise NotLearnedError(f"Refusing to update quiz that was not already learned: {quiz.label}")

        expected = quiz_prompt(block, quiz).answers
        correct = is_correct(expected, responses)

        updated = []
        for sibling in block.quizzes():
            if sibling is quiz:
                sibling.model.update(correct, now)
            elif sibling.model is not None:
                sibling.model.passive_update(now)
            else:
                sibling.model = self._fresh_model(now, scale, exact=False)
            updated.append(sibling)

        logger.info(f"{'Correct' if correct else 'Incorrect'}: {quiz.label} of {block.sentence}")
        return GradeResult(correct=correct, responses=list(responses), expected=expected, updated=updated)

    # =========================================================================
    # Reporting
    # =========================================================================

    def schedule_report(self, blocks: Iterable[SentenceBlock], now: datetime) -> list[ScheduleRow]:
        """Every modeled quiz, weakest first."""
        rows = [
            ScheduleRow(p.block, p.quiz, p.probability, p.quiz.model.half_life_hours())
            for p in self.predictions(blocks, now)
        ]
        rows.sort(key=lambda r: r.probability)
        return rows


def learn(block: SentenceBlock, now: datetime, scale: float = 1.0, config: CurtizConfig | None = None,
          jitter: Jitter | None = None) -> list[Quiz]:
    return ReviewScheduler(config, jitter=jitter).learn(block, now, scale)


def select_quiz(blocks: Iterable[SentenceBlock], now: datetime, config: CurtizConfig | None = None,
                rng: random.Random | None = None) -> Selection | None:
    return ReviewScheduler(config, rng=rng).select_quiz(blocks, now)


def grade(block: SentenceBlock, quiz: Quiz, responses: list[str], now: datetime, scale: float = 1.0,
          config: CurtizConfig | None = None, jitter: Jitter | None = None) -> GradeResult:
    return ReviewScheduler(config, jitter=jitter).grade(block, quiz, responses, now, scale)


def schedule_report(blocks: Iterable[SentenceBlock], now: datetime,
                    config: CurtizConfig | None = None) -> list[ScheduleRow]:
    return ReviewScheduler(config).schedule_report(blocks, now)
