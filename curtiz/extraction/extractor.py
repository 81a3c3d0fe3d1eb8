"""
Quiz Item Extractor - finds what to quiz in a sentence.

Given the clauses of a sentence:
1. Conjugated verb/adjective phrases become conjugation clozes
2. Particles outside those phrases become particle clozes
3. Each cloze is named by its minimal unique context (see `context.generate`)
4. Existing cloze bullets are reconciled against the new set without ever
   dropping one that has a recall model
5. Kanji words get provisional `◊related??` suggestions for the user to edit
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from loguru import logger

from ..config import CurtizConfig, get_settings
from ..content.models import ClozeQuiz, Content, FreeText, SentenceBlock, blocks_of
from ..context import generate
from ..errors import ClozeError, RefuseToForgetError, SegmentationError
from ..kana import has_kanji, kata2hira
from .segmenter import Clause, Morpheme, Segmenter, clause_text

CONJUGATION = "conjugation"
PARTICLE = "particle"

UNINTERESTING_POS = ("supplementary_symbol", "symbol", "whitespace")


@dataclass
class Candidate:
    """A clozable fragment and the name it will be stored under."""

    identity: str
    literal: str
    morphemes: list[Morpheme]
    kind: str


@dataclass
class VerificationFailure:
    """A sentence the segmenter could not handle."""

    block: SentenceBlock
    error: Exception


# =============================================================================
# Morpheme predicates
# =============================================================================


def is_conjugated_phrase(clause: Clause) -> bool:
    if len(clause) < 2:
        return False
    pos0 = clause[0].pos0
    return pos0.startswith("verb") or pos0.endswith("_verb") or pos0.startswith("adject")


def is_sentence_final(morpheme: Morpheme) -> bool:
    pos = morpheme.part_of_speech
    return len(pos) > 1 and pos[1].startswith("phrase_final")


def is_clozable_particle(morpheme: Morpheme) -> bool:
    pos = morpheme.part_of_speech
    return morpheme.pos0.startswith("particle") and len(pos) > 1 and not is_sentence_final(morpheme)


def is_uninteresting(morpheme: Morpheme) -> bool:
    """Trailing material not worth quizzing at the end of a phrase."""
    return morpheme.pos0 in UNINTERESTING_POS or (morpheme.pos0.startswith("particle") and is_sentence_final(morpheme))


def filter_right(items: list, predicate) -> list:
    """The contiguous run at the end of `items` that passes `predicate`."""
    idx = len(items)
    while idx > 0 and predicate(items[idx - 1]):
        idx -= 1
    return items[idx:]


# =============================================================================
# Extraction
# =============================================================================


def find_candidates(clauses: list[Clause]) -> list[Candidate]:
    """Clozable fragments in sentence order, one per identity."""
    texts = [clause_text(c) for c in clauses]
    found: dict[str, Candidate] = {}

    def add(left: str, literal: str, right: str, morphemes: list[Morpheme], kind: str) -> None:
        try:
            identity = generate(left, literal, right)
        except ClozeError as e:
            logger.warning(f"Skipping {kind} cloze {literal!r}: {e}")
            return
        found.setdefault(identity, Candidate(identity, literal, morphemes, kind))

    for cidx, clause in enumerate(clauses):
        if not clause:
            continue
        before = "".join(texts[:cidx])
        after = "".join(texts[cidx + 1:])
        if is_conjugated_phrase(clause):
            trailing = filter_right(clause, is_uninteresting)
            phrase = clause[: len(clause) - len(trailing)]
            add(before, clause_text(phrase), clause_text(trailing) + after, phrase, CONJUGATION)
            continue
        # only particles NOT inside conjugated phrases
        for pidx, morpheme in enumerate(clause):
            if is_clozable_particle(morpheme):
                left = before + clause_text(clause[:pidx])
                right = clause_text(clause[pidx + 1:]) + after
                add(left, morpheme.literal, right, [morpheme], PARTICLE)
    return list(found.values())


def sentence_reading(clauses: list[Clause]) -> str:
    """Hiragana reading of the sentence, symbols dropped."""
    parts = []
    for clause in clauses:
        for m in clause:
            if m.pos0 == "supplementary_symbol":
                continue
            if has_kanji(m.literal):
                parts.append(kata2hira(m.lemma_reading if m.literal == m.lemma else m.pronunciation))
            else:
                parts.append(m.literal)
    return "".join(parts)


class QuizItemExtractor:
    """Keeps a block's cloze bullets in step with its segmentation."""

    def __init__(self, config: CurtizConfig | None = None):
        self.config = config or get_settings()
        self.markup = self.config.markup

    # -------------------------------------------------------------------------
    # Line markers
    # -------------------------------------------------------------------------

    def _is_marker_line(self, bullet: object, marker: str) -> bool:
        if not isinstance(bullet, FreeText):
            return False
        body = bullet.lines[0].lstrip()
        return body.startswith("-") and body[1:].lstrip().startswith(marker)

    def is_please_parse(self, bullet: object) -> bool:
        return self._is_marker_line(bullet, self.markup.please_parse_marker)

    def is_suggestion(self, bullet: object) -> bool:
        return self._is_marker_line(bullet, self.markup.related_suggestion_marker + " ")

    def needs_verification(self, block: SentenceBlock) -> bool:
        return block.reading == "" or any(self.is_please_parse(b) for b in block.bullets)

    # -------------------------------------------------------------------------
    # Bullet updates
    # -------------------------------------------------------------------------

    def related_suggestions(self, block: SentenceBlock, clauses: list[Clause]) -> list[FreeText]:
        sep = self.markup.field_separator
        lines: list[str] = []
        for clause in clauses:
            for m in clause:
                if not has_kanji(m.literal):
                    continue
                line = f"{block.indent}- {self.markup.related_suggestion_marker} {kata2hira(m.lemma_reading)} {sep} ? {sep} {m.lemma}"
                if line not in lines:
                    lines.append(line)
        return [FreeText([line]) for line in lines]

    def new_cloze(self, block: SentenceBlock, candidate: Candidate) -> ClozeQuiz:
        acceptables = [candidate.identity]
        if has_kanji(candidate.literal):
            acceptables.append(kata2hira("".join(m.pronunciation for m in candidate.morphemes)))
        return ClozeQuiz.from_acceptables(acceptables, block.haystack)

    def reconciled_bullets(self, block: SentenceBlock, candidates: list[Candidate]) -> list:
        """
        The block's bullets after reconciliation with `candidates`.

        Does not touch the block. Raises RefuseToForgetError if a modeled
        cloze has no candidate any more.
        """
        clozes = [b for b in block.bullets if isinstance(b, ClozeQuiz)]
        # identity -> existing quiz, rebuilt from the bullets every time
        index = {answer: quiz for quiz in clozes for answer in quiz.acceptables}
        wanted = {c.identity for c in candidates}

        stale = [q for q in clozes if not wanted.intersection(q.acceptables)]
        modeled = [q.identity for q in stale if q.model is not None]
        if modeled:
            raise RefuseToForgetError(
                f"Refusing to forget learned cloze(s) {', '.join(modeled)} of {block.sentence!r}"
            )

        bullets = [b for b in block.bullets if not any(b is q for q in stale)]
        for candidate in candidates:
            if candidate.identity in index:
                continue
            try:
                bullets.append(self.new_cloze(block, candidate))
            except ClozeError as e:
                logger.warning(f"Skipping cloze {candidate.identity!r} of {block.sentence!r}: {e}")
        return bullets

    def identify_quiz_items(self, block: SentenceBlock, clauses: list[Clause]) -> None:
        """Reconcile clozes and regenerate related suggestions; all or nothing."""
        bullets = self.reconciled_bullets(block, find_candidates(clauses))
        if sum(len(c) for c in clauses) > 1:
            bullets = [b for b in bullets if not self.is_suggestion(b)]
            bullets.extend(self.related_suggestions(block, clauses))
        block.bullets = bullets

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def apply(self, block: SentenceBlock, clauses: list[Clause]) -> None:
        """Fill in a missing reading and re-extract quiz items from `clauses`."""
        reading = block.reading
        header = block.header
        if not reading:
            reading = sentence_reading(clauses)
            header = self._header_with_reading(header, reading)

        self.identify_quiz_items(block, clauses)
        block.bullets = [b for b in block.bullets if not self.is_please_parse(b)]
        block.reading = reading
        block.header = header

    def _header_with_reading(self, header: str, reading: str) -> str:
        marker = self.markup.sentence_marker
        hit = header.find(marker)
        sep = header.find(self.markup.field_separator, hit + len(marker))
        if hit < 0 or sep < 0:
            raise ValueError(f"Cannot place reading in header {header!r}")
        return header[: hit + len(marker)] + " " + reading + " " + header[sep:]

    async def verify(self, block: SentenceBlock, segmenter: Segmenter) -> bool:
        """Segment and re-extract when the block asks for it; True if it did."""
        if not self.needs_verification(block):
            return False
        try:
            clauses = await segmenter.segment(block.sentence)
        except SegmentationError:
            raise
        except Exception as e:
            raise SegmentationError(f"Segmentation of {block.sentence!r} failed: {e}") from e
        self.apply(block, clauses)
        logger.info(f"Verified {block.sentence}: {len(block.quizzes())} quizzes")
        return True

    async def verify_all(self, content: list[Content], segmenter: Segmenter) -> list[VerificationFailure]:
        """
        Verify every block concurrently.

        Segmentation failures only affect their own sentence and are returned;
        any other error (e.g. RefuseToForgetError) propagates.
        """
        blocks = [b for b in blocks_of(content) if self.needs_verification(b)]
        results = await asyncio.gather(*(self.verify(b, segmenter) for b in blocks), return_exceptions=True)
        failures = []
        for block, result in zip(blocks, results):
            if isinstance(result, SegmentationError):
                logger.warning(f"Could not verify {block.sentence!r}: {result}")
                failures.append(VerificationFailure(block, result))
            elif isinstance(result, BaseException):
                raise result
        return failures


async def verify(block: SentenceBlock, segmenter: Segmenter, config: CurtizConfig | None = None) -> bool:
    return await QuizItemExtractor(config).verify(block, segmenter)


async def verify_all(
    content: list[Content], segmenter: Segmenter, config: CurtizConfig | None = None
) -> list[VerificationFailure]:
    return await QuizItemExtractor(config).verify_all(content, segmenter)
