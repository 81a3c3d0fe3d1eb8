"""
Parser and serializer for annotated Markdown.

A block starts at a heading whose text starts with a lozenge
(`# ◊sent reading :: translation :: sentence`) and runs over the contiguous
lozenge bullets after it (`- ◊cloze ...`, `- ◊Ebisu1 ...`). Everything else is
kept verbatim, so `serialize(parse(text)) == text` up to a final newline.

Example:
    # ◊sent やまだはせんせいにほめられた :: The teacher praised Yamada :: 山田は先生にほめられた
    - ◊cloze は
      - ◊Ebisu1 _ 2019-01-01T00:00:00.000Z; 3.000e+00, 3.000e+00, 2.500e-01
    - ◊Ebisu1 reading 2019-01-01T00:00:00.000Z; 3.000e+00, 3.000e+00, 2.500e-01
"""

from __future__ import annotations

import re

from loguru import logger

from ..config import CurtizConfig, MarkupConfig, get_settings
from ..errors import MalformedBulletError, MalformedHeaderError
from ..recall import RecallModel
from .models import (
    Bullet,
    ClozeQuiz,
    Content,
    FreeText,
    Quiz,
    ReadingQuiz,
    RelatedQuiz,
    SentenceBlock,
)

LEADING_WS = re.compile(r"^\s*")


def _indent_of(line: str) -> str:
    return LEADING_WS.match(line).group(0)


class BlockParser:
    """Parser for one configured flavor of the annotated format."""

    def __init__(self, config: CurtizConfig | None = None):
        self.config = config or get_settings()
        self.markup: MarkupConfig = self.config.markup
        lozenge = re.escape(self.markup.lozenge)
        self.HEADER_PATTERN = re.compile(rf"^#+\s+{lozenge}")
        self.BULLET_PATTERN = re.compile(rf"^(\s*)-\s+({lozenge}.*)$")

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse(self, text: str) -> list[Content]:
        """Split text into free text runs and typed blocks."""
        if not text:
            return []
        if text.endswith("\n"):
            text = text[:-1]
        lines = text.split("\n")

        content: list[Content] = []
        free: list[str] = []
        idx = 0
        while idx < len(lines):
            if not self.HEADER_PATTERN.match(lines[idx]):
                free.append(lines[idx])
                idx += 1
                continue
            if free:
                content.append(FreeText(free))
                free = []
            end = idx + 1
            while end < len(lines) and self.BULLET_PATTERN.match(lines[end]):
                end += 1
            content.append(self.parse_block(lines[idx:end]))
            idx = end
        if free:
            content.append(FreeText(free))

        logger.debug(f"Parsed {sum(isinstance(c, SentenceBlock) for c in content)} blocks")
        return content

    def parse_header(self, header: str) -> tuple[str, str, str]:
        """Return (reading, translation, sentence) of a sentence header."""
        hit = header.find(self.markup.sentence_marker)
        if hit < 0:
            raise MalformedHeaderError(f"Unknown block header, no parser for it: {header!r}")
        pieces = header[hit + len(self.markup.sentence_marker):].split(self.markup.field_separator)
        if len(pieces) != 3:
            raise MalformedHeaderError(
                f"Sentence needs (1) reading, (2) translation, and (3) printed: {header!r}"
            )
        reading, translation, sentence = (p.strip() for p in pieces)
        return reading, translation, sentence

    def parse_block(self, lines: list[str]) -> SentenceBlock:
        header = lines[0]
        reading, translation, sentence = self.parse_header(header)
        block = SentenceBlock(
            header=header,
            reading=reading,
            translation=translation,
            sentence=sentence,
            indent=_indent_of(lines[1]) if len(lines) > 1 else "",
        )

        for line in lines[1:]:
            bullet = self.parse_bullet(block, line)
            if bullet is not None:
                block.bullets.append(bullet)

        # Required quizzes go here
        if not any(isinstance(b, ReadingQuiz) for b in block.bullets):
            block.bullets.append(ReadingQuiz())
        return block

    def parse_bullet(self, block: SentenceBlock, line: str) -> Bullet | None:
        """Parse one body line; None when the line was attached to the previous quiz."""
        match = self.BULLET_PATTERN.match(line)
        indent, body = match.group(1), match.group(2)
        at_base = indent == block.indent
        m = self.markup

        if _starts_with_token(body, m.annotation_marker):
            name, model = self.parse_annotation(body)
            prev = block.bullets[-1] if block.bullets else None
            if name == m.reading_model_name and at_base and not any(
                isinstance(b, ReadingQuiz) for b in block.bullets
            ):
                return ReadingQuiz(model=model, raw_line=line, parsed_model=model.copy())
            if (
                name == m.attached_model_name
                and len(indent) > len(block.indent)
                and isinstance(prev, (ClozeQuiz, RelatedQuiz))
                and prev.model is None
            ):
                prev.model = model
                prev.parsed_model = model.copy()
                prev.raw_model_line = line
                return None
            logger.debug(f"Keeping unattached annotation as text: {line!r}")
            return FreeText([line])

        if at_base and _starts_with_token(body, m.cloze_marker):
            acceptables = [
                s.strip() for s in body[len(m.cloze_marker):].split(m.acceptable_separator) if s.strip()
            ]
            return ClozeQuiz.from_acceptables(acceptables, block.haystack, raw_line=line)

        if at_base and _starts_with_token(body, m.related_marker):
            fields = [s.strip() for s in body[len(m.related_marker):].split(m.field_separator)]
            if len(fields) not in (2, 3):
                raise MalformedBulletError(f"2- or 3-item related not found: {line!r}")
            return RelatedQuiz(
                reading=fields[0],
                translation=fields[1],
                written=fields[2] if len(fields) == 3 else None,
                raw_line=line,
            )

        return FreeText([line])

    def parse_annotation(self, body: str) -> tuple[str, RecallModel]:
        rest = body[len(self.markup.annotation_marker):].strip()
        name, _, model_text = rest.partition(" ")
        model = RecallModel.from_annotation(
            model_text,
            date_separator=self.markup.annotation_date_separator,
            field_separator=self.markup.annotation_field_separator,
        )
        return name, model

    # =========================================================================
    # Serializing
    # =========================================================================

    def serialize(self, content: list[Content]) -> str:
        if not content:
            return ""
        lines: list[str] = []
        for item in content:
            if isinstance(item, FreeText):
                lines.extend(item.lines)
            elif isinstance(item, SentenceBlock):
                lines.extend(self.render_block(item))
            else:
                raise TypeError(f"Unknown content type: {type(item).__name__}")
        return "\n".join(lines) + "\n"

    def render_block(self, block: SentenceBlock) -> list[str]:
        lines = [block.header]
        for bullet in block.bullets:
            if isinstance(bullet, FreeText):
                lines.extend(bullet.lines)
            else:
                lines.extend(self.render_quiz(block, bullet))
        return lines

    def render_quiz(self, block: SentenceBlock, quiz: Quiz) -> list[str]:
        m = self.markup
        base = block.indent

        if isinstance(quiz, ReadingQuiz):
            if quiz.model is None:
                return []
            if quiz.raw_line is not None and quiz.model == quiz.parsed_model:
                return [quiz.raw_line]
            return [f"{base}- {m.annotation_marker} {m.reading_model_name} {self._annotation(quiz.model)}"]

        if isinstance(quiz, ClozeQuiz):
            line = quiz.raw_line or f"{base}- {m.cloze_marker} {m.acceptable_separator.join(quiz.acceptables)}"
        elif isinstance(quiz, RelatedQuiz):
            fields = [f for f in (quiz.reading, quiz.translation, quiz.written) if f]
            line = quiz.raw_line or f"{base}- {m.related_marker} {f' {m.field_separator} '.join(fields)}"
        else:
            raise TypeError(f"Unknown quiz type: {type(quiz).__name__}")

        if quiz.model is None:
            return [line]
        if quiz.raw_model_line is not None and quiz.model == quiz.parsed_model:
            return [line, quiz.raw_model_line]
        model_line = (
            f"{base}{m.nested_indent}- {m.annotation_marker} {m.attached_model_name} {self._annotation(quiz.model)}"
        )
        return [line, model_line]

    def _annotation(self, model: RecallModel) -> str:
        return model.to_annotation(
            date_separator=self.markup.annotation_date_separator,
            field_separator=self.markup.annotation_field_separator,
        )


def _starts_with_token(body: str, token: str) -> bool:
    """`body` starts with `token` followed by whitespace or nothing."""
    return body == token or (body.startswith(token) and body[len(token)].isspace())


def parse(text: str, config: CurtizConfig | None = None) -> list[Content]:
    """Parse annotated Markdown into content."""
    return BlockParser(config).parse(text)


def serialize(content: list[Content], config: CurtizConfig | None = None) -> str:
    """Render content back to annotated Markdown."""
    return BlockParser(config).serialize(content)
