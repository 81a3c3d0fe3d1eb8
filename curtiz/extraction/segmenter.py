"""
Morphological analysis and clause segmentation.

The analysis itself is done by external programs: MeCab with a UniDic
dictionary splits a sentence into morphemes, J.DepP groups MeCab's output
into bunsetsu (clauses). This module only defines the data both produce and
the async `Segmenter` protocol the extractor awaits.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from ..config import SegmenterConfig
from ..errors import SegmentationError


@dataclass(frozen=True)
class Morpheme:
    """One analysed lexical unit."""

    literal: str
    pronunciation: str
    lemma: str
    lemma_reading: str
    part_of_speech: tuple[str, ...]

    @property
    def pos0(self) -> str:
        return self.part_of_speech[0] if self.part_of_speech else ""


Clause = list[Morpheme]


def clause_text(clause: Clause) -> str:
    return "".join(m.literal for m in clause)


class Segmenter(Protocol):
    """Anything that can split a sentence into clauses of morphemes."""

    async def segment(self, sentence: str) -> list[Clause]:
        ...


# =============================================================================
# UniDic part-of-speech names
# =============================================================================

UNIDIC_POS = {
    "名詞": "noun",
    "普通名詞": "common_noun",
    "固有名詞": "proper_noun",
    "代名詞": "pronoun",
    "動詞": "verb",
    "形容詞": "adjective",
    "形状詞": "shape_word",
    "副詞": "adverb",
    "連体詞": "adnominal",
    "接続詞": "conjunction",
    "感動詞": "interjection",
    "助動詞": "auxiliary_verb",
    "助詞": "particle",
    "格助詞": "case_particle",
    "係助詞": "binding_particle",
    "副助詞": "adverbial_particle",
    "接続助詞": "conjunctive_particle",
    "準体助詞": "nominal_particle",
    "終助詞": "phrase_final_particle",
    "接頭辞": "prefix",
    "接尾辞": "suffix",
    "記号": "symbol",
    "補助記号": "supplementary_symbol",
    "空白": "whitespace",
    "句点": "period",
    "読点": "comma",
    "括弧開": "bracket_open",
    "括弧閉": "bracket_close",
    "一般": "general",
    "非自立可能": "possibly_dependent",
}

# UniDic feature columns in MeCab's default output
POS_FIELDS = slice(0, 4)
LEMMA_READING_FIELD = 6
LEMMA_FIELD = 7
PRONUNCIATION_FIELD = 9


def parse_mecab_line(line: str) -> Morpheme | None:
    """One `surface<TAB>features` line of MeCab UniDic output; None for EOS or blanks."""
    if not line.strip() or line == "EOS":
        return None
    literal, _, features = line.partition("\t")
    fields = features.split(",")
    pos = tuple(UNIDIC_POS.get(p, p) for p in fields[POS_FIELDS] if p and p != "*")

    def pick(idx: int) -> str:
        value = fields[idx] if idx < len(fields) else ""
        return literal if value in ("", "*") else value

    return Morpheme(
        literal=literal,
        pronunciation=pick(PRONUNCIATION_FIELD),
        lemma=pick(LEMMA_FIELD),
        lemma_reading=pick(LEMMA_READING_FIELD),
        part_of_speech=pos,
    )


def parse_jdepp(output: str) -> list[Clause]:
    """Split J.DepP output into clauses: each `* ` header line starts a new one."""
    clauses: list[Clause] = []
    for line in output.splitlines():
        if line.startswith("* "):
            clauses.append([])
            continue
        if line.startswith("#"):
            continue
        morpheme = parse_mecab_line(line)
        if morpheme is None:
            continue
        if not clauses:
            clauses.append([])
        clauses[-1].append(morpheme)
    return clauses


class MecabJdeppSegmenter:
    """Segmenter backed by the `mecab` and `jdepp` command-line programs."""

    def __init__(self, config: SegmenterConfig | None = None):
        self.config = config or SegmenterConfig()

    async def _run(self, command: list[str], stdin: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SegmentationError(f"Cannot start {command[0]}: {e}") from e
        out, err = await proc.communicate(stdin.encode(self.config.encoding))
        if proc.returncode != 0:
            raise SegmentationError(
                f"{command[0]} exited with {proc.returncode}: {err.decode(self.config.encoding, 'replace').strip()}"
            )
        return out.decode(self.config.encoding)

    async def segment(self, sentence: str) -> list[Clause]:
        raw_mecab = await self._run(self.config.mecab_command, sentence + "\n")
        raw_jdepp = await self._run(self.config.jdepp_command, raw_mecab)
        clauses = parse_jdepp(raw_jdepp)
        if not clauses:
            raise SegmentationError(f"No clauses found for {sentence!r}")
        logger.debug(f"Segmented {sentence!r} into {len(clauses)} clauses")
        return clauses
