"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from curtiz.config import CurtizConfig
from curtiz.errors import SegmentationError
from curtiz.extraction.segmenter import Clause, Morpheme

YAMADA = "山田は先生にほめられた"
NINJIN = "にんじんは先生にほめられた"
TRANSLATION = "Yamada was praised by the teacher"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def morpheme(literal, *pos, pronunciation=None, lemma=None, lemma_reading=None):
    """Build a morpheme; unspecified readings default to the literal."""
    pronunciation = pronunciation or literal
    return Morpheme(
        literal=literal,
        pronunciation=pronunciation,
        lemma=lemma or literal,
        lemma_reading=lemma_reading or pronunciation,
        part_of_speech=tuple(pos),
    )


def praised_clauses(subject: list[Morpheme]) -> list[Clause]:
    """Clauses of `<subject>は先生にほめられた`."""
    return [
        subject + [morpheme("は", "particle", "binding_particle", pronunciation="ワ", lemma_reading="ハ")],
        [
            morpheme("先生", "noun", "common_noun", pronunciation="センセー", lemma_reading="センセイ"),
            morpheme("に", "particle", "case_particle", pronunciation="ニ"),
        ],
        [
            morpheme("ほめ", "verb", "general", pronunciation="ホメ", lemma="褒める", lemma_reading="ホメル"),
            morpheme("られ", "auxiliary_verb", pronunciation="ラレ", lemma="られる", lemma_reading="ラレル"),
            morpheme("た", "auxiliary_verb", pronunciation="タ"),
        ],
    ]


SEGMENTATIONS = {
    YAMADA: praised_clauses(
        [morpheme("山田", "noun", "proper_noun", pronunciation="ヤマダ", lemma_reading="ヤマダ")]
    ),
    NINJIN: praised_clauses(
        [morpheme("にんじん", "noun", "common_noun", pronunciation="ニンジン", lemma="人参", lemma_reading="ニンジン")]
    ),
}


class FakeSegmenter:
    """Segmenter with canned output; unknown sentences fail."""

    def __init__(self, segmentations=None):
        self.segmentations = dict(SEGMENTATIONS if segmentations is None else segmentations)
        self.calls = []

    async def segment(self, sentence):
        self.calls.append(sentence)
        if sentence not in self.segmentations:
            raise SegmentationError(f"no canned segmentation for {sentence!r}")
        return self.segmentations[sentence]


@pytest.fixture
def config():
    """Default configuration, ignoring any .env file."""
    return CurtizConfig(_env_file=None)


@pytest.fixture
def now():
    """A fixed clock."""
    return datetime(2019, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def later(now):
    return now + timedelta(hours=1)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def segmenter():
    return FakeSegmenter()


@pytest.fixture
def yamada_text():
    """An unparsed sentence block, as a user would first write it."""
    return f"# ◊sent :: {TRANSLATION} :: {YAMADA}\n"


@pytest.fixture
def yamada_parsed_text():
    """The same block after parsing."""
    return (
        f"# ◊sent やまだはせんせいにほめられた :: {TRANSLATION} :: {YAMADA}\n"
        "- ◊cloze は\n"
        "- ◊cloze に\n"
        "- ◊cloze ほめられた\n"
        "- ◊related?? やまだ :: ? :: 山田\n"
        "- ◊related?? せんせい :: ? :: 先生\n"
    )


@pytest.fixture
def make_segmenter():
    """Build a fake segmenter from {sentence: clauses}; defaults to the canned sentences."""
    return FakeSegmenter


@pytest.fixture
def segmentations():
    return dict(SEGMENTATIONS)
