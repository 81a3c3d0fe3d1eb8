"""
Unit tests for cloze context disambiguation.

Run: pytest tests/unit/test_context.py -v
"""
import pytest

from curtiz.context import Cloze, generate, resolve, split_needle
from curtiz.errors import AmbiguousClozeError, ClozeError, ClozeNotFoundError


class TestGenerate:
    """Minimal unique identities."""

    def test_unique_cloze_needs_no_context(self):
        assert generate("山田", "は", "先生にほめられた") == "は"

    def test_repeated_cloze_gets_one_character_each_side(self):
        assert generate("にんじんは先生", "に", "ほめられた") == "生[に]ほ"

    def test_context_grows_until_unique(self):
        assert generate("ab", "c", "abcab") == "ab[c]abc"

    def test_short_left_side_is_used_whole(self):
        # Nothing precedes the first に, so only the right side grows
        assert generate("", "に", "はに") == "[に]は"

    def test_split_needle(self):
        assert split_needle("生[に]ほ") == ("生", "に", "ほ")
        assert split_needle("に") == ("", "に", "")

    def test_generate_then_resolve_finds_the_same_gap(self):
        sentence = "にんじんは先生にほめられた"
        for left, cloze, right in [("", "に", "んじんは先生にほめられた"), ("にんじんは先生", "に", "ほめられた")]:
            result = resolve(sentence, generate(left, cloze, right))
            assert result.contexts == [left, None, right]
            assert result.answers == [[cloze]]


class TestResolve:
    """Locating a cloze in a haystack."""

    def test_bare_needle(self):
        result = resolve("山田は先生にほめられた", "は")
        assert result.contexts == ["山田", None, "先生にほめられた"]
        assert result.answers == [["は"]]

    def test_needle_with_context(self):
        result = resolve("にんじんは先生にほめられた", "生[に]ほ")
        assert result.contexts == ["にんじんは先生", None, "ほめられた"]
        assert result.answers == [["に"]]

    def test_missing_needle_raises(self):
        with pytest.raises(ClozeNotFoundError):
            resolve("山田は先生にほめられた", "が")

    def test_ambiguous_bare_needle_raises(self):
        with pytest.raises(AmbiguousClozeError, match="context required"):
            resolve("にんじんは先生にほめられた", "に")

    def test_ambiguous_context_raises(self):
        with pytest.raises(AmbiguousClozeError, match="Insufficient"):
            resolve("abxab abxab", "b[x]a")

    def test_two_contexts_unsupported(self):
        with pytest.raises(ClozeError):
            resolve("abc abc", "a[b]c[d]")

    def test_unclosed_bracket_raises(self):
        with pytest.raises(ClozeError):
            resolve("abc", "a[b")


class TestCloze:
    def test_num_gaps(self):
        cloze = Cloze(contexts=["山田", None, "先生", None, "ほめられた"], answers=[["は"], ["に"]])
        assert cloze.num_gaps == 2
