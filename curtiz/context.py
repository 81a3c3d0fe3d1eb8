"""
Cloze context disambiguation.

A cloze is stored in the text by the shortest surrounding context that makes
it unique in its sentence: `生[に]ほ` picks the に between 先生 and ほめられた
out of にんじんは先生にほめられた. `generate` mints that form, `resolve` turns
it back into a gapped sentence.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import (
    AmbiguousClozeError,
    ClozeError,
    ClozeNotFoundError,
    ContextExhaustedError,
)

OPEN_BRACKET = "["
CLOSE_BRACKET = "]"


@dataclass
class Cloze:
    """
    A prompt with gaps.

    `contexts` holds literal text with `None` marking each gap; `answers`
    holds, per gap in order, every acceptable answer.
    """

    contexts: list[str | None]
    answers: list[list[str]] = field(default_factory=list)

    @property
    def num_gaps(self) -> int:
        return sum(1 for c in self.contexts if c is None)


def appears_exactly_once(haystack: str, needle: str) -> bool:
    hit = haystack.find(needle)
    return hit >= 0 and haystack.find(needle, hit + 1) < 0


def generate(left: str, cloze: str, right: str) -> str:
    """
    Build the shortest unique identity of `cloze` within `left + cloze + right`.

    Contexts grow by one character per side per step. Returns the bare cloze
    when no context is needed, else `leftContext[cloze]rightContext`.

    Raises:
        ContextExhaustedError: when both sides run out before uniqueness.
    """
    sentence = left + cloze + right
    length = 0
    left_context = ""
    right_context = ""
    while not appears_exactly_once(sentence, left_context + cloze + right_context):
        length += 1
        if length > len(left) and length > len(right):
            raise ContextExhaustedError(f"Ran out of context to build unique cloze for {cloze!r} in {sentence!r}")
        left_context = left[-length:] if length <= len(left) else left
        right_context = right[:length]

    if not left_context and not right_context:
        return cloze
    return f"{left_context}{OPEN_BRACKET}{cloze}{CLOSE_BRACKET}{right_context}"


def split_needle(needle: str) -> tuple[str, str, str]:
    """Split `left[cloze]right` into its three parts; a bare needle has empty contexts."""
    start = needle.find(OPEN_BRACKET)
    if start < 0:
        return "", needle, ""
    end = needle.find(CLOSE_BRACKET, start + 1)
    if end < 0 or end == start + 1:
        raise ClozeError(f"Malformed cloze context: {needle!r}")
    right = needle[end + 1:]
    if OPEN_BRACKET in right:
        raise ClozeError(f"More than one context unsupported: {needle!r}")
    return needle[:start], needle[start + 1:end], right


def resolve(haystack: str, needle: str) -> Cloze:
    """
    Locate a cloze in `haystack` and split the haystack around it.

    `needle` is either a bare literal or `left[cloze]right`. The full
    `left + cloze + right` must occur exactly once.

    Raises:
        ClozeNotFoundError: needle does not occur.
        AmbiguousClozeError: needle occurs more than once.
    """
    left_context, cloze, right_context = split_needle(needle)
    full = left_context + cloze + right_context

    hit = haystack.find(full)
    if hit < 0:
        raise ClozeNotFoundError(f"Cloze {needle!r} not found in {haystack!r}")
    if haystack.find(full, hit + 1) >= 0:
        if left_context or right_context:
            raise AmbiguousClozeError(f"Insufficient cloze context: {needle!r} in {haystack!r}")
        raise AmbiguousClozeError(f"Cloze context required: {needle!r} in {haystack!r}")

    start = hit + len(left_context)
    end = start + len(cloze)
    return Cloze(contexts=[haystack[:start], None, haystack[end:]], answers=[[cloze]])
