"""
Quiz item extraction from segmented sentences.
"""

from .extractor import (
    Candidate,
    QuizItemExtractor,
    VerificationFailure,
    find_candidates,
    sentence_reading,
    verify,
    verify_all,
)
from .segmenter import Clause, MecabJdeppSegmenter, Morpheme, Segmenter

__all__ = [
    "Candidate",
    "Clause",
    "MecabJdeppSegmenter",
    "Morpheme",
    "QuizItemExtractor",
    "Segmenter",
    "VerificationFailure",
    "find_candidates",
    "sentence_reading",
    "verify",
    "verify_all",
]
