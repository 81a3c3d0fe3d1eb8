"""
Annotated Markdown content: typed blocks, quizzes and their text form.
"""

from .models import (
    Bullet,
    ClozeQuiz,
    Content,
    FreeText,
    Quiz,
    QUIZ_TYPES,
    ReadingQuiz,
    RelatedQuiz,
    SentenceBlock,
    blocks_of,
    is_quiz,
    quiz_prompt,
)
from .parser import BlockParser, parse, serialize

__all__ = [
    "BlockParser",
    "Bullet",
    "ClozeQuiz",
    "Content",
    "FreeText",
    "QUIZ_TYPES",
    "Quiz",
    "ReadingQuiz",
    "RelatedQuiz",
    "SentenceBlock",
    "blocks_of",
    "is_quiz",
    "parse",
    "quiz_prompt",
    "serialize",
]
