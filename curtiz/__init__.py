"""
Curtiz - spaced repetition for Japanese sentences kept in Markdown.

Sentences live in plain annotated Markdown. Curtiz segments them into
clozes, keeps a Bayesian recall model per quiz next to the quiz itself, and
reviews whichever quiz is most likely forgotten.
"""

__version__ = "1.0.0"

from .content import parse, serialize
from .context import generate, resolve
from .extraction import verify, verify_all
from .recall import RecallModel
from .study import administer, grade, learn, schedule_report, select_quiz

__all__ = [
    "RecallModel",
    "administer",
    "generate",
    "grade",
    "learn",
    "parse",
    "resolve",
    "schedule_report",
    "select_quiz",
    "serialize",
    "verify",
    "verify_all",
]
