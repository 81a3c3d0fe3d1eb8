"""
Study sessions: learning, quiz selection, administration, grading and saving.
"""

from .scheduler import (
    GradeResult,
    ReviewScheduler,
    ScheduleRow,
    Selection,
    grade,
    is_correct,
    learn,
    no_jitter,
    random_jitter,
    schedule_report,
    select_quiz,
)
from .session import BlankFiller, administer, present, render_prompt
from .store import ContentFile, load_all

__all__ = [
    "BlankFiller",
    "ContentFile",
    "GradeResult",
    "ReviewScheduler",
    "ScheduleRow",
    "Selection",
    "administer",
    "grade",
    "is_correct",
    "learn",
    "load_all",
    "no_jitter",
    "present",
    "random_jitter",
    "render_prompt",
    "schedule_report",
    "select_quiz",
]
