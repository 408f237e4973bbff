"""headstarter prompts -- collects the user's scaffold decisions.

Quick usage::

    from headstarter.prompts import AnswerCollector

    answers = await AnswerCollector().collect()
"""

from .answers import AnswerSet, AnswersFileError
from .collector import AnswerCollector, ask_with_questionary
from .questions import (
    Question,
    QuestionKind,
    next_question_group,
    orm_choices,
    validate_app_name,
)

__all__ = [
    "AnswerCollector",
    "AnswerSet",
    "AnswersFileError",
    "Question",
    "QuestionKind",
    "ask_with_questionary",
    "next_question_group",
    "orm_choices",
    "validate_app_name",
]
