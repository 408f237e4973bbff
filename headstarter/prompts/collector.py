"""Interactive answer collection.

:class:`AnswerCollector` drives :func:`next_question_group` until it reports
completion, asking each group through a prompt provider.  The default
provider renders questions with ``questionary``; tests substitute a scripted
coroutine.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

import questionary
from questionary import Style

from headstarter.utils import print_warning

from .answers import AnswerSet
from .questions import Question, QuestionGroup, QuestionKind, next_question_group

PromptProvider = Callable[[QuestionGroup], Awaitable[dict[str, Any]]]

PROMPT_STYLE = Style.from_dict({
    "question": "bold",
    "answer": "#FF910A bold",
    "pointer": "#FF4500 bold",
    "highlighted": "#63CD91 bold",
    "instruction": "#757575",
})


def build_prompt(question: Question) -> questionary.Question:
    """Create the questionary widget for *question*."""
    if question.kind is QuestionKind.SELECT:
        return questionary.select(
            question.message,
            choices=list(question.choices),
            default=question.default,
            style=PROMPT_STYLE,
        )
    if question.kind is QuestionKind.CONFIRM:
        return questionary.confirm(
            question.message,
            default=bool(question.default) if question.default is not None else True,
            style=PROMPT_STYLE,
        )
    return questionary.text(
        question.message,
        validate=question.validate_answer,
        style=PROMPT_STYLE,
    )


async def ask_with_questionary(group: QuestionGroup) -> dict[str, Any]:
    """Ask every question of *group* in order and return the answers.

    ``unsafe_ask_async`` lets Ctrl-C surface as ``KeyboardInterrupt`` instead
    of silently returning ``None``.
    """
    answers: dict[str, Any] = {}
    for question in group:
        answers[question.key] = await build_prompt(question).unsafe_ask_async()
    return answers


class AnswerCollector:
    """Gathers a finalized :class:`AnswerSet` from the user."""

    def __init__(self, ask_group: Optional[PromptProvider] = None) -> None:
        self.ask_group = ask_group or ask_with_questionary

    async def collect(self) -> AnswerSet:
        """Ask question groups until none remain.

        The answer set is built as soon as the app name is known; answers
        from later groups (``orm``, ``runtime``) are merged into it.
        """
        answers: dict[str, Any] = {}
        answer_set: Optional[AnswerSet] = None
        group = next_question_group(answers)
        while group is not None:
            fragment = await self.ask_group(group)
            settled: dict[str, Any] = {}
            for question in group:
                settled[question.key] = await self._settle(question, fragment.get(question.key))
            answers.update(settled)

            if answer_set is not None:
                answer_set = answer_set.merge(**settled)
            elif "appName" in answers:
                answer_set = AnswerSet.model_validate(answers)
            group = next_question_group(answers)

        if answer_set is None:
            answer_set = AnswerSet.model_validate(answers)
        return answer_set

    async def _settle(self, question: Question, value: Any) -> Any:
        """Re-ask *question* until the provider returns a valid answer."""
        verdict = question.validate_answer(value)
        while verdict is not True:
            print_warning(verdict)
            fragment = await self.ask_group((question,))
            value = fragment.get(question.key)
            verdict = question.validate_answer(value)
        return value
