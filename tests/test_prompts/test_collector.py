"""Tests for the AnswerCollector loop and the questionary prompt provider."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from headstarter.prompts.answers import AnswerSet
from headstarter.prompts.collector import AnswerCollector, ask_with_questionary, build_prompt
from headstarter.prompts.questions import (
    APP_NAME_QUESTION,
    PROJECT_TYPE_QUESTION,
    Question,
    QuestionGroup,
    QuestionKind,
)

pytestmark = pytest.mark.unit


class ScriptedPrompt:
    """Answers each question from a queue of values per key."""

    def __init__(self, **answers: Any) -> None:
        self.answers = {key: list(values) if isinstance(values, list) else [values]
                        for key, values in answers.items()}
        self.groups: list[list[str]] = []

    async def __call__(self, group: QuestionGroup) -> dict[str, Any]:
        self.groups.append([question.key for question in group])
        return {question.key: self.answers[question.key].pop(0) for question in group}


# ---------------------------------------------------------------------------
# AnswerCollector
# ---------------------------------------------------------------------------


class TestAnswerCollector:
    @pytest.mark.asyncio
    async def test_client_flow(self):
        prompt = ScriptedPrompt(
            projectType="Client",
            runtime="bun(recommended)",
            reactType="Vite App (TypeScript) (recommended)",
            uiLibrary="MUI",
            tailwind=True,
            fetchingLibrary="Axios",
            stateManagement="Zustand",
            appName="web",
        )
        answers = await AnswerCollector(prompt).collect()

        assert answers.is_client
        assert answers.runtime == "bun(recommended)"
        assert answers.tailwind is True
        assert answers.app_name == "web"
        assert prompt.groups[0] == ["projectType"]
        assert prompt.groups[1][0] == "runtime"
        assert len(prompt.groups) == 2

    @pytest.mark.asyncio
    async def test_server_flow_with_orm_asks_runtime_last(self):
        prompt = ScriptedPrompt(
            projectType="Server",
            serverType="Express (TypeScript) (recommended)",
            appName="api",
            orm="Prisma",
            runtime="npm",
        )
        answers = await AnswerCollector(prompt).collect()

        assert prompt.groups == [
            ["projectType"],
            ["serverType", "appName"],
            ["orm"],
            ["runtime"],
        ]
        assert answers.orm == "Prisma"
        assert answers.runtime == "npm"

    @pytest.mark.asyncio
    async def test_late_answers_are_merged(self):
        prompt = ScriptedPrompt(
            projectType="Server",
            serverType="Fastify",
            appName="api",
            orm="Sequelize",
            runtime="bun(recommended)",
        )
        with patch.object(
            AnswerSet, "merge", autospec=True, side_effect=AnswerSet.merge
        ) as merge:
            answers = await AnswerCollector(prompt).collect()

        assert [call.kwargs for call in merge.call_args_list] == [
            {"orm": "Sequelize"},
            {"runtime": "bun(recommended)"},
        ]
        assert answers.orm == "Sequelize"
        assert answers.runtime == "bun(recommended)"

    @pytest.mark.asyncio
    async def test_fastapi_flow_skips_runtime(self):
        prompt = ScriptedPrompt(
            projectType="Server", serverType="FastAPI", appName="api", orm="SQLAlchemy"
        )
        answers = await AnswerCollector(prompt).collect()

        assert ["runtime"] not in prompt.groups
        assert answers.runtime is None
        assert answers.orm == "SQLAlchemy"

    @pytest.mark.asyncio
    async def test_invalid_app_name_is_reprompted(self):
        prompt = ScriptedPrompt(
            projectType="Server",
            serverType="Fastify",
            appName=["my app", "../evil", "my-api"],
            orm="Nothing",
        )
        with patch("headstarter.prompts.collector.print_warning") as warn:
            answers = await AnswerCollector(prompt).collect()

        assert answers.app_name == "my-api"
        assert prompt.groups.count(["appName"]) == 2
        assert warn.call_count == 2

    @pytest.mark.asyncio
    async def test_keyboard_interrupt_propagates(self):
        async def interrupted(group: QuestionGroup) -> dict[str, Any]:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            await AnswerCollector(interrupted).collect()


# ---------------------------------------------------------------------------
# questionary provider
# ---------------------------------------------------------------------------


class TestQuestionaryProvider:
    def test_select_prompt(self):
        with patch("headstarter.prompts.collector.questionary") as questionary:
            build_prompt(PROJECT_TYPE_QUESTION)
        kwargs = questionary.select.call_args.kwargs
        assert kwargs["choices"] == ["Client", "Server"]

    def test_confirm_prompt_defaults_to_yes(self):
        question = Question(key="tailwind", kind=QuestionKind.CONFIRM, message="Tailwind?")
        with patch("headstarter.prompts.collector.questionary") as questionary:
            build_prompt(question)
        assert questionary.confirm.call_args.kwargs["default"] is True

    def test_text_prompt_validates_app_name(self):
        with patch("headstarter.prompts.collector.questionary") as questionary:
            build_prompt(APP_NAME_QUESTION)
        validate = questionary.text.call_args.kwargs["validate"]
        assert validate("ok-name") is True
        assert validate("bad name") != True  # noqa: E712

    @pytest.mark.asyncio
    async def test_ask_with_questionary(self):
        widget = MagicMock()
        widget.unsafe_ask_async = AsyncMock(side_effect=["Server"])
        with patch("headstarter.prompts.collector.build_prompt", return_value=widget):
            answers = await ask_with_questionary((PROJECT_TYPE_QUESTION,))
        assert answers == {"projectType": "Server"}
