"""Question definitions and branching rules for the answer collector.

The question sequence is never held in a mutable list.  Instead
:func:`next_question_group` looks at the answers gathered so far and returns
the next immutable group of questions, or ``None`` once collection is
complete.  Later groups depend on earlier answers: the ORM choices depend on
the server framework, and the runtime question is only asked for a
JavaScript server that uses an ORM.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Choice constants
# ---------------------------------------------------------------------------

CLIENT = "Client"
SERVER = "Server"
PROJECT_TYPES = (CLIENT, SERVER)

NPM = "npm"
BUN = "bun(recommended)"
RUNTIMES = (NPM, BUN)

CREATE_REACT_APP = "Create React App (not recommended)"
VITE_TS = "Vite App (TypeScript) (recommended)"
VITE_JS = "Vite App (JavaScript)"
REACT_TYPES = (CREATE_REACT_APP, VITE_TS, VITE_JS)

NOTHING = "Nothing"
UI_LIBRARIES = ("MUI", "DaisyUI", "ChakraUI", NOTHING)

FETCH_API = "Fetch API"
FETCHING_LIBRARIES = (FETCH_API, "Axios")

STATE_MANAGEMENT = ("MobX", "Redux", "Zustand", NOTHING)

EXPRESS_TS = "Express (TypeScript) (recommended)"
FASTIFY_TS = "Fastify (TypeScript) (recommended)"
EXPRESS = "Express"
FASTIFY = "Fastify"
FASTAPI = "FastAPI"
SERVER_TYPES = (EXPRESS_TS, FASTIFY_TS, EXPRESS, FASTIFY, FASTAPI)

JS_ORMS = ("Prisma", "Sequelize", NOTHING)
PYTHON_ORMS = ("SQLAlchemy", "Tortoise-ORM", NOTHING)

APP_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
APP_NAME_ERROR = "App name may only include letters, numbers, underscores, and hyphens."


# ---------------------------------------------------------------------------
# Question model
# ---------------------------------------------------------------------------


class QuestionKind(str, Enum):
    """How a question is presented to the user."""
    SELECT = "select"
    CONFIRM = "confirm"
    TEXT = "text"


class Question(BaseModel):
    """A single question of a group.

    ``key`` is the answer name (camelCase, as stored in answer files).
    ``choices`` is only meaningful for ``SELECT`` questions.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    kind: QuestionKind
    message: str
    choices: tuple[str, ...] = Field(default_factory=tuple)
    default: Optional[Union[str, bool]] = None

    def validate_answer(self, value: Any) -> Union[bool, str]:
        """Return ``True`` when *value* is acceptable, else an error message."""
        if self.key == "appName":
            return validate_app_name(value)
        return True


QuestionGroup = tuple[Question, ...]


def validate_app_name(value: Any) -> Union[bool, str]:
    """Validate a project name.

    Returns ``True`` for names made only of letters, digits, underscores and
    hyphens, otherwise the error message to show (questionary's validator
    contract).

    Examples::

        validate_app_name("my-app_1") -> True
        validate_app_name("a/b")      -> "App name may only include ..."
    """
    if isinstance(value, str) and APP_NAME_PATTERN.fullmatch(value):
        return True
    return APP_NAME_ERROR


# ---------------------------------------------------------------------------
# Question catalogue
# ---------------------------------------------------------------------------

PROJECT_TYPE_QUESTION = Question(
    key="projectType",
    kind=QuestionKind.SELECT,
    message="Is this a client or server project?",
    choices=PROJECT_TYPES,
)

RUNTIME_QUESTION = Question(
    key="runtime",
    kind=QuestionKind.SELECT,
    message="Which runtime do you want to use?",
    choices=RUNTIMES,
)

APP_NAME_QUESTION = Question(
    key="appName",
    kind=QuestionKind.TEXT,
    message="What is the name of your app?",
)

CLIENT_QUESTIONS: QuestionGroup = (
    RUNTIME_QUESTION,
    Question(
        key="reactType",
        kind=QuestionKind.SELECT,
        message="Which React app do you want?",
        choices=REACT_TYPES,
    ),
    Question(
        key="uiLibrary",
        kind=QuestionKind.SELECT,
        message="Which UI library do you want?",
        choices=UI_LIBRARIES,
    ),
    Question(
        key="tailwind",
        kind=QuestionKind.CONFIRM,
        message="Do you want to use Tailwind CSS? (recommended)",
        default=True,
    ),
    Question(
        key="fetchingLibrary",
        kind=QuestionKind.SELECT,
        message="Which library do you want for fetching data?",
        choices=FETCHING_LIBRARIES,
    ),
    Question(
        key="stateManagement",
        kind=QuestionKind.SELECT,
        message="Which state management library do you want?",
        choices=STATE_MANAGEMENT,
    ),
    APP_NAME_QUESTION,
)

SERVER_QUESTIONS: QuestionGroup = (
    Question(
        key="serverType",
        kind=QuestionKind.SELECT,
        message="Which server framework do you want?",
        choices=SERVER_TYPES,
    ),
    APP_NAME_QUESTION,
)


# ---------------------------------------------------------------------------
# Branching rules
# ---------------------------------------------------------------------------


def is_js_server(server_type: Optional[str]) -> bool:
    """Express and Fastify, in either language variant."""
    return bool(server_type) and server_type.startswith((EXPRESS, FASTIFY))


def is_typescript_server(server_type: Optional[str]) -> bool:
    return is_js_server(server_type) and "(TypeScript)" in server_type


def orm_choices(server_type: Optional[str]) -> tuple[str, ...]:
    """ORM choices offered for *server_type*."""
    if is_js_server(server_type):
        return JS_ORMS
    if server_type == FASTAPI:
        return PYTHON_ORMS
    return (NOTHING,)


def needs_runtime(server_type: Optional[str], orm: Optional[str]) -> bool:
    """Whether a server project must still be asked for its package runtime."""
    return server_type != FASTAPI and orm is not None and orm != NOTHING


def next_question_group(answers: Mapping[str, Any]) -> Optional[QuestionGroup]:
    """Return the next group of questions to ask, or ``None`` when done.

    Args:
        answers: Everything collected so far, keyed by question ``key``.
    """
    project_type = answers.get("projectType")
    if project_type is None:
        return (PROJECT_TYPE_QUESTION,)

    if project_type == CLIENT:
        if "reactType" not in answers:
            return CLIENT_QUESTIONS
        return None

    if project_type == SERVER:
        server_type = answers.get("serverType")
        if server_type is None:
            return SERVER_QUESTIONS
        if "orm" not in answers:
            return (
                Question(
                    key="orm",
                    kind=QuestionKind.SELECT,
                    message="Which ORM do you want to use?",
                    choices=orm_choices(server_type),
                ),
            )
        if "runtime" not in answers and needs_runtime(server_type, answers["orm"]):
            return (RUNTIME_QUESTION,)
        return None

    # Unknown project types have nothing further to ask.
    return None
