"""Plan derivation.

Turns a finalized :class:`AnswerSet` into an ordered :class:`Plan`.  The
derivation is pure: commands are composed as strings and generated file
contents are rendered from templates, but nothing touches the filesystem or
spawns a process until the plan is handed to the executor.

:func:`count_tasks` computes the declared task total from the answers alone.
It must always agree with ``derive_plan(answers).total_tasks``.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass, replace
from typing import Optional

from headstarter.config import Config
from headstarter.prompts.answers import AnswerSet
from headstarter.prompts.questions import (
    BUN,
    CREATE_REACT_APP,
    EXPRESS,
    FASTAPI,
    FETCH_API,
    NOTHING,
    VITE_JS,
    VITE_TS,
    is_js_server,
    is_typescript_server,
)

from .steps import (
    EnsureAbsent,
    EnterDirectory,
    ExpectFile,
    MakeDirectory,
    Plan,
    PrependFile,
    ReplaceInFile,
    RunCommand,
    Step,
    Task,
    UpdateJsonFile,
    WriteFile,
)
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Package managers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageManager:
    """Command prefixes for one JavaScript runtime."""

    name: str
    install: str
    install_dev: str
    execute: str
    init: str
    install_all: str

    @classmethod
    def for_runtime(cls, runtime: Optional[str]) -> "PackageManager":
        """Bun for ``bun(recommended)``, npm for anything else (including unset)."""
        return BUN_PACKAGE_MANAGER if runtime == BUN else NPM_PACKAGE_MANAGER

    def create_react_app(self, react_type: Optional[str], app_name: str) -> Optional[str]:
        """Command creating the React app, or ``None`` for an unknown flavour."""
        if react_type == CREATE_REACT_APP:
            return f"{self.execute} create-react-app {app_name}"
        if react_type in (VITE_TS, VITE_JS):
            template = "react-ts" if react_type == VITE_TS else "react"
            if self.name == "npm":
                return f"npm create vite@latest {app_name} -- --template {template}"
            return f"bun create vite {app_name} --template {template}"
        return None


NPM_PACKAGE_MANAGER = PackageManager(
    name="npm",
    install="npm install",
    install_dev="npm install -D",
    execute="npx",
    init="npm init -y",
    install_all="npm install",
)

BUN_PACKAGE_MANAGER = PackageManager(
    name="bun",
    install="bun add",
    install_dev="bun add -d",
    execute="bunx",
    init="bun init -y",
    install_all="bun install",
)


# ---------------------------------------------------------------------------
# Package catalogues
# ---------------------------------------------------------------------------

UI_LIBRARY_PACKAGES: dict[str, tuple[str, str]] = {
    "MUI": ("Installing MUI", "@mui/material @emotion/react @emotion/styled"),
    "ChakraUI": (
        "Installing Chakra UI",
        "@chakra-ui/react @emotion/react @emotion/styled framer-motion",
    ),
}

# ``tailwindcss init`` was removed in Tailwind 4.
TAILWIND_PACKAGES = "tailwindcss@3 postcss autoprefixer"

PROJECT_FOLDERS = ("models", "controllers", "config", "routes", "utils")


@dataclass(frozen=True)
class NodeFramework:
    label: str
    packages: str
    dev_packages: str
    template_dir: str


NODE_FRAMEWORKS: dict[str, NodeFramework] = {
    "express": NodeFramework(
        label="Express",
        packages="express dotenv jsonwebtoken cors",
        dev_packages="typescript @types/node @types/express ts-node nodemon",
        template_dir="server/express",
    ),
    "fastify": NodeFramework(
        label="Fastify",
        packages="fastify @fastify/cors @fastify/jwt dotenv",
        dev_packages="typescript ts-node nodemon @types/node",
        template_dir="server/fastify",
    ),
}

TYPESCRIPT_SCRIPTS = {
    "start": "ts-node src/index.ts",
    "dev": "nodemon src/index.ts",
}

# ORM -> (package, template)
PYTHON_ORM_SETUP: dict[str, tuple[str, str]] = {
    "SQLAlchemy": ("SQLAlchemy", "server/fastapi/database_sqlalchemy.py.j2"),
    "Tortoise-ORM": ("tortoise-orm", "server/fastapi/database_tortoise.py.j2"),
}

NODE_ORM_SETUP = ("Prisma", "Sequelize")

PRISMA_NOTE = (
    "Prisma has been initialized. You can now define your data models in "
    "prisma/schema.prisma and run 'prisma migrate dev' to create the database."
)
SEQUELIZE_NOTE = (
    "Sequelize has been initialized. You can now define your models and run "
    "migrations using Sequelize CLI."
)


# ---------------------------------------------------------------------------
# Task accumulation
# ---------------------------------------------------------------------------


class _TaskList:
    """Ordered task accumulator.

    Steps passed to :meth:`extend` join the most recent task; before any task
    exists they are held and prepended to the first one.
    """

    def __init__(self) -> None:
        self._tasks: list[Task] = []
        self._pending: list[Step] = []

    def add(self, name: str, *steps: Step, note: Optional[str] = None) -> None:
        self._tasks.append(Task(name=name, steps=(*self._pending, *steps), note=note))
        self._pending.clear()

    def extend(self, *steps: Step) -> None:
        if not self._tasks:
            self._pending.extend(steps)
            return
        last = self._tasks[-1]
        self._tasks[-1] = replace(last, steps=last.steps + steps)

    def build(self) -> tuple[Task, ...]:
        return tuple(self._tasks)


def _selected(value: Optional[str]) -> bool:
    return value is not None and value != NOTHING


def _wants_fetching_library(value: Optional[str]) -> bool:
    return value is not None and value != FETCH_API


def _quote(arg: str) -> str:
    if os.name == "nt":
        return subprocess.list2cmdline([arg])
    return shlex.quote(arg)


def _folders(*names: str, parent: str = "") -> list[MakeDirectory]:
    return [MakeDirectory(f"{parent}/{name}" if parent else name) for name in names]


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


class ProjectPlanner:
    """Derives the ordered task plan for a client or server project."""

    def __init__(
        self,
        config: Optional[Config] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        self.config = config or Config()
        self.renderer = renderer or TemplateRenderer()

    def plan(self, answers: AnswerSet) -> Plan:
        tasks = _TaskList()
        if answers.is_client:
            self._client_tasks(answers, tasks)
        elif answers.is_server:
            self._server_tasks(answers, tasks)
        return Plan(
            app_name=answers.app_name,
            project_type=answers.project_type,
            tasks=tasks.build(),
        )

    # -- Client ------------------------------------------------------------

    def _client_tasks(self, answers: AnswerSet, tasks: _TaskList) -> None:
        pm = PackageManager.for_runtime(answers.runtime)
        app = answers.app_name
        context = {"app_name": app, "daisyui": answers.ui_library == "DaisyUI"}

        tasks.add("Checking target directory", EnsureAbsent(app))
        create = pm.create_react_app(answers.react_type, app)
        tasks.add("Creating React app", *([RunCommand(create)] if create else []))
        tasks.add("Entering project directory", EnterDirectory(app))
        tasks.add("Installing dependencies", RunCommand(pm.install_all))

        ui = answers.ui_library
        if _selected(ui):
            if ui in UI_LIBRARY_PACKAGES:
                label, packages = UI_LIBRARY_PACKAGES[ui]
                tasks.add(label, RunCommand(f"{pm.install} {packages}"))
            elif ui == "DaisyUI":
                tasks.add(
                    "Installing DaisyUI",
                    RunCommand(f"{pm.install_dev} daisyui@latest"),
                    ReplaceInFile(
                        "tailwind.config.js",
                        old="plugins: [],",
                        new="plugins: [require('daisyui')],",
                    ),
                )
            else:
                tasks.add(f"Installing {ui}", RunCommand(f"{pm.install} {ui.lower()}"))

        if answers.tailwind:
            tasks.add(
                "Installing Tailwind CSS",
                RunCommand(f"{pm.install_dev} {TAILWIND_PACKAGES}"),
            )
            tasks.add(
                "Initializing Tailwind CSS",
                RunCommand(f"{pm.execute} tailwindcss init -p"),
            )
            tasks.add(
                "Writing Tailwind configuration",
                PrependFile("src/index.css", self.renderer.render("client/index.css.j2", context)),
                WriteFile(
                    "tailwind.config.js",
                    self.renderer.render("client/tailwind.config.js.j2", context),
                ),
                WriteFile(
                    "postcss.config.cjs",
                    self.renderer.render("client/postcss.config.cjs.j2", context),
                ),
            )

        fetching = answers.fetching_library
        if _wants_fetching_library(fetching):
            tasks.add(f"Installing {fetching}", RunCommand(f"{pm.install} {fetching.lower()}"))

        state = answers.state_management
        if _selected(state):
            tasks.add(f"Installing {state}", RunCommand(f"{pm.install} {state.lower()}"))

        tasks.add("Verifying package manifest", ExpectFile("package.json"))
        tasks.add("Finalizing client project")

    # -- Server ------------------------------------------------------------

    def _server_tasks(self, answers: AnswerSet, tasks: _TaskList) -> None:
        app = answers.app_name
        tasks.extend(MakeDirectory(app), EnterDirectory(app))

        if answers.server_type == FASTAPI:
            self._fastapi_tasks(answers, tasks)
        elif is_js_server(answers.server_type):
            self._node_server_tasks(answers, tasks)

        tasks.add("Finalizing server project")

    def _fastapi_tasks(self, answers: AnswerSet, tasks: _TaskList) -> None:
        context = {"app_name": answers.app_name}
        python = _quote(self.config.python_executable)
        venv = _quote(self.config.venv_dir)
        pip = f"{_quote(self.config.venv_python)} -m pip install"

        tasks.add(
            "Creating virtual environment",
            RunCommand(f"{python} -m venv {venv}"),
        )
        tasks.add(
            "Installing FastAPI and dependencies",
            RunCommand(f"{pip} fastapi uvicorn python-dotenv"),
        )
        tasks.extend(
            *_folders(*PROJECT_FOLDERS),
            WriteFile("main.py", self.renderer.render("server/fastapi/main.py.j2", context)),
        )

        if answers.orm in PYTHON_ORM_SETUP:
            package, template = PYTHON_ORM_SETUP[answers.orm]
            tasks.add(f"Installing {answers.orm}", RunCommand(f"{pip} {package}"))
            tasks.add(
                f"Writing {answers.orm} configuration",
                WriteFile("config/database.py", self.renderer.render(template, context)),
            )

    def _node_server_tasks(self, answers: AnswerSet, tasks: _TaskList) -> None:
        pm = PackageManager.for_runtime(answers.runtime)
        server_type = answers.server_type
        framework = NODE_FRAMEWORKS["express" if server_type.startswith(EXPRESS) else "fastify"]
        context = {"app_name": answers.app_name}

        tasks.add("Initializing project", RunCommand(pm.init))
        tasks.add(
            f"Installing {framework.label} and dependencies",
            RunCommand(f"{pm.install} {framework.packages}"),
        )

        if is_typescript_server(server_type):
            tasks.add(
                "Installing TypeScript and dev dependencies",
                RunCommand(f"{pm.install_dev} {framework.dev_packages}"),
            )
            tasks.add("Initializing TypeScript", RunCommand(f"{pm.execute} tsc --init"))
            tasks.add(
                "Writing TypeScript project structure",
                MakeDirectory("src"),
                *_folders(*PROJECT_FOLDERS, parent="src"),
                WriteFile(
                    "src/index.ts",
                    self.renderer.render(f"{framework.template_dir}/index.ts.j2", context),
                ),
                UpdateJsonFile("package.json", (("scripts", dict(TYPESCRIPT_SCRIPTS)),)),
            )
        else:
            tasks.extend(
                *_folders(*PROJECT_FOLDERS),
                WriteFile(
                    "index.js",
                    self.renderer.render(f"{framework.template_dir}/index.js.j2", context),
                ),
            )

        if answers.orm == "Prisma":
            tasks.add("Installing Prisma", RunCommand(f"{pm.install_dev} prisma"))
            tasks.add(
                "Initializing Prisma",
                RunCommand(f"{pm.execute} prisma init"),
                WriteFile(
                    "prisma/schema.prisma",
                    self.renderer.render("server/prisma/schema.prisma.j2", context),
                ),
                note=PRISMA_NOTE,
            )
        elif answers.orm == "Sequelize":
            tasks.add(
                "Installing Sequelize and Sequelize CLI",
                RunCommand(f"{pm.install} sequelize sequelize-cli"),
            )
            tasks.add(
                "Initializing Sequelize",
                RunCommand(f"{pm.execute} sequelize-cli init"),
                WriteFile(
                    "config/config.json",
                    self.renderer.render("server/sequelize/config.json.j2", context),
                ),
                note=SEQUELIZE_NOTE,
            )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def derive_plan(
    answers: AnswerSet,
    config: Optional[Config] = None,
    renderer: Optional[TemplateRenderer] = None,
) -> Plan:
    """Derive the plan for *answers*; see :class:`ProjectPlanner`."""
    return ProjectPlanner(config, renderer).plan(answers)


def count_tasks(answers: AnswerSet) -> int:
    """Declared task total for *answers*, computed without building a plan.

    Client: 6 base tasks, +1 UI library, +3 Tailwind, +1 fetching library,
    +1 state management.  Server: 1 final task, plus 2 for FastAPI (+2 with
    an ORM) or 2 for Express/Fastify (+3 for TypeScript, +2 with an ORM).
    """
    if answers.is_client:
        total = 6
        if _selected(answers.ui_library):
            total += 1
        if answers.tailwind:
            total += 3
        if _wants_fetching_library(answers.fetching_library):
            total += 1
        if _selected(answers.state_management):
            total += 1
        return total

    if answers.is_server:
        total = 1
        server_type = answers.server_type
        if server_type == FASTAPI:
            total += 2
            if answers.orm in PYTHON_ORM_SETUP:
                total += 2
        elif is_js_server(server_type):
            total += 2
            if is_typescript_server(server_type):
                total += 3
            if answers.orm in NODE_ORM_SETUP:
                total += 2
        return total

    return 0
