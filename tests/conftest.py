"""Shared pytest fixtures for the headstarter test suite.

Provides reusable fixtures for:
- Answer sets for the client and server branches
- A recording fake command runner that mimics what the real tools create
- A silent progress reporter
- Mock subprocess helpers
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from headstarter.config import Config
from headstarter.prompts.answers import AnswerSet
from headstarter.scaffolder.executor import PlanExecutor
from headstarter.scaffolder.progress import ProgressReporter


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


def _created_app_name(tokens: list[str]) -> Optional[str]:
    for marker in ("create-react-app", "vite@latest", "vite"):
        if marker in tokens:
            index = tokens.index(marker)
            if index + 1 < len(tokens):
                return tokens[index + 1]
    return None


def simulate_command(command: str, cwd: Path) -> None:
    """Create the files the real package-manager command would have created."""
    tokens = command.split()

    if "create" in tokens or "create-react-app" in tokens:
        app_name = _created_app_name(tokens)
        if app_name:
            app_dir = cwd / app_name
            (app_dir / "src").mkdir(parents=True)
            (app_dir / "package.json").write_text(
                json.dumps({"name": app_name, "private": True}), encoding="utf-8"
            )
            (app_dir / "src" / "index.css").write_text("body { margin: 0; }\n", encoding="utf-8")
        return

    if command.endswith("init -y"):
        (cwd / "package.json").write_text(
            json.dumps({"name": cwd.name, "version": "1.0.0", "scripts": {"test": "exit 1"}}),
            encoding="utf-8",
        )
    elif command.endswith("tailwindcss init -p"):
        (cwd / "tailwind.config.js").write_text(
            "module.exports = {\n  plugins: [],\n};\n", encoding="utf-8"
        )
    elif command.endswith("prisma init"):
        (cwd / "prisma").mkdir(exist_ok=True)
        (cwd / "prisma" / "schema.prisma").write_text("// generated\n", encoding="utf-8")
    elif command.endswith("sequelize-cli init"):
        (cwd / "config").mkdir(exist_ok=True)
    elif " -m venv " in command:
        (cwd / command.split()[-1]).mkdir()


class FakeRunner:
    """Records every command and succeeds, except on call number ``fail_on``."""

    def __init__(self, fail_on: Optional[int] = None, returncode: int = 1) -> None:
        self.fail_on = fail_on
        self.returncode = returncode
        self.calls: list[tuple[str, Path]] = []

    async def __call__(
        self,
        cmd: str,
        cwd: Any = None,
        timeout: Optional[float] = None,
    ) -> tuple[int, str]:
        workdir = Path(cwd) if cwd is not None else Path(".")
        self.calls.append((cmd, workdir))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            return (self.returncode, "simulated failure")
        simulate_command(cmd, workdir)
        return (0, "")

    @property
    def commands(self) -> list[str]:
        return [cmd for cmd, _ in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A fake runner that never fails."""
    return FakeRunner()


# ---------------------------------------------------------------------------
# Reporter & executor
# ---------------------------------------------------------------------------


@pytest.fixture
def output() -> io.StringIO:
    """Buffer receiving everything the quiet console prints."""
    return io.StringIO()


@pytest.fixture
def quiet_reporter(output: io.StringIO) -> ProgressReporter:
    """Progress reporter writing to an in-memory buffer instead of the terminal."""
    return ProgressReporter(console=Console(file=output, force_terminal=False, width=120))


@pytest.fixture
def make_executor(tmp_path: Path, quiet_reporter: ProgressReporter) -> Callable[..., PlanExecutor]:
    """Factory for executors rooted in ``tmp_path``."""
    def factory(runner: Any, **kwargs: Any) -> PlanExecutor:
        return PlanExecutor(base_dir=tmp_path, runner=runner, reporter=quiet_reporter, **kwargs)

    return factory


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config rooted in ``tmp_path`` with a fixed interpreter name."""
    return Config(base_dir=tmp_path, python_executable="python3")


# ---------------------------------------------------------------------------
# Answer sets
# ---------------------------------------------------------------------------


@pytest.fixture
def client_answers() -> Callable[..., AnswerSet]:
    """Factory for client answer sets; defaults select nothing optional."""
    def factory(**overrides: Any) -> AnswerSet:
        data: dict[str, Any] = {
            "projectType": "Client",
            "runtime": "npm",
            "reactType": "Vite App (TypeScript) (recommended)",
            "uiLibrary": "Nothing",
            "tailwind": False,
            "fetchingLibrary": "Fetch API",
            "stateManagement": "Nothing",
            "appName": "my-client",
        }
        data.update(overrides)
        return AnswerSet.model_validate(data)

    return factory


@pytest.fixture
def server_answers() -> Callable[..., AnswerSet]:
    """Factory for server answer sets; defaults to Express (TypeScript) without an ORM."""
    def factory(**overrides: Any) -> AnswerSet:
        data: dict[str, Any] = {
            "projectType": "Server",
            "serverType": "Express (TypeScript) (recommended)",
            "appName": "my-server",
            "orm": "Nothing",
        }
        data.update(overrides)
        return AnswerSet.model_validate(data)

    return factory


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with a
    configurable return code.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(returncode=0)
            with patch("asyncio.create_subprocess_shell", return_value=proc):
                ...
    """
    def factory(returncode: int = 0) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
