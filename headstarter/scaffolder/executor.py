"""Sequential, fail-fast plan execution.

Runs the tasks of a :class:`Plan` strictly one after another.  Every shell
command is awaited to completion before the next step starts, and the first
failing step stops the run: nothing after it executes and nothing already
done is rolled back.  Failures never escape :meth:`PlanExecutor.execute`;
they are reported through the returned :class:`ExecutionResult`, leaving the
exit-code decision to the caller.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from headstarter.config import Config
from headstarter.utils import format_duration, run_command

from .progress import ProgressReporter
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
    UpdateJsonFile,
    WriteFile,
)

Runner = Callable[..., Awaitable[tuple[int, str]]]


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Outcome of one task."""

    name: str
    status: TaskStatus = TaskStatus.PENDING
    duration_seconds: float = 0.0
    error: str = ""


@dataclass
class ExecutionState:
    """Mutable state shared by the steps of a single run."""

    cwd: Path
    completed_tasks: int = 0
    entered_directory: bool = False


@dataclass
class ExecutionResult:
    """Structured result of executing a plan."""

    success: bool
    completed_tasks: int
    total_tasks: int
    cwd: Path
    task_results: list[TaskResult] = field(default_factory=list)
    failed_task: Optional[str] = None
    error: str = ""
    duration_seconds: float = 0.0

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def summary(self) -> dict[str, str]:
        """Key/value rows for the final summary table."""
        rows = {
            "Status": "SUCCESS" if self.success else "FAILED",
            "Tasks completed": f"{self.completed_tasks} / {self.total_tasks}",
            "Directory": str(self.cwd),
            "Duration": format_duration(self.duration_seconds),
        }
        if self.failed_task:
            rows["Failed task"] = self.failed_task
        return rows


class StepFailedError(Exception):
    """Raised when a single step fails; aborts the whole run."""

    def __init__(self, step: Step, message: str) -> None:
        self.step = step
        super().__init__(message)


class PlanExecutor:
    """Executes plans against the real filesystem and a command runner.

    Args:
        base_dir: Initial working directory of the run.
        runner: Coroutine with the signature of
            :func:`headstarter.utils.run_command`.  Tests pass a fake.
        reporter: Progress reporter; a Rich spinner reporter by default.
        timeout: Optional per-command timeout in seconds.  A timed-out
            command counts as a failed step.
    """

    _STEP_METHODS: dict[type, str] = {
        MakeDirectory: "_make_directory",
        EnterDirectory: "_enter_directory",
        WriteFile: "_write_file",
        PrependFile: "_prepend_file",
        ReplaceInFile: "_replace_in_file",
        UpdateJsonFile: "_update_json_file",
        EnsureAbsent: "_ensure_absent",
        ExpectFile: "_expect_file",
    }

    def __init__(
        self,
        base_dir: str | Path = ".",
        runner: Optional[Runner] = None,
        reporter: Optional[ProgressReporter] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.runner = runner or run_command
        self.reporter = reporter or ProgressReporter()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "PlanExecutor":
        return cls(base_dir=config.base_dir, timeout=config.command_timeout, **kwargs)

    async def execute(self, plan: Plan) -> ExecutionResult:
        """Run every task of *plan* in order, stopping at the first failure.

        The progress spinner is stopped however the run ends, including on
        Ctrl-C or cancellation.
        """
        try:
            return await self._execute_tasks(plan)
        finally:
            self.reporter.stop()

    async def _execute_tasks(self, plan: Plan) -> ExecutionResult:
        state = ExecutionState(cwd=self.base_dir)
        task_results = [TaskResult(name=task.name) for task in plan.tasks]
        run_start = time.monotonic()

        for task, result in zip(plan.tasks, task_results):
            result.status = TaskStatus.RUNNING
            self.reporter.start(task.name)
            task_start = time.monotonic()

            try:
                for step in task.steps:
                    await self._run_step(step, state)
            except StepFailedError as exc:
                result.status = TaskStatus.FAILED
                result.error = str(exc)
                result.duration_seconds = time.monotonic() - task_start
                self.reporter.fail(task.name, str(exc))
                return ExecutionResult(
                    success=False,
                    completed_tasks=state.completed_tasks,
                    total_tasks=plan.total_tasks,
                    cwd=state.cwd,
                    task_results=task_results,
                    failed_task=task.name,
                    error=str(exc),
                    duration_seconds=time.monotonic() - run_start,
                )

            result.status = TaskStatus.SUCCEEDED
            result.duration_seconds = time.monotonic() - task_start
            state.completed_tasks += 1
            self.reporter.succeed(task.name)
            if task.note:
                self.reporter.note(task.note)

        return ExecutionResult(
            success=True,
            completed_tasks=state.completed_tasks,
            total_tasks=plan.total_tasks,
            cwd=state.cwd,
            task_results=task_results,
            duration_seconds=time.monotonic() - run_start,
        )

    # ------------------------------------------------------------------
    # Step dispatch
    # ------------------------------------------------------------------

    async def _run_step(self, step: Step, state: ExecutionState) -> None:
        try:
            if isinstance(step, RunCommand):
                await self._run_command(step, state)
            else:
                handler = getattr(self, self._STEP_METHODS[type(step)])
                await asyncio.to_thread(handler, step, state)
        except StepFailedError:
            raise
        except (OSError, ValueError) as exc:
            raise StepFailedError(step, f"{step.describe()}: {exc}") from exc

    async def _run_command(self, step: RunCommand, state: ExecutionState) -> None:
        returncode, detail = await self.runner(
            step.command, cwd=state.cwd, timeout=self.timeout
        )
        if returncode != 0:
            message = f"Error executing command: {step.command} (exit status {returncode})"
            if detail:
                message = f"{message}\n{detail}"
            raise StepFailedError(step, message)

    # -- Filesystem steps (run in a worker thread) --------------------------

    def _make_directory(self, step: MakeDirectory, state: ExecutionState) -> None:
        (state.cwd / step.path).mkdir()

    def _enter_directory(self, step: EnterDirectory, state: ExecutionState) -> None:
        if state.entered_directory:
            raise StepFailedError(step, f"Working directory already changed to {state.cwd}")
        target = state.cwd / step.path
        if not target.is_dir():
            raise StepFailedError(step, f"Project directory was not created: {target}")
        state.cwd = target
        state.entered_directory = True

    def _write_file(self, step: WriteFile, state: ExecutionState) -> None:
        target = state.cwd / step.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(step.content, encoding="utf-8")

    def _prepend_file(self, step: PrependFile, state: ExecutionState) -> None:
        target = state.cwd / step.path
        current = target.read_text(encoding="utf-8") if target.exists() else ""
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(step.content + current, encoding="utf-8")

    def _replace_in_file(self, step: ReplaceInFile, state: ExecutionState) -> None:
        target = state.cwd / step.path
        if not target.exists():
            return
        content = target.read_text(encoding="utf-8")
        target.write_text(content.replace(step.old, step.new, 1), encoding="utf-8")

    def _update_json_file(self, step: UpdateJsonFile, state: ExecutionState) -> None:
        target = state.cwd / step.path
        data = json.loads(target.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{step.path} does not contain a JSON object")
        data.update(dict(step.updates))
        target.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def _ensure_absent(self, step: EnsureAbsent, state: ExecutionState) -> None:
        target = state.cwd / step.path
        if target.exists():
            raise StepFailedError(step, f"{target} already exists")

    def _expect_file(self, step: ExpectFile, state: ExecutionState) -> None:
        target = state.cwd / step.path
        if not target.is_file():
            raise StepFailedError(step, f"{target} was not created")
