"""Plan building blocks.

A :class:`Plan` is an ordered tuple of :class:`Task` objects.  Each task is
the unit of progress accounting and bundles zero or more steps; a task with
no steps is a bookkeeping checkpoint.  Steps are plain frozen dataclasses
describing one side effect, and all paths are relative to the run's current
working directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class RunCommand:
    """Run a shell command to completion."""

    command: str

    def describe(self) -> str:
        return self.command


@dataclass(frozen=True)
class MakeDirectory:
    """Create a single directory; it must not exist yet."""

    path: str

    def describe(self) -> str:
        return f"mkdir {self.path}"


@dataclass(frozen=True)
class EnterDirectory:
    """Make *path* the working directory for the rest of the run."""

    path: str

    def describe(self) -> str:
        return f"cd {self.path}"


@dataclass(frozen=True)
class WriteFile:
    """Create or truncate a file."""

    path: str
    content: str

    def describe(self) -> str:
        return f"write {self.path}"


@dataclass(frozen=True)
class PrependFile:
    """Insert content at the top of a file (a missing file counts as empty)."""

    path: str
    content: str

    def describe(self) -> str:
        return f"prepend {self.path}"


@dataclass(frozen=True)
class ReplaceInFile:
    """Replace *old* with *new* in an existing file; missing files are skipped."""

    path: str
    old: str
    new: str

    def describe(self) -> str:
        return f"patch {self.path}"


@dataclass(frozen=True)
class UpdateJsonFile:
    """Set top-level keys of a JSON document."""

    path: str
    updates: tuple[tuple[str, Any], ...]

    def describe(self) -> str:
        keys = ", ".join(key for key, _ in self.updates)
        return f"update {self.path} ({keys})"


@dataclass(frozen=True)
class EnsureAbsent:
    """Fail when *path* already exists."""

    path: str

    def describe(self) -> str:
        return f"check {self.path} does not exist"


@dataclass(frozen=True)
class ExpectFile:
    """Fail when the file *path* does not exist."""

    path: str

    def describe(self) -> str:
        return f"check {self.path} exists"


Step = Union[
    RunCommand,
    MakeDirectory,
    EnterDirectory,
    WriteFile,
    PrependFile,
    ReplaceInFile,
    UpdateJsonFile,
    EnsureAbsent,
    ExpectFile,
]


@dataclass(frozen=True)
class Task:
    """A named, counted unit of work."""

    name: str
    steps: tuple[Step, ...] = ()
    note: Optional[str] = None

    @property
    def is_checkpoint(self) -> bool:
        return not self.steps


@dataclass(frozen=True)
class Plan:
    """The ordered tasks derived from one :class:`AnswerSet`."""

    app_name: str
    project_type: str
    tasks: tuple[Task, ...] = field(default_factory=tuple)

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)

    @property
    def commands(self) -> list[str]:
        """Every shell command of the plan, in execution order."""
        return [
            step.command
            for task in self.tasks
            for step in task.steps
            if isinstance(step, RunCommand)
        ]
