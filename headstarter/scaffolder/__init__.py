"""headstarter scaffolder -- turns answers into a plan and executes it.

Quick usage::

    from headstarter.scaffolder import PlanExecutor, derive_plan

    plan = derive_plan(answers)
    result = await PlanExecutor(base_dir=".").execute(plan)
"""

from headstarter.scaffolder.executor import (
    ExecutionResult,
    PlanExecutor,
    StepFailedError,
    TaskStatus,
)
from headstarter.scaffolder.planner import (
    PackageManager,
    ProjectPlanner,
    count_tasks,
    derive_plan,
)
from headstarter.scaffolder.progress import ProgressReporter
from headstarter.scaffolder.steps import Plan, Task
from headstarter.scaffolder.templates import TemplateRenderer

__all__ = [
    "ExecutionResult",
    "PackageManager",
    "Plan",
    "PlanExecutor",
    "ProgressReporter",
    "ProjectPlanner",
    "StepFailedError",
    "Task",
    "TaskStatus",
    "TemplateRenderer",
    "count_tasks",
    "derive_plan",
]
