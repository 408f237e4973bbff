"""headstarter pipeline orchestrator.

Collects answers, derives the plan, executes it, and reports the summary:

1. COLLECT -- ask the question groups (or load a saved answers file).
2. PLAN    -- derive the ordered task plan from the answers.
3. EXECUTE -- run the tasks sequentially, stopping at the first failure.
4. REPORT  -- print ``completed / total`` and the project location.

Usage::

    headstarter
    headstarter --answers answers.json -C ~/projects
    python -m headstarter.pipeline --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from headstarter.config import Config
from headstarter.prompts import AnswerCollector, AnswerSet, AnswersFileError
from headstarter.scaffolder import ExecutionResult, Plan, PlanExecutor, ProjectPlanner
from headstarter.utils import (
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    print_welcome,
)


class Pipeline:
    """Runs one scaffold from answers to summary.

    Attributes:
        config: Run configuration.
        collector: Answer collector used when no answers are supplied.
        planner: Plan derivation.
        executor: Plan executor.
    """

    def __init__(
        self,
        config: Config,
        collector: Optional[AnswerCollector] = None,
        planner: Optional[ProjectPlanner] = None,
        executor: Optional[PlanExecutor] = None,
    ) -> None:
        self.config = config
        self.collector = collector or AnswerCollector()
        self.planner = planner or ProjectPlanner(config)
        self.executor = executor or PlanExecutor.from_config(config)

    async def run(
        self,
        answers: Optional[AnswerSet] = None,
        save_answers: Optional[Path] = None,
    ) -> Optional[ExecutionResult]:
        """Scaffold one project.

        Args:
            answers: Pre-collected answers; prompts the user when omitted.
            save_answers: Where to persist the answers for later replay.

        Returns:
            The execution result, or ``None`` for a dry run.
        """
        if answers is None:
            print_welcome()
            answers = await self.collector.collect()

        if save_answers is not None:
            path = answers.save(save_answers)
            console.print(f"  Answers saved to [bold]{escape(str(path))}[/bold]")

        plan = self.planner.plan(answers)

        if self.config.dry_run:
            print_plan(plan)
            return None

        console.print()
        result = await self.executor.execute(plan)
        self._print_final_summary(plan, result)
        return result

    def _print_final_summary(self, plan: Plan, result: ExecutionResult) -> None:
        kind = plan.project_type.lower()
        console.print()
        if result.success:
            print_success(f"{plan.app_name} {kind} project setup completed!")
        else:
            print_error(f"{plan.app_name} {kind} project setup failed at: {result.failed_task}")
        print_summary_table(result.summary(), title="Scaffold Summary")


def print_plan(plan: Plan) -> None:
    """Print the tasks of *plan* without executing anything."""
    table = Table(
        title=f"Plan for {plan.app_name} ({plan.total_tasks} tasks)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Task", no_wrap=True)
    table.add_column("Steps")

    for index, task in enumerate(plan.tasks, start=1):
        steps = "-" if task.is_checkpoint else "\n".join(step.describe() for step in task.steps)
        table.add_row(str(index), escape(task.name), escape(steps))

    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="headstarter",
        description="headstarter -- interactive React / server project scaffolder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  headstarter\n"
            "  headstarter -C ~/projects --save-answers answers.json\n"
            "  headstarter --answers answers.json --dry-run\n"
        ),
    )
    parser.add_argument(
        "--directory", "-C",
        default=None,
        help="Directory in which the project is created (default: current directory)",
    )
    parser.add_argument(
        "--answers",
        default=None,
        help="Replay answers from a JSON file instead of prompting",
    )
    parser.add_argument(
        "--save-answers",
        default=None,
        help="Write the collected answers to a JSON file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the plan without running any command",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Kill any single command running longer than this many seconds",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``headstarter`` / ``python -m headstarter.pipeline``."""
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env(
            base_dir=Path(args.directory) if args.directory else None,
            command_timeout=args.timeout,
            dry_run=args.dry_run or None,
        )
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    answers: Optional[AnswerSet] = None
    if args.answers:
        try:
            answers = AnswerSet.load(Path(args.answers))
        except AnswersFileError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            sys.exit(1)

    pipeline = Pipeline(config)
    save_path = Path(args.save_answers) if args.save_answers else None
    try:
        result = asyncio.run(pipeline.run(answers, save_answers=save_path))
    except KeyboardInterrupt:
        print_warning("\nAborted.")
        sys.exit(1)

    if result is not None and not result.success:
        sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
