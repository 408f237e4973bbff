"""headstarter configuration.

Typed runtime settings for a scaffold run. Settings use a Pydantic v2 model so
they are validated at construction time and can be populated from environment
variables or CLI flags without boiler-plate.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class Config(BaseModel):
    """Global headstarter configuration.

    Created once by the CLI entry point (or by tests) and passed to the
    planner and the executor.
    """

    base_dir: Path = Field(
        default=Path("."),
        description="Directory in which the new project directory is created",
    )
    command_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Per-command timeout in seconds (no timeout when unset)",
    )
    python_executable: str = Field(
        default_factory=lambda: sys.executable or "python",
        description="Interpreter used to create the FastAPI virtual environment",
    )
    venv_dir: str = Field(default="env", min_length=1)
    dry_run: bool = Field(default=False, description="Print the plan without executing it")

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def venv_python(self) -> str:
        """Relative path of the interpreter inside the generated virtualenv."""
        if os.name == "nt":
            return f"{self.venv_dir}\\Scripts\\python"
        return f"{self.venv_dir}/bin/python"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            HEADSTARTER_DIR, HEADSTARTER_TIMEOUT, HEADSTARTER_PYTHON,
            HEADSTARTER_VENV_DIR.

        Keyword arguments whose value is not ``None`` take precedence over
        the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("HEADSTARTER_DIR"):
            kwargs["base_dir"] = Path(os.environ["HEADSTARTER_DIR"])
        if os.environ.get("HEADSTARTER_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["HEADSTARTER_TIMEOUT"])
        if os.environ.get("HEADSTARTER_PYTHON"):
            kwargs["python_executable"] = os.environ["HEADSTARTER_PYTHON"]
        if os.environ.get("HEADSTARTER_VENV_DIR"):
            kwargs["venv_dir"] = os.environ["HEADSTARTER_VENV_DIR"]

        kwargs.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**kwargs)
