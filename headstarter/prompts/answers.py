"""The finalized set of user decisions that drives plan derivation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .questions import APP_NAME_PATTERN, CLIENT, SERVER


class AnswersFileError(Exception):
    """Raised when a saved answers file cannot be read or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid answers file {path}: {reason}")


class AnswerSet(BaseModel):
    """Immutable mapping of decision name to selected value.

    Field names are snake_case; the camelCase question keys are accepted as
    aliases and are what :meth:`save` writes, so an answers file looks like
    the raw prompt output.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    project_type: str = Field(..., alias="projectType")
    app_name: str = Field(..., alias="appName", pattern=APP_NAME_PATTERN.pattern)
    runtime: Optional[str] = Field(default=None)

    # Client decisions
    react_type: Optional[str] = Field(default=None, alias="reactType")
    ui_library: Optional[str] = Field(default=None, alias="uiLibrary")
    tailwind: bool = Field(default=False)
    fetching_library: Optional[str] = Field(default=None, alias="fetchingLibrary")
    state_management: Optional[str] = Field(default=None, alias="stateManagement")

    # Server decisions
    server_type: Optional[str] = Field(default=None, alias="serverType")
    orm: Optional[str] = Field(default=None)

    @property
    def is_client(self) -> bool:
        return self.project_type == CLIENT

    @property
    def is_server(self) -> bool:
        return self.project_type == SERVER

    def merge(self, **fields: Any) -> "AnswerSet":
        """Return a copy with late-known fields (``orm``, ``runtime``) set.

        Values are re-validated, so an invalid ``app_name`` cannot be merged in.
        """
        data = self.model_dump()
        data.update(fields)
        return type(self).model_validate(data)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the answers to a JSON file so a run can be replayed.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            self.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            encoding="utf-8",
        )
        return target

    @classmethod
    def load(cls, path: Path) -> "AnswerSet":
        """Load previously-saved answers.

        Raises:
            AnswersFileError: If the file is missing, is not JSON, or holds
                answers that fail validation.
        """
        source = Path(path)
        try:
            raw = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise AnswersFileError(source, exc.strerror or str(exc)) from exc
        try:
            return cls.model_validate_json(raw)
        except ValueError as exc:
            raise AnswersFileError(source, str(exc)) from exc
