"""Unit tests for Config (headstarter.config).

Tests cover:
- Config defaults and validation
- venv_python derived value
- from_env with and without overrides
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from headstarter.config import Config


# ---------------------------------------------------------------------------
# Defaults & validation
# ---------------------------------------------------------------------------


class TestConfigDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        config = Config()
        assert config.base_dir == Path(".")
        assert config.command_timeout is None
        assert config.venv_dir == "env"
        assert config.dry_run is False
        assert config.python_executable

    @pytest.mark.unit
    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Config(command_timeout=0)

    @pytest.mark.unit
    def test_empty_venv_dir_rejected(self):
        with pytest.raises(ValidationError):
            Config(venv_dir="")

    @pytest.mark.unit
    def test_venv_python_posix(self):
        with patch("headstarter.config.os.name", "posix"):
            assert Config(venv_dir=".venv").venv_python == ".venv/bin/python"

    @pytest.mark.unit
    def test_venv_python_windows(self):
        with patch("headstarter.config.os.name", "nt"):
            assert Config().venv_python == "env\\Scripts\\python"


# ---------------------------------------------------------------------------
# Config.from_env
# ---------------------------------------------------------------------------


class TestConfigFromEnv:
    @pytest.mark.unit
    def test_defaults_when_no_env(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_env()
        assert config.base_dir == Path(".")
        assert config.command_timeout is None

    @pytest.mark.unit
    def test_values_from_env(self):
        env = {
            "HEADSTARTER_DIR": "/tmp/projects",
            "HEADSTARTER_TIMEOUT": "300",
            "HEADSTARTER_PYTHON": "python3.12",
            "HEADSTARTER_VENV_DIR": ".venv",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env()
        assert config.base_dir == Path("/tmp/projects")
        assert config.command_timeout == 300
        assert config.python_executable == "python3.12"
        assert config.venv_dir == ".venv"

    @pytest.mark.unit
    def test_overrides_win_over_env(self):
        env = {"HEADSTARTER_DIR": "/tmp/projects", "HEADSTARTER_TIMEOUT": "300"}
        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env(base_dir=Path("/elsewhere"), command_timeout=None)
        assert config.base_dir == Path("/elsewhere")
        # None overrides are ignored
        assert config.command_timeout == 300

    @pytest.mark.unit
    def test_invalid_timeout_in_env(self):
        with patch.dict(os.environ, {"HEADSTARTER_TIMEOUT": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Config.from_env()
