"""Project configuration loaded from ``.mimir/config.yml``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mimir.core.agent.models import Budget
from mimir.core.interface.config import ModelConfig
from mimir.errors import ConfigError
from mimir.runtime.execution.models import ExecutionConfig
from mimir.runtime.permissions.models import PermissionConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = ".mimir"
CONFIG_FILENAMES = ("config.yml", "config.yaml")


class MimirConfig(BaseModel):
    """Everything needed to assemble an agent for a project.

    Example ``.mimir/config.yml``::

        model:
          model: anthropic/claude-3-5-sonnet-20241022
          api_key: ${ANTHROPIC_API_KEY}
        execution:
          mode: devcontainer
          filesystem:
            denied_paths: ["**/.env"]
        permissions:
          accept_risk_level: low
        budget:
          max_iterations: 10
        role: finder
    """

    model_config = ConfigDict(extra="forbid")

    model: ModelConfig = Field(default_factory=ModelConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    permissions: PermissionConfig = Field(default_factory=PermissionConfig)
    budget: Budget = Field(default_factory=Budget)
    role: str | None = None


class ConfigLoader:
    """Load and validate a YAML config file into a :class:`MimirConfig`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> MimirConfig:
        """Read YAML, interpolate env vars, and validate.

        ``${VAR}`` and ``$VAR`` references are expanded with
        :func:`os.path.expandvars` before parsing.  A relative
        ``execution.project_dir`` is resolved against the directory that
        contains ``.mimir/``.

        Raises:
            ConfigError: On read errors, YAML parse errors, or schema validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        try:
            data: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error in {self._path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self._path} must contain a mapping")

        try:
            config = MimirConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid config {self._path}: {exc}") from exc

        project_dir = Path(config.execution.project_dir)
        if not project_dir.is_absolute():
            root = self._path.parent
            if root.name == CONFIG_DIR:
                root = root.parent
            config.execution.project_dir = str((root / project_dir).resolve())
        logger.debug("Loaded config from %s", self._path)
        return config


def find_config(project_dir: str | Path) -> Path | None:
    """Return the project's config file, if it has one."""
    base = Path(project_dir) / CONFIG_DIR
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config(project_dir: str | Path = ".", path: str | Path | None = None) -> MimirConfig:
    """Load an explicit *path*, else the project's config, else defaults.

    Without a config file the project directory is *project_dir* itself.
    """
    if path is not None:
        return ConfigLoader(Path(path)).load()

    found = find_config(project_dir)
    if found is not None:
        return ConfigLoader(found).load()

    config = MimirConfig()
    config.execution.project_dir = str(Path(project_dir).resolve())
    return config
