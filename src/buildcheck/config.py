"""Project configuration loader.

Reads an optional ``buildcheck.yaml`` at the project root, validates it
against the bundled ``config`` schema and overlays it on the defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from buildcheck.capability import MANIFEST_FILENAME
from buildcheck.schemas.validator import validate_data

CONFIG_FILENAME = "buildcheck.yaml"
HISTORY_DIR_ENV = "BUILDCHECK_HISTORY_DIR"

DEFAULT_NOISE_FILES: tuple[str, ...] = (
    "build-logger.js",
    "analyze-logs.js",
    "setup-ignore-scripts.js",
)


class ConfigError(ValueError):
    """Raised when buildcheck.yaml is malformed or fails validation."""


class ProjectRootError(RuntimeError):
    """Raised when the project root has no package.json."""


@dataclass(frozen=True)
class BuildcheckConfig:
    """Effective settings for one invocation."""

    project_root: Path
    history_dir: Path
    source_root: Path
    generated_client_dir: Path
    build_script: str = "build:dev"
    noise_files: tuple[str, ...] = field(default=DEFAULT_NOISE_FILES)
    command_timeout: float | None = None

    @classmethod
    def defaults(cls, project_root: Path) -> BuildcheckConfig:
        root = project_root.resolve()
        return cls(
            project_root=root,
            history_dir=root / "logs",
            source_root=root / "src",
            generated_client_dir=root / "src" / "generated" / "prisma",
        )

    @classmethod
    def from_dict(cls, project_root: Path, data: dict[str, Any]) -> BuildcheckConfig:
        config = cls.defaults(project_root)
        root = config.project_root
        overrides: dict[str, Any] = {}

        if "history_dir" in data:
            overrides["history_dir"] = root / data["history_dir"]
        if "source_root" in data:
            overrides["source_root"] = root / data["source_root"]
        if "generated_client_dir" in data:
            overrides["generated_client_dir"] = root / data["generated_client_dir"]
        if "build_script" in data:
            overrides["build_script"] = data["build_script"]
        if "noise_files" in data:
            extra = [name for name in data["noise_files"] if name not in DEFAULT_NOISE_FILES]
            overrides["noise_files"] = DEFAULT_NOISE_FILES + tuple(extra)
        if "command_timeout" in data:
            overrides["command_timeout"] = data["command_timeout"]

        return replace(config, **overrides)


def load_config(project_root: Path, config_path: Path | None = None) -> BuildcheckConfig:
    """Load configuration for a project.

    Args:
        project_root: Project root directory
        config_path: Explicit config file (defaults to <root>/buildcheck.yaml)

    Returns:
        BuildcheckConfig with defaults for anything not configured

    Raises:
        ConfigError: If the file is unreadable, malformed, or invalid
    """
    path = config_path or (project_root / CONFIG_FILENAME)
    data: dict[str, Any] = {}

    if config_path is not None and not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML config at {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config {path}: {e}") from e

        if loaded is not None:
            valid, errors = validate_data(loaded, "config")
            if not valid:
                raise ConfigError(
                    f"Invalid config in {path}:\n" + "\n".join(f"  - {msg}" for msg in errors)
                )
            data = loaded

    config = BuildcheckConfig.from_dict(project_root, data)

    env_history = os.getenv(HISTORY_DIR_ENV, "").strip()
    if env_history:
        config = replace(config, history_dir=(config.project_root / env_history).resolve())
    return config


def require_project_root(project_root: Path) -> Path:
    """Resolve the project root, which must hold a package.json.

    Raises:
        ProjectRootError: If package.json is missing
    """
    root = project_root.resolve()
    if not (root / MANIFEST_FILENAME).is_file():
        raise ProjectRootError(
            f"{MANIFEST_FILENAME} não encontrado em {root}. Execute na raiz do projeto."
        )
    return root
