"""Load, merge and persist user settings.

Precedence, lowest first: built-in defaults, the YAML config file, environment
variables, then flags given on the command line.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import click
import yaml
from pydantic import ValidationError

from git_ai_commit.config import (
    APP_NAME,
    CONFIG_FILE_NAME,
    CONFIG_PATH_ENV_VAR,
    HOST_ENV_VAR,
    MODEL_ENV_VAR,
)
from git_ai_commit.errors import ConfigInvalidError
from git_ai_commit.schemas import AppSettings
from git_ai_commit.settings import git_ai_commit_logger

logger = git_ai_commit_logger(__name__)

PERSISTED_KEYS = ("model", "max_files", "max_diff_lines", "port", "timeout_seconds")


def default_config_path(environ: Mapping[str, str] = os.environ) -> Path:
    override = environ.get(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME)) / CONFIG_FILE_NAME


def load_config_file(path: Path) -> Dict[str, Any]:
    """Return the mapping stored at *path*, or an empty mapping if it is missing."""

    if not path.exists():
        logger.debug("Config file not found at: %s", path)
        return {}

    logger.debug("Reading config from: %s", path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as error:
        raise ConfigInvalidError(f"Failed to read config file {path}: {error}") from error

    if not isinstance(data, dict):
        raise ConfigInvalidError(f"Config file {path} must contain a mapping of settings")

    unknown = sorted(set(data) - set(PERSISTED_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))

    return {key: value for key, value in data.items() if key in PERSISTED_KEYS}


def resolve_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Mapping[str, str] = os.environ,
    path: Optional[Path] = None,
    log: Optional[logging.Logger] = None,
) -> AppSettings:
    """Merge defaults, config file, environment and explicit overrides.

    Raises:
        ConfigInvalidError: If the file cannot be parsed or a value is invalid.
    """
    log = log or logger
    config_path = path or default_config_path(environ)

    merged: Dict[str, Any] = dict(load_config_file(config_path))

    if environ.get(MODEL_ENV_VAR):
        merged["model"] = environ[MODEL_ENV_VAR]
    if environ.get(HOST_ENV_VAR):
        merged["host"] = environ[HOST_ENV_VAR]

    merged.update({key: value for key, value in (overrides or {}).items() if value is not None})
    log.debug("Merged settings: %s", merged)

    try:
        return AppSettings(**merged)
    except ValidationError as error:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
            for item in error.errors()
        )
        raise ConfigInvalidError(f"Invalid configuration: {problems}") from error


def save_config_file(settings: AppSettings, path: Path) -> None:
    data = settings.model_dump(include=set(PERSISTED_KEYS), exclude_none=True)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as handle:
            yaml.safe_dump(data, handle, sort_keys=False)
    except OSError as error:
        raise ConfigInvalidError(f"Failed to write config file {path}: {error}") from error

    logger.info("Saved configuration to %s", path)
