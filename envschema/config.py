"""
Configuration Loader
====================

Loads the environment files for the current NODE_ENV and cleans the result.

WHAT:
    configure(schema) does, in order:
    1. Normalize NODE_ENV (read before any file is loaded)
    2. Resolve [<canonical env>, ".env"] against base_dir
    3. Optionally log the resolved paths
    4. Load each file that exists; variables already set are never overwritten
    5. clean_env() against the caller schema plus the NODE_ENV descriptor

WHY:
    Every service reads configuration the same way at startup: one file per
    environment, a shared .env fallback, real environment variables on top.

PRECEDENCE (high -> low):
    - Variables already in the environment (including earlier configure calls)
    - <base_dir>/<canonical env>  (e.g. <base_dir>/prod)
    - <base_dir>/.env

Environment Variables:
- NODE_ENV: deployment environment (see envschema/environments.py)
- ENVSCHEMA_BASE_DIR: default for ConfigOptions.base_dir
- ENVSCHEMA_SHOW_ENVIRONMENT_FILES: default for ConfigOptions.show_environment_files

Usage:
    from envschema import configure, port, url

    env = configure({"PORT": port(default=8080), "DATABASE_URL": url()})
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, MutableMapping, Optional, Union

from dotenv import dotenv_values
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .clean import CleanedEnv, Schema, clean_env, merge_schemas
from .environments import ENV_VAR, Environment, current_environment, node_env

logger = logging.getLogger(__name__)

FALLBACK_ENV_FILE = ".env"

_TRUE_FLAGS = {"true", "1", "yes", "on"}
_FALSE_FLAGS = {"false", "0", "no", "off", ""}


class ConfigOptions(BaseSettings):
    """
    Options for configure().

    Attributes:
        base_dir: Directory the environment files are resolved against
            (default: current working directory)
        show_environment_files: Log the resolved file paths. True logs at INFO;
            a level name ("debug", "warning", ...) logs at that level.
    """

    base_dir: Path = Field(default_factory=Path.cwd)
    show_environment_files: Union[bool, str] = False

    model_config = SettingsConfigDict(env_prefix="ENVSCHEMA_", frozen=True, extra="ignore")

    @field_validator("show_environment_files")
    @classmethod
    def _normalize_show_flag(cls, value: Union[bool, str]) -> Union[bool, str]:
        if isinstance(value, bool):
            return value
        lowered = value.strip().lower()
        if lowered in _TRUE_FLAGS:
            return True
        if lowered in _FALSE_FLAGS:
            return False
        level = logging.getLevelName(lowered.upper())
        if not isinstance(level, int):
            raise ValueError(f"show_environment_files must be a flag or a log level name, got {value!r}")
        return lowered.upper()

    @property
    def report_level(self) -> Optional[int]:
        """Log level for the resolved-paths line, or None when disabled."""
        if self.show_environment_files is False:
            return None
        if self.show_environment_files is True:
            return logging.INFO
        return logging.getLevelName(self.show_environment_files)


def candidate_files(environment: Optional[Environment]) -> List[str]:
    """Environment file names to probe, highest precedence first."""
    names = [environment.value if environment is not None else None, FALLBACK_ENV_FILE]
    return [name for name in names if name]


def resolve_env_paths(environment: Optional[Environment], base_dir: Union[str, Path]) -> List[Path]:
    """Absolute paths of candidate_files() under base_dir."""
    return [Path(os.path.abspath(os.path.join(base_dir, name))) for name in candidate_files(environment)]


def load_env_files(
    paths: Iterable[Path],
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load dotenv files into `environ` without overwriting existing keys.

    Parameters:
        paths: Files in precedence order; the first file defining a key wins
        environ: Target mapping (default: os.environ)

    Returns:
        The variables this call actually set.

    Paths that do not exist, or are not regular files, are skipped. A file
    that exists but cannot be read raises the underlying OSError.
    """
    if environ is None:
        environ = os.environ

    loaded: Dict[str, str] = {}
    for path in paths:
        path = Path(path)
        if not path.is_file():
            logger.debug("Environment file %s not found, skipping", path)
            continue

        count = 0
        for key, value in dotenv_values(path).items():
            # "KEY" with no "=" parses to None; nothing to set.
            if value is None or key in environ:
                continue
            environ[key] = value
            loaded[key] = value
            count += 1
        logger.debug("Loaded %d variables from %s", count, path)

    return loaded


def configure(
    schema: Schema,
    options: Optional[ConfigOptions] = None,
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> CleanedEnv:
    """
    Load environment files and clean the environment against `schema`.

    Parameters:
        schema: Variable name -> EnvField. A NODE_ENV entry replaces the
            default node_env() descriptor.
        options: ConfigOptions (default: read from ENVSCHEMA_* variables)
        environ: Environment to load into and validate (default: os.environ)

    Returns:
        CleanedEnv with the schema keys plus NODE_ENV.

    Raises:
        EnvValidationError: from clean_env, unchanged
    """
    options = options or ConfigOptions()
    if environ is None:
        environ = os.environ

    paths = resolve_env_paths(current_environment(environ), options.base_dir)

    level = options.report_level
    if level is not None:
        logger.log(level, "Environment files: %s", ", ".join(str(path) for path in paths))

    load_env_files(paths, environ)

    return clean_env(environ, merge_schemas({ENV_VAR: node_env()}, schema))
