"""Configuration for the cache cleaner: cache home, staging area and build options"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cachecleaner.constants import DEFAULT_MARKER_FILE_NAME
from cachecleaner.exceptions import ConfigurationError

APP_NAME = "cachecleaner"
CONFIG_ENV_VAR = "CACHE_CLEANER_CONFIG"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")


def default_cache_home() -> Path:
    """Gradle User Home: $GRADLE_USER_HOME, falling back to ~/.gradle"""
    gradle_user_home = os.environ.get("GRADLE_USER_HOME")
    if gradle_user_home:
        return Path(gradle_user_home).expanduser()
    return Path(_home) / ".gradle"


def default_staging_dir() -> Path:
    xdg_state_home = os.environ.get("XDG_STATE_HOME") or os.path.join(
        _home, ".local", "state"
    )
    return Path(xdg_state_home) / APP_NAME


class CleanerConfig(BaseModel):
    """
    Recognised configuration options.

    Every option has a single documented effect; unknown options are rejected
    so that typos in a configuration file surface as errors instead of being
    silently ignored.

    Attributes:
        cache_home: Gradle User Home to scan and clean.
        staging_dir: Private directory holding the snapshot and step state.
        build_root_directory: Directory the build runs in (and where the wrapper
            script is looked up). Defaults to the current working directory.
        executable: Explicit build executable. When unset the wrapper script
            in the build root is used.
        arguments: Build arguments. An empty string means no build is run.
        marker_file_name: Usage marker file inside each version cache.
        cleanup_enabled: When false, ``cleanup`` logs and does nothing.
        cleanup_required: When true, configuration errors fail the CLI step
            instead of leaving the cache as-is.
    """

    model_config = ConfigDict(extra="forbid")

    cache_home: Path = Field(default_factory=default_cache_home)
    staging_dir: Path = Field(default_factory=default_staging_dir)
    build_root_directory: Optional[Path] = None
    executable: Optional[Path] = None
    arguments: str = ""
    marker_file_name: str = DEFAULT_MARKER_FILE_NAME
    cleanup_enabled: bool = True
    cleanup_required: bool = False

    def resolved_build_root(self, workspace: Optional[Path] = None) -> Path:
        """
        Resolve the build root directory against the workspace.

        Args:
            workspace: Base directory for relative paths (defaults to cwd)

        Returns:
            Absolute build root directory
        """
        base = Path(workspace) if workspace is not None else Path.cwd()
        if self.build_root_directory is None:
            return base.resolve()
        return (base / self.build_root_directory.expanduser()).resolve()


def _read_config_file(config_path: Path) -> dict:
    try:
        with open(config_path, "r") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {config_path} must contain a mapping of options"
        )
    return data


def load_config(config_path: Optional[Path] = None, **overrides: Any) -> CleanerConfig:
    """
    Build the effective configuration.

    Precedence, lowest to highest: model defaults, the YAML configuration
    file, explicit overrides (typically CLI options). Overrides whose value is
    None are ignored.

    Args:
        config_path: YAML file to read. Defaults to $CACHE_CLEANER_CONFIG if set.
        **overrides: Option values taking precedence over the file

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid options
    """
    if config_path is None and os.environ.get(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    values: dict = {}
    if config_path is not None:
        config_path = Path(config_path).expanduser()
        logger.debug(f"Loading configuration from {config_path}")
        values.update(_read_config_file(config_path))

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = CleanerConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    return config.model_copy(
        update={
            "cache_home": config.cache_home.expanduser(),
            "staging_dir": config.staging_dir.expanduser(),
        }
    )
