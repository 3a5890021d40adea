import sys
from functools import wraps
from pathlib import Path

import click

from cachecleaner.config import CleanerConfig, load_config
from cachecleaner.exceptions import ConfigurationError

from .logging import logger


def config_options(func):
    """Add the options shared by every command that reads the configuration."""

    @click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        envvar="CACHE_CLEANER_CONFIG",
        help="YAML configuration file.",
    )
    @click.option(
        "--cache-home",
        type=click.Path(file_okay=False, path_type=Path),
        envvar="GRADLE_USER_HOME",
        help="Gradle User Home to clean. Defaults to ~/.gradle.",
    )
    @click.option(
        "--staging-dir",
        type=click.Path(file_okay=False, path_type=Path),
        envvar="CACHE_CLEANER_STAGING_DIR",
        help="Directory keeping the snapshot and state between steps.",
    )
    @wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def load_cli_config(config_path, **options) -> CleanerConfig:
    """Load the configuration, exiting with status 1 when it is invalid."""
    try:
        return load_config(config_path, **options)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
