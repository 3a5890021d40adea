"""CLI commands for the two cache cleanup phases"""

import sys

import click

from cachecleaner.cache import CacheCleaner, SnapshotStore, discover_roots
from cachecleaner.cache.sweeper import Sweeper
from cachecleaner.cli.debug import is_debug
from cachecleaner.cli.report import render_roots, render_sweep_summary
from cachecleaner.cli.utils.args import config_options, load_cli_config
from cachecleaner.cli.utils.logging import logger
from cachecleaner.config import CleanerConfig
from cachecleaner.exceptions import ConfigurationError
from cachecleaner.execution import load_executable
from cachecleaner.state import StateStore


def _handle_configuration_error(error: ConfigurationError, config: CleanerConfig):
    if config.cleanup_required:
        logger.error(f"Cache cleanup failed: {error}")
        sys.exit(1)
    logger.error(f"Cache cleanup skipped, cache left as-is: {error}")


@click.command("prepare")
@config_options
def prepare(config_path, cache_home, staging_dir):
    """Record cache usage before the build runs.

    Run this before the build. A later `cleanup`, in a separate invocation,
    removes every cache entry the build did not use.

    Example:

      cache-cleaner prepare --cache-home ~/.gradle --staging-dir /tmp/cc
    """
    config = load_cli_config(
        config_path, cache_home=cache_home, staging_dir=staging_dir
    )
    try:
        CacheCleaner(config.cache_home, config.staging_dir, config).prepare()
    except ConfigurationError as e:
        _handle_configuration_error(e, config)


@click.command("cleanup")
@config_options
@click.pass_context
def cleanup(ctx, config_path, cache_home, staging_dir):
    """Delete cache entries not used since `prepare`.

    Without a previous `prepare` this does nothing. State saved by `run` is
    forgotten once the cleanup has run.
    """
    config = load_cli_config(
        config_path, cache_home=cache_home, staging_dir=staging_dir
    )
    if not config.cleanup_enabled:
        logger.info("Cache cleanup is disabled")
        return

    try:
        result = CacheCleaner(config.cache_home, config.staging_dir, config).force_cleanup()
    except ConfigurationError as e:
        _handle_configuration_error(e, config)
        return

    render_sweep_summary(result, details=is_debug(ctx))
    _forget_build_state(StateStore(config.staging_dir))


def _forget_build_state(store: StateStore):
    executable = load_executable(store)
    if executable is not None:
        logger.debug(f"Build ran with {executable.kind} executable {executable.path}")
    try:
        store.clear()
    except OSError as e:
        logger.warning(f"Could not clear saved state in {store.staging_dir}: {e}")


@click.command("status")
@config_options
def status(config_path, cache_home, staging_dir):
    """Show cache entries and what the next cleanup would do with them."""
    config = load_cli_config(
        config_path, cache_home=cache_home, staging_dir=staging_dir
    )
    if not config.cache_home.is_dir():
        logger.error(f"Cache home {config.cache_home} does not exist")
        sys.exit(1)

    snapshot = SnapshotStore(config.staging_dir).load()
    sweeper = None
    if snapshot is None:
        logger.info("No snapshot recorded; run `cache-cleaner prepare` first")
    else:
        sweeper = Sweeper(config.cache_home, snapshot, config.marker_file_name)

    render_roots(
        discover_roots(config.cache_home, config.marker_file_name), snapshot, sweeper
    )
