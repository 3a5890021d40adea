"""CLI command running the build"""

import sys
from pathlib import Path

import click

from cachecleaner.cli.utils.args import config_options, load_cli_config
from cachecleaner.cli.utils.logging import logger
from cachecleaner.exceptions import ConfigurationError
from cachecleaner.execution import (
    execute_build,
    forget_executable,
    parse_arguments,
    resolve_executable,
    save_executable,
)
from cachecleaner.state import StateStore


@click.command("run")
@config_options
@click.option(
    "--build-root-directory",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the build runs in. Defaults to the current directory.",
)
@click.option(
    "--executable",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Build executable. Defaults to the wrapper script in the build root.",
)
@click.option(
    "--arguments",
    "-a",
    default=None,
    help="Build arguments. Without arguments no build is run.",
)
def run(
    config_path, cache_home, staging_dir, build_root_directory, executable, arguments
):
    """Resolve the build executable and run the build.

    The chosen executable is saved so later steps use the same one.

    Example:

      cache-cleaner run --arguments "build --no-daemon"
    """
    config = load_cli_config(
        config_path,
        cache_home=cache_home,
        staging_dir=staging_dir,
        build_root_directory=build_root_directory,
        executable=executable,
        arguments=arguments,
    )
    workspace = Path.cwd()
    store = StateStore(config.staging_dir)

    try:
        to_execute = resolve_executable(config, workspace)
        save_executable(store, to_execute)
    except ConfigurationError as e:
        logger.error(str(e))
        # A choice saved by an earlier run no longer applies
        try:
            forget_executable(store)
        except ConfigurationError as forget_error:
            logger.warning(str(forget_error))
        sys.exit(1)

    args = parse_arguments(config.arguments)
    if not args:
        logger.info(f"No build arguments given; {to_execute.path} is ready to use")
        return

    status = execute_build(to_execute, config.resolved_build_root(workspace), args)
    if status != 0:
        sys.exit(status)
