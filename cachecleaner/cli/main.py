"""cache-cleaner CLI"""

import click

from cachecleaner import __version__
from cachecleaner.cli.cache import cleanup, prepare, status
from cachecleaner.cli.run import run

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="Gradle cache cleaner")
@click.pass_context
def cli(ctx):
    """
    Shrink a Gradle User Home to what the last build used.

    Typical CI usage: `prepare` before the build, `run` (or any build step),
    then `cleanup` before the cache is saved.
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(prepare))
cli.add_command(add_debug_option(cleanup))
cli.add_command(add_debug_option(status))
cli.add_command(add_debug_option(run))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
