import click

from .utils.logging import configure_logging

DEBUG_ENV_VAR = "CACHE_CLEANER_DEBUG"


def add_debug_option(cmd: click.Command) -> click.Command:
    """
    Give ``cmd`` a ``--debug/--no-debug`` flag.

    Debug logging shows every cache entry that is kept, and makes ``cleanup``
    list each entry next to its outcome. The flag is remembered on the root
    context, so ``cache-cleaner --debug cleanup`` and ``cache-cleaner cleanup
    --debug`` are equivalent.
    """
    cmd.params.insert(
        0,
        click.Option(
            ["--debug/--no-debug"],
            default=None,
            is_eager=True,
            expose_value=False,
            envvar=DEBUG_ENV_VAR,
            callback=_set_debug,
            help="Log every cache entry and list them in the cleanup report.",
        ),
    )
    return cmd


def _set_debug(ctx: click.Context, param: click.Parameter, value):
    obj = ctx.find_root().ensure_object(dict)
    if value is not None:
        obj["debug"] = value
    configure_logging(obj.setdefault("debug", False))


def is_debug(ctx: click.Context) -> bool:
    """Whether debug output was requested anywhere on the command line."""
    obj = ctx.find_root().obj or {}
    return bool(obj.get("debug", False))
