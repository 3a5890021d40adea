"""
Resolution of the program used to run the build.

The build runs either through an explicitly configured executable or through
the wrapper script (``gradlew``) checked into the build root. The choice is
made once, at startup, and saved to the state store so later CI steps use the
same program.
"""

import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from cachecleaner.config import CleanerConfig
from cachecleaner.constants import STATE_EXECUTABLE
from cachecleaner.exceptions import ConfigurationError
from cachecleaner.state import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplicitExecutable:
    """A build executable given explicitly in the configuration."""

    path: Path
    kind = "explicit"


@dataclass(frozen=True)
class WrapperScript:
    """The wrapper script found in the build root."""

    path: Path
    kind = "wrapper"


Executable = Union[ExplicitExecutable, WrapperScript]

_KINDS = {cls.kind: cls for cls in (ExplicitExecutable, WrapperScript)}


def wrapper_script_name() -> str:
    return "gradlew.bat" if platform.system() == "Windows" else "gradlew"


def locate_wrapper_script(build_root: Path) -> Path:
    """
    Find the wrapper script in ``build_root``.

    Raises:
        ConfigurationError: If there is no wrapper script
    """
    script = Path(build_root) / wrapper_script_name()
    if not script.is_file():
        raise ConfigurationError(
            f"Cannot locate a Gradle wrapper script at '{script}'. "
            "Specify an explicit executable instead."
        )
    return script


def verify_is_executable(path: Path) -> None:
    """
    Raises:
        ConfigurationError: If ``path`` is not an executable file
    """
    if not Path(path).is_file() or not os.access(path, os.X_OK):
        raise ConfigurationError(f"Gradle script '{path}' is not executable.")


def resolve_executable(
    config: CleanerConfig, workspace: Optional[Path] = None
) -> Executable:
    """
    Decide which program runs the build.

    An explicit executable from the configuration wins, resolved against the
    workspace when relative. Otherwise the wrapper script in the build root is
    used.

    Args:
        config: Effective configuration
        workspace: Base directory for relative paths (defaults to cwd)

    Returns:
        ExplicitExecutable or WrapperScript, verified to be executable

    Raises:
        ConfigurationError: If no usable executable can be found
    """
    base = Path(workspace) if workspace is not None else Path.cwd()

    executable: Executable
    if config.executable is not None:
        executable = ExplicitExecutable((base / config.executable.expanduser()).resolve())
    else:
        build_root = config.resolved_build_root(base)
        executable = WrapperScript(locate_wrapper_script(build_root).resolve())

    verify_is_executable(executable.path)
    logger.debug(f"Using {executable.kind} executable {executable.path}")
    return executable


def save_executable(store: StateStore, executable: Executable) -> None:
    store.set(
        STATE_EXECUTABLE, {"kind": executable.kind, "path": str(executable.path)}
    )


def load_executable(store: StateStore) -> Optional[Executable]:
    """Reload the executable saved by an earlier step, if any."""
    saved = store.get(STATE_EXECUTABLE)
    if not isinstance(saved, dict):
        return None
    cls = _KINDS.get(saved.get("kind"))
    if cls is None or not saved.get("path"):
        logger.warning(f"Ignoring unrecognised saved executable: {saved}")
        return None
    return cls(Path(saved["path"]))


def forget_executable(store: StateStore) -> None:
    store.delete(STATE_EXECUTABLE)
