"""Running the build tool."""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List

from .executable import Executable

logger = logging.getLogger(__name__)


def parse_arguments(text: str) -> List[str]:
    """Split a build argument string using shell quoting rules."""
    return shlex.split(text or "")


def execute_build(executable: Executable, build_root: Path, args: List[str]) -> int:
    """
    Run the build and wait for it to finish.

    A non-zero exit code is logged, not raised.

    Args:
        executable: Program resolved by ``resolve_executable``
        build_root: Working directory of the build
        args: Build arguments

    Returns:
        The exit code of the build
    """
    command = [str(executable.path)] + list(args)
    logger.info(f"Running {' '.join(shlex.quote(c) for c in command)} in {build_root}")

    status = subprocess.run(command, cwd=build_root, check=False).returncode
    if status != 0:
        logger.error("Gradle build failed: see console output for details")
    return status
