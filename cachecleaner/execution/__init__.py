from .build import execute_build, parse_arguments
from .executable import (
    Executable,
    ExplicitExecutable,
    WrapperScript,
    forget_executable,
    load_executable,
    locate_wrapper_script,
    resolve_executable,
    save_executable,
    verify_is_executable,
)

__all__ = [
    "Executable",
    "ExplicitExecutable",
    "WrapperScript",
    "execute_build",
    "forget_executable",
    "load_executable",
    "locate_wrapper_script",
    "parse_arguments",
    "resolve_executable",
    "save_executable",
    "verify_is_executable",
]
