"""Platform abstraction layer."""

from .detection import Arch, Platform, PlatformInfo, detect
from .process import ProcessError, run, run_silent
from .shell import ShellKind, join_command, wrap_command

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    # process
    "ProcessError",
    "run",
    "run_silent",
    # shell
    "ShellKind",
    "join_command",
    "wrap_command",
]
