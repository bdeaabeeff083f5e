"""Shell step wrapping.

Pipeline steps are shell snippets: `sh` on macOS/Linux agents and PowerShell
on Windows agents. These helpers turn a snippet into an argv list and quote
arguments for the target shell.
"""

from __future__ import annotations

import shlex
from typing import Literal

__all__ = [
    "SHELL_KINDS",
    "ShellKind",
    "join_command",
    "quote_arg",
    "wrap_command",
]

ShellKind = Literal["sh", "powershell"]

SHELL_KINDS: tuple[ShellKind, ...] = ("sh", "powershell")


def quote_arg(arg: str, shell: ShellKind) -> str:
    """Quote a single argument for the given shell."""
    if shell == "sh":
        return shlex.quote(arg)
    if arg and all(c.isalnum() or c in "-_./\\:=+" for c in arg):
        return arg
    # PowerShell literal string: only the single quote needs escaping (doubled).
    return "'" + arg.replace("'", "''") + "'"


def join_command(args: list[str], shell: ShellKind) -> str:
    """Join argv into a command line for the given shell."""
    quoted = [quote_arg(a, shell) for a in args]
    if shell == "powershell" and quoted and quoted[0].startswith("'"):
        # A quoted first token is a string literal in PowerShell, not a command.
        quoted[0] = "& " + quoted[0]
    return " ".join(quoted)


def wrap_command(shell: ShellKind, command: str) -> list[str]:
    """Build the argv that runs `command` through `shell`."""
    match shell:
        case "sh":
            return ["sh", "-c", command]
        case "powershell":
            return ["powershell", "-NoProfile", "-NonInteractive", "-Command", command]
