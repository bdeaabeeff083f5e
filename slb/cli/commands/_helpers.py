"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from slb.core.errors import ErrorCode
from slb.core.result import Err, Ok
from slb.library.target import LibraryTarget, UnknownTarget
from slb.output.console import Style

if TYPE_CHECKING:
    from slb.cli.context import CLIContext


def resolve_target(target: str | None, ctx: CLIContext) -> LibraryTarget:
    """Parse --target, defaulting to the host; exits on error."""
    if target is None:
        match LibraryTarget.for_platform(ctx.platform):
            case Ok(host_target):
                return host_target
            case Err(message):
                ctx.console.error(message)
                ctx.console.print("hint: pass --target explicitly", Style.DIM)
                exit_with_code(int(ErrorCode.USER_ERROR))

    try:
        return LibraryTarget.parse(target)
    except UnknownTarget as e:
        ctx.console.error(str(e))
        ctx.console.print(f"Available: {', '.join(e.available)}", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
