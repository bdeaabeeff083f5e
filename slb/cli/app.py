from __future__ import annotations

import os
from pathlib import Path

import typer

from slb import __version__
from slb.cli.commands.build import build, collect, fetch, targets
from slb.cli.commands.check import check
from slb.cli.commands.pipeline import pipeline_app
from slb.cli.commands.release import release
from slb.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(targets)
app.command()(check)
app.command()(build)
app.command()(fetch)
app.command()(collect)
app.command()(release)

# Sub-apps
app.add_typer(pipeline_app, name="pipeline", help="Per-target build stages and release.")


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Project root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        # Inherited by build steps that run `slb` again in a subprocess.
        os.environ["SLB_ROOT"] = str(resolved)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
