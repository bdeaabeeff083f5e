from __future__ import annotations

import typer

from slb.cli.commands._helpers import exit_with_code
from slb.cli.context import CLIContext, build_context
from slb.core.errors import ErrorCode
from slb.core.result import Err
from slb.output.console import Style
from slb.output.errors import (
    pipeline_error_exit_code,
    print_pipeline_error,
    print_release_error,
    release_error_exit_code,
)
from slb.pipeline.params import BuildParameters, resolve_parameters
from slb.pipeline.runner import PipelineReport, StageStatus, run_pipeline
from slb.pipeline.stages import build_step, can_run_on, default_stages, select_stages

pipeline_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _resolve(
    ctx: CLIContext,
    *,
    bump: str | None,
    targets: list[str] | None,
    debug: bool,
    dry_run: bool,
    release: bool,
) -> BuildParameters:
    result = resolve_parameters(
        ctx.config,
        bump=bump,
        targets=targets,
        debug=debug,
        dry_run=dry_run,
        release=release,
    )
    if isinstance(result, Err):
        print_pipeline_error(result.error, ctx.console)
        exit_with_code(pipeline_error_exit_code(result.error))
    return result.value


def _print_summary(report: PipelineReport, ctx: CLIContext) -> None:
    ctx.console.header("Summary")
    for outcome in report.outcomes:
        line = f"{outcome.stage.name:<16} {outcome.status}"
        if outcome.message:
            line += f" ({outcome.message})"
        style = {
            StageStatus.PASSED: Style.SUCCESS,
            StageStatus.FAILED: Style.ERROR,
            StageStatus.SKIPPED: Style.WARNING,
        }[outcome.status]
        ctx.console.print(line, style)

    if report.release is not None:
        line = f"{'Release':<16} {report.release.status}"
        if report.release.tag:
            line += f" {report.release.tag}"
        if report.release.message:
            line += f" ({report.release.message})"
        ctx.console.print(line)


@pipeline_app.command("show")
def show_cmd(
    target: list[str] | None = typer.Option(None, "--target", "-t", help="Limit to targets."),
    debug: bool = typer.Option(False, "--debug/--release", help="Build profile."),
) -> None:
    """Show the stages, their agents and build steps."""
    ctx = build_context()
    params = _resolve(ctx, bump=None, targets=target, debug=debug, dry_run=True, release=False)

    for stage in select_stages(default_stages(), params.targets):
        runnable = "yes" if can_run_on(stage, ctx.platform) else "no"
        ctx.console.header(stage.name)
        ctx.console.print(f"target: {stage.target}")
        ctx.console.print(f"agent:  {stage.agent_label} (runs here: {runnable})")
        ctx.console.print(f"step:   {' '.join(build_step(stage, params, ctx.config))}", Style.DIM)


@pipeline_app.command("run")
def run_cmd(
    target: list[str] | None = typer.Option(None, "--target", "-t", help="Limit to targets."),
    bump: str | None = typer.Option(
        None, "--bump", help="Version bump for the release: patch|minor|major"
    ),
    debug: bool = typer.Option(False, "--debug/--release", help="Build profile."),
    release: bool = typer.Option(False, "--publish", help="Run the release step after building."),
    force: bool = typer.Option(
        False, "--force", help="Run stages whose agent label does not match this host."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without running them."),
) -> None:
    """Run the build stages (and the release step with --publish)."""
    ctx = build_context()
    params = _resolve(
        ctx, bump=bump, targets=target, debug=debug, dry_run=dry_run, release=release
    )

    report = run_pipeline(
        project=ctx.project,
        config=ctx.config,
        params=params,
        host=ctx.platform,
        console=ctx.console,
        force=force,
    )
    _print_summary(report, ctx)

    if report.failed:
        exit_with_code(int(ErrorCode.BUILD_ERROR))
    if report.release is not None and report.release.error is not None:
        print_release_error(report.release.error, ctx.console)
        exit_with_code(release_error_exit_code(report.release.error))
