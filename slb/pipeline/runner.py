"""Sequential pipeline execution on the current host.

Stages run one after another in parameter order. The first failing stage
stops the build (remaining stages are reported as skipped), mirroring the
CI host's fail-fast behaviour. The release step runs last, only when asked
for, when no stage failed and when at least one asset was collected.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from slb.core.config import Config
from slb.core.project import Project
from slb.core.result import Err, Ok
from slb.library import libraries_from_config
from slb.library.openssl import OpenSSLLibrary
from slb.output.console import ConsoleProtocol, Style
from slb.pipeline.artifacts import clean_assets, collect_artifacts, list_assets
from slb.pipeline.params import BuildParameters
from slb.pipeline.stages import Stage, build_step, can_run_on, default_stages, select_stages
from slb.platform.detection import PlatformInfo
from slb.platform.process import run_silent
from slb.release.errors import ReleaseError
from slb.release.gh import ensure_gh_available, latest_release
from slb.release.releaser import publish

__all__ = [
    "PipelineReport",
    "ReleaseOutcome",
    "StageOutcome",
    "StageStatus",
    "run_pipeline",
]


class StageStatus(Enum):
    PASSED = auto()
    FAILED = auto()
    SKIPPED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class StageOutcome:
    stage: Stage
    status: StageStatus
    assets: tuple[Path, ...] = ()
    message: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    status: StageStatus
    assets: tuple[Path, ...] = ()
    message: str | None = None
    error: ReleaseError | None = None
    tag: str | None = None


@dataclass(frozen=True, slots=True)
class PipelineReport:
    outcomes: tuple[StageOutcome, ...]
    release: ReleaseOutcome | None = None

    @property
    def failed(self) -> list[StageOutcome]:
        return [o for o in self.outcomes if o.status == StageStatus.FAILED]

    @property
    def assets(self) -> list[Path]:
        return [a for o in self.outcomes for a in o.assets]

    @property
    def ok(self) -> bool:
        if self.failed:
            return False
        return self.release is None or self.release.status != StageStatus.FAILED


def _display_path(path: Path, root: Path) -> Path:
    # dist_dir may be configured outside the project root.
    if path.is_relative_to(root):
        return path.relative_to(root)
    return path


def _run_stage(
    stage: Stage,
    *,
    project: Project,
    config: Config,
    params: BuildParameters,
    libraries: list[OpenSSLLibrary],
    console: ConsoleProtocol,
) -> StageOutcome:
    build_root = project.build_root(config, stage.target.value)
    dist_dir = project.dist_dir(config)

    argv = build_step(stage, params, config)
    console.print(" ".join(argv), Style.DIM)

    if params.dry_run:
        planned = tuple(
            dist_dir / lib.release_asset_name(stage.target, static=config.build.static)
            for lib in libraries
        )
        return StageOutcome(stage=stage, status=StageStatus.PASSED, assets=planned)

    result = run_silent(argv, cwd=project.root)
    if isinstance(result, Err):
        return StageOutcome(
            stage=stage,
            status=StageStatus.FAILED,
            message=f"build step failed (exit {result.error.returncode})",
        )

    collected = collect_artifacts(
        libraries=libraries,
        target=stage.target,
        build_root=build_root,
        dist_dir=dist_dir,
        static=config.build.static,
    )
    if isinstance(collected, Err):
        e = collected.error
        return StageOutcome(
            stage=stage,
            status=StageStatus.FAILED,
            message=f"lib{e.library} not produced: {e.path}",
        )

    for asset in collected.value:
        console.success(str(_display_path(asset, project.root)))
    return StageOutcome(stage=stage, status=StageStatus.PASSED, assets=tuple(collected.value))


def _published_tag(project: Project, config: Config, console: ConsoleProtocol) -> str | None:
    """Tag of the latest release, or None (with a warning) when it cannot be queried."""
    if isinstance(ensure_gh_available(), Err):
        console.warning("gh: missing, cannot query the published release")
        return None

    match latest_release(cwd=project.root, repo=config.release.slug):
        case Ok(published):
            console.info(f"latest release: {published.tag}")
            return published.tag
        case Err(error):
            console.warning(f"{error.message}: published tag unknown")
            return None


def _run_release(
    report_outcomes: list[StageOutcome],
    *,
    project: Project,
    config: Config,
    params: BuildParameters,
    libraries: list[OpenSSLLibrary],
    console: ConsoleProtocol,
) -> ReleaseOutcome:
    console.header("Release")

    if any(o.status == StageStatus.FAILED for o in report_outcomes):
        console.warning("release skipped: a build stage failed")
        return ReleaseOutcome(status=StageStatus.SKIPPED, message="a build stage failed")

    if params.dry_run:
        assets = [a for o in report_outcomes for a in o.assets]
    else:
        assets = list_assets(project.dist_dir(config), libraries)

    if not assets:
        console.warning("release skipped: no assets collected")
        return ReleaseOutcome(status=StageStatus.SKIPPED, message="no assets collected")

    skipped = [o.stage.name for o in report_outcomes if o.status == StageStatus.SKIPPED]
    if skipped:
        console.warning(f"releasing without: {', '.join(skipped)}")

    result = publish(
        root=project.root,
        config=config.release,
        bump=params.bump,
        assets=assets,
        console=console,
        dry_run=params.dry_run,
    )
    if isinstance(result, Err):
        return ReleaseOutcome(
            status=StageStatus.FAILED,
            assets=tuple(assets),
            message=result.error.message,
            error=result.error,
        )
    tag = None if params.dry_run else _published_tag(project, config, console)
    return ReleaseOutcome(status=StageStatus.PASSED, assets=tuple(assets), tag=tag)


def run_pipeline(
    *,
    project: Project,
    config: Config,
    params: BuildParameters,
    host: PlatformInfo,
    console: ConsoleProtocol,
    force: bool = False,
) -> PipelineReport:
    """Run the selected build stages, then the release step if requested.

    Args:
        force: Run stages even when the host does not match their agent label.
    """
    libraries = libraries_from_config(config)
    stages = select_stages(default_stages(), params.targets)

    if not params.dry_run:
        for stale in clean_assets(project.dist_dir(config), libraries):
            console.print(f"removed stale asset: {stale.name}", Style.DIM)

    outcomes: list[StageOutcome] = []
    stopped = False
    for stage in stages:
        if stopped:
            outcomes.append(
                StageOutcome(stage=stage, status=StageStatus.SKIPPED, message="earlier stage failed")
            )
            continue

        console.header(f"Stage: {stage.name} ({stage.target})")
        if not force and not can_run_on(stage, host):
            message = f"no agent matching '{stage.agent_label}' (host: {host})"
            console.warning(f"skipped: {message}")
            outcomes.append(StageOutcome(stage=stage, status=StageStatus.SKIPPED, message=message))
            continue

        outcome = _run_stage(
            stage,
            project=project,
            config=config,
            params=params,
            libraries=libraries,
            console=console,
        )
        if outcome.status == StageStatus.FAILED:
            console.error(f"{stage.name}: {outcome.message}")
            stopped = True
        outcomes.append(outcome)

    release = None
    if params.release:
        release = _run_release(
            outcomes,
            project=project,
            config=config,
            params=params,
            libraries=libraries,
            console=console,
        )

    return PipelineReport(outcomes=tuple(outcomes), release=release)
