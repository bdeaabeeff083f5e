from __future__ import annotations

from dataclasses import dataclass

import typer

from slb.core.config import Config, load_config_or_default
from slb.core.errors import ErrorCode
from slb.core.project import Project, detect_project
from slb.core.result import Err
from slb.output.console import ConsoleProtocol, RichConsole
from slb.platform.detection import PlatformInfo, detect


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    platform: PlatformInfo
    config: Config
    console: ConsoleProtocol


def build_context() -> CLIContext:
    project_result = detect_project()
    if isinstance(project_result, Err):
        typer.echo(f"error: {project_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    project = project_result.value
    config_result = load_config_or_default(project.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        project=project,
        platform=detect(),
        config=config_result.value,
        console=RichConsole(),
    )
