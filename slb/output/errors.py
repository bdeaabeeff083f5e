"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from slb.core.errors import ErrorCode
from slb.library.errors import (
    BuildError,
    CompileFailed,
    ConfigureFailed,
    FetchFailed,
    NoReleaseVersion,
    OutputMissing,
    PrereqMissing,
    SourcesUnavailable,
    ToolMissing,
)
from slb.output.console import Style
from slb.pipeline.errors import ArtifactMissing, InvalidParameter, PipelineError
from slb.release.errors import ReleaseError

if TYPE_CHECKING:
    from slb.output.console import ConsoleProtocol

__all__ = [
    "build_error_exit_code",
    "pipeline_error_exit_code",
    "print_build_error",
    "print_pipeline_error",
    "print_release_error",
    "release_error_exit_code",
]


def print_build_error(error: BuildError, console: ConsoleProtocol) -> None:
    match error:
        case ToolMissing(tool=tool, hint=hint) | PrereqMissing(name=tool, hint=hint):
            console.error(f"{tool}: missing")
            console.print(f"hint: {hint}", Style.DIM)
        case SourcesUnavailable(location=location, detail=detail):
            console.error(f"could not fetch sources: {location}")
            if detail:
                console.print(detail, Style.DIM)
        case ConfigureFailed(library=library, returncode=rc):
            console.error(f"lib{library}: configure failed (exit {rc})")
        case CompileFailed(library=library, returncode=rc):
            console.error(f"lib{library}: build failed (exit {rc})")
        case OutputMissing(library=library, searched=searched):
            console.error(f"lib{library}: compiled library not found")
            for path in searched:
                console.print(f"searched: {path}", Style.DIM)
        case NoReleaseVersion(library=library):
            console.error(f"lib{library}: no release version to fetch")
            console.print("hint: pass --version or set release.version in slb.toml", Style.DIM)
        case FetchFailed(asset=asset, detail=detail):
            console.error(f"download failed: {asset}")
            if detail:
                console.print(detail, Style.DIM)


def build_error_exit_code(error: BuildError) -> int:
    match error:
        case ToolMissing() | PrereqMissing():
            return int(ErrorCode.ENV_ERROR)
        case SourcesUnavailable() | FetchFailed():
            return int(ErrorCode.NETWORK_ERROR)
        case ConfigureFailed() | CompileFailed():
            return int(ErrorCode.BUILD_ERROR)
        case OutputMissing():
            return int(ErrorCode.IO_ERROR)
        case NoReleaseVersion():
            return int(ErrorCode.USER_ERROR)


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    match error:
        case InvalidParameter(name=name, value=value, allowed=allowed):
            console.error(f"invalid {name}: {value}")
            console.print(f"Available: {', '.join(allowed)}", Style.DIM)
        case ArtifactMissing(library=library, path=path):
            console.error(f"lib{library}: artifact not found: {path}")


def pipeline_error_exit_code(error: PipelineError) -> int:
    match error:
        case InvalidParameter():
            return int(ErrorCode.USER_ERROR)
        case ArtifactMissing():
            return int(ErrorCode.IO_ERROR)


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "gh_missing" | "releaser_missing" | "token_missing":
            return int(ErrorCode.ENV_ERROR)
        case "invalid_input":
            return int(ErrorCode.USER_ERROR)
        case "no_assets":
            return int(ErrorCode.IO_ERROR)
        case "releaser_failed":
            return int(ErrorCode.RELEASE_ERROR)
