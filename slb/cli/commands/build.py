from __future__ import annotations

from pathlib import Path

import typer

from slb.cli.commands._helpers import exit_with_code, resolve_target
from slb.cli.context import build_context
from slb.core.errors import ErrorCode
from slb.core.result import Err, Ok
from slb.library import GitLocation, LibraryCompilationContext, LibraryTarget, libraries_from_config
from slb.library.openssl import OpenSSLLibrary
from slb.output.console import Style
from slb.output.errors import (
    build_error_exit_code,
    pipeline_error_exit_code,
    print_build_error,
    print_pipeline_error,
)
from slb.pipeline.artifacts import collect_artifacts


def _select_libraries(
    libraries: list[OpenSSLLibrary], names: list[str] | None
) -> list[OpenSSLLibrary]:
    if not names:
        return libraries
    return [lib for lib in libraries if lib.name in names]


def targets() -> None:
    """List supported targets and their OpenSSL Configure names."""
    ctx = build_context()
    library = libraries_from_config(ctx.config)[0]
    host = LibraryTarget.for_platform(ctx.platform)

    for target in LibraryTarget:
        context = LibraryCompilationContext(
            sources_root=ctx.project.sources_dir(ctx.config),
            build_root=ctx.project.build_root(ctx.config, target.value),
            target=target,
        )
        marker = " (host)" if host == Ok(target) else ""
        ctx.console.print(f"{target.value:<28} {library.compiler(context)}{marker}")


def build(
    target: str | None = typer.Option(None, "--target", "-t", help="Target triple (default: host)"),
    debug: bool = typer.Option(False, "--debug/--release", help="Build profile."),
    static: bool = typer.Option(
        False, "--static", help="Build static archives (default: build.static)."
    ),
    library: list[str] | None = typer.Option(
        None, "--library", "-l", help="Only build this library (crypto, ssl)."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without running them."),
) -> None:
    """Compile libcrypto and libssl for one target."""
    ctx = build_context()
    triple = resolve_target(target, ctx)

    libraries = _select_libraries(libraries_from_config(ctx.config), library)
    if not libraries:
        ctx.console.error(f"unknown library: {', '.join(library or [])}")
        ctx.console.print("Available: crypto, ssl", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))

    context = LibraryCompilationContext(
        sources_root=ctx.project.sources_dir(ctx.config),
        build_root=ctx.project.build_root(ctx.config, triple.value),
        target=triple,
        debug=debug,
        android_target_api=ctx.config.build.android_api,
        static=static or ctx.config.build.static,
    )

    for lib in libraries:
        ctx.console.header(f"lib{lib.name} ({triple}, {context.profile})")
        match lib.compile(context, console=ctx.console, dry_run=dry_run):
            case Ok(path):
                ctx.console.success(f"Compiled {path}")
            case Err(error):
                print_build_error(error, ctx.console)
                exit_with_code(build_error_exit_code(error))


def fetch(
    version: str | None = typer.Option(
        None, "--version", "-v", help="Release tag (default: release.version)"
    ),
    target: str | None = typer.Option(None, "--target", "-t", help="Target triple (default: host)"),
    out: Path = typer.Option(Path("target/prebuilt"), "--out", help="Download directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without running them."),
) -> None:
    """Download prebuilt libraries from the release repository."""
    ctx = build_context()
    triple = resolve_target(target, ctx)

    config = ctx.config
    libraries = libraries_from_config(config)
    if version is not None:
        release = GitLocation.github(config.release.owner, config.release.repo).with_tag(version)
        libraries = [lib.with_release_location(release) for lib in libraries]

    dest = out if out.is_absolute() else ctx.project.root / out
    for lib in libraries:
        match lib.fetch(triple, dest, console=ctx.console, dry_run=dry_run):
            case Ok(path):
                ctx.console.success(str(path))
            case Err(error):
                print_build_error(error, ctx.console)
                exit_with_code(build_error_exit_code(error))


def collect(
    target: str | None = typer.Option(None, "--target", "-t", help="Target triple (default: host)"),
) -> None:
    """Copy a target's compiled libraries into the dist directory."""
    ctx = build_context()
    triple = resolve_target(target, ctx)

    result = collect_artifacts(
        libraries=libraries_from_config(ctx.config),
        target=triple,
        build_root=ctx.project.build_root(ctx.config, triple.value),
        dist_dir=ctx.project.dist_dir(ctx.config),
        static=ctx.config.build.static,
    )
    match result:
        case Ok(assets):
            for asset in assets:
                ctx.console.success(str(asset))
        case Err(error):
            print_pipeline_error(error, ctx.console)
            exit_with_code(pipeline_error_exit_code(error))
