from __future__ import annotations

import typer

from slb.cli.commands._helpers import exit_with_code, resolve_target
from slb.cli.context import build_context
from slb.core.errors import ErrorCode
from slb.core.result import Err
from slb.library import LibraryCompilationContext, libraries_from_config
from slb.output.errors import print_build_error, print_release_error
from slb.release.gh import ensure_gh_available
from slb.release.releaser import ensure_token, resolve_releaser


def check(
    target: str | None = typer.Option(None, "--target", "-t", help="Target triple (default: host)"),
    release: bool = typer.Option(False, "--release", help="Also check the release step inputs."),
) -> None:
    """Check that the build (and optionally release) prerequisites are present."""
    ctx = build_context()
    triple = resolve_target(target, ctx)

    context = LibraryCompilationContext(
        sources_root=ctx.project.sources_dir(ctx.config),
        build_root=ctx.project.build_root(ctx.config, triple.value),
        target=triple,
        android_target_api=ctx.config.build.android_api,
        static=ctx.config.build.static,
    )

    ctx.console.header(f"Build requirements ({triple})")
    library = libraries_from_config(ctx.config)[0]
    failed = False
    requirements = library.ensure_requirements(context)
    if isinstance(requirements, Err):
        print_build_error(requirements.error, ctx.console)
        failed = True
    else:
        ctx.console.success(f"toolchain for {library.compiler(context)}")

    if release:
        ctx.console.header("Release requirements")
        for result in (
            resolve_releaser(ctx.config.release, root=ctx.project.root),
            ensure_token(ctx.config.release),
        ):
            if isinstance(result, Err):
                print_release_error(result.error, ctx.console)
                failed = True

        gh = ensure_gh_available()
        if isinstance(gh, Err):
            # Only needed to report the published release; not fatal.
            ctx.console.warning(gh.error.message)
        if not failed:
            ctx.console.success(f"releaser ready for {ctx.config.release.slug}")

    if failed:
        exit_with_code(int(ErrorCode.ENV_ERROR))
