from __future__ import annotations

import typer

from slb.cli.commands._helpers import exit_with_code
from slb.cli.context import CLIContext, build_context
from slb.core.config import BUMP_KINDS
from slb.core.errors import ErrorCode
from slb.core.result import Err, Ok
from slb.library import libraries_from_config
from slb.output.console import Style
from slb.output.errors import print_release_error, release_error_exit_code
from slb.pipeline.artifacts import list_assets
from slb.release.gh import ensure_gh_available, latest_release
from slb.release.releaser import publish


def _show_latest(ctx: CLIContext) -> bool:
    if isinstance(ensure_gh_available(), Err):
        ctx.console.warning("gh: missing, cannot query the published release")
        return False

    match latest_release(cwd=ctx.project.root, repo=ctx.config.release.slug):
        case Ok(published):
            ctx.console.info(f"latest release: {published.tag}")
            if published.url:
                ctx.console.print(published.url, Style.DIM)
            for name in published.assets:
                ctx.console.print(f"  {name}")
            return True
        case Err(error):
            print_release_error(error, ctx.console)
            return False


def release(
    bump: str | None = typer.Option(
        None, "--bump", help="Version bump: patch|minor|major (default: pipeline.bump)"
    ),
    show_latest: bool = typer.Option(
        False, "--show-latest", help="Only show the latest published release."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without running them."),
) -> None:
    """Publish the assets in the dist directory through the releaser."""
    ctx = build_context()

    if show_latest:
        if not _show_latest(ctx):
            exit_with_code(int(ErrorCode.NETWORK_ERROR))
        return

    kind = bump or ctx.config.pipeline.bump
    if kind not in BUMP_KINDS:
        ctx.console.error(f"invalid bump: {kind}")
        ctx.console.print(f"Available: {', '.join(BUMP_KINDS)}", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))

    assets = list_assets(ctx.project.dist_dir(ctx.config), libraries_from_config(ctx.config))
    for asset in assets:
        ctx.console.print(f"asset: {asset.name}", Style.DIM)

    result = publish(
        root=ctx.project.root,
        config=ctx.config.release,
        bump=kind,
        assets=assets,
        console=ctx.console,
        dry_run=dry_run,
    )
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        exit_with_code(release_error_exit_code(result.error))

    if dry_run:
        return

    ctx.console.success(f"released {len(assets)} assets to {ctx.config.release.slug}")
    _show_latest(ctx)
