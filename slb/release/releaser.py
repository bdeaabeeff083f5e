"""Invocation of the external releaser.

The releaser bumps the repository's semantic version (patch, minor or
major), creates the GitHub release and uploads the given assets. This module
only validates inputs and builds its command line.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from slb.core.config import BUMP_KINDS, ReleaseConfig
from slb.core.result import Err, Ok, Result
from slb.output.console import ConsoleProtocol, Style
from slb.platform.process import run_silent
from slb.release.errors import ReleaseError
from slb.release.timeouts import RELEASER_TIMEOUT_SECONDS

__all__ = [
    "ensure_token",
    "publish",
    "redact",
    "releaser_command",
    "resolve_releaser",
]

_REDACTED = "***"


def resolve_releaser(config: ReleaseConfig, *, root: Path) -> Result[Path, ReleaseError]:
    """Find the releaser: a path (relative to the project root) or a PATH lookup."""
    candidate = Path(config.releaser)
    if candidate.parent != Path("."):
        path = candidate if candidate.is_absolute() else root / candidate
        if path.is_file():
            return Ok(path)
    else:
        local = root / config.releaser
        if local.is_file():
            return Ok(local)
        found = shutil.which(config.releaser)
        if found:
            return Ok(Path(found))

    return Err(
        ReleaseError(
            kind="releaser_missing",
            message=f"{config.releaser}: missing",
            hint="Download the releaser into the project root or set release.releaser",
        )
    )


def ensure_token(config: ReleaseConfig) -> Result[str, ReleaseError]:
    token = os.environ.get(config.token_env, "").strip()
    if not token:
        return Err(
            ReleaseError(
                kind="token_missing",
                message=f"${config.token_env} is not set",
                hint="Export a GitHub token with contents:write on the release repository",
            )
        )
    return Ok(token)


def releaser_command(
    releaser: Path | str,
    config: ReleaseConfig,
    *,
    bump: str,
    token: str,
    assets: list[Path],
) -> list[str]:
    cmd = [
        str(releaser),
        "--owner",
        config.owner,
        "--repo",
        config.repo,
        "--token",
        token,
        "--bump",
        bump,
        "--auto-accept",
        "--assets",
    ]
    cmd += [str(a) for a in assets]
    return cmd


def redact(cmd: list[str], secret: str) -> list[str]:
    """Replace every occurrence of `secret` for display."""
    if not secret:
        return list(cmd)
    return [a.replace(secret, _REDACTED) for a in cmd]


def publish(
    *,
    root: Path,
    config: ReleaseConfig,
    bump: str,
    assets: list[Path],
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    """Bump the version and upload `assets` through the releaser.

    In dry-run mode the command is echoed (token redacted) without checking
    that the releaser or the token exist.
    """
    if bump not in BUMP_KINDS:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"invalid bump: {bump}",
                hint=f"Use one of: {', '.join(BUMP_KINDS)}",
            )
        )

    if not assets:
        return Err(
            ReleaseError(
                kind="no_assets",
                message="no release assets to publish",
                hint="Run the build stages first (slb pipeline run)",
            )
        )

    missing = [a for a in assets if not a.is_file()]
    if missing and not dry_run:
        return Err(
            ReleaseError(
                kind="no_assets",
                message=f"release asset not found: {missing[0]}",
            )
        )

    if dry_run:
        cmd = releaser_command(config.releaser, config, bump=bump, token=_REDACTED, assets=assets)
        console.print(" ".join(cmd), Style.DIM)
        return Ok(None)

    releaser = resolve_releaser(config, root=root)
    if isinstance(releaser, Err):
        return releaser

    token = ensure_token(config)
    if isinstance(token, Err):
        return token

    cmd = releaser_command(releaser.value, config, bump=bump, token=token.value, assets=assets)
    console.print(" ".join(redact(cmd, token.value)), Style.DIM)

    result = run_silent(cmd, cwd=root, timeout=RELEASER_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="releaser_failed",
                message=f"releaser failed (exit {result.error.returncode})",
                hint=result.error.stderr.strip() or None,
            )
        )
    return Ok(None)
