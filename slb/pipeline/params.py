"""Pipeline build parameters."""

from __future__ import annotations

from dataclasses import dataclass

from slb.core.config import BUMP_KINDS, Config
from slb.core.result import Err, Ok, Result
from slb.library.context import Profile
from slb.library.target import LibraryTarget, UnknownTarget
from slb.pipeline.errors import InvalidParameter

__all__ = ["BuildParameters", "resolve_parameters"]


@dataclass(frozen=True, slots=True)
class BuildParameters:
    """Parameters of one pipeline run.

    Attributes:
        bump: Version component the releaser increments.
        targets: Targets to build, in stage order.
        profile: Build profile passed to the build step.
        dry_run: Echo commands without running them.
        release: Run the release step after the build stages.
    """

    bump: str
    targets: tuple[LibraryTarget, ...]
    profile: Profile = "release"
    dry_run: bool = False
    release: bool = False


def resolve_parameters(
    config: Config,
    *,
    bump: str | None = None,
    targets: list[str] | None = None,
    debug: bool = False,
    dry_run: bool = False,
    release: bool = False,
) -> Result[BuildParameters, InvalidParameter]:
    """Merge CLI overrides with configured defaults and validate them."""
    kind = bump or config.pipeline.bump
    if kind not in BUMP_KINDS:
        return Err(InvalidParameter(name="bump", value=kind, allowed=BUMP_KINDS))

    parsed: list[LibraryTarget] = []
    for raw in targets or list(config.pipeline.targets):
        try:
            target = LibraryTarget.parse(raw)
        except UnknownTarget as e:
            return Err(InvalidParameter(name="target", value=e.value, allowed=e.available))
        if target not in parsed:
            parsed.append(target)

    return Ok(
        BuildParameters(
            bump=kind,
            targets=tuple(parsed),
            profile="debug" if debug else "release",
            dry_run=dry_run,
            release=release,
        )
    )
