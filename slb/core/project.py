"""Project root detection and paths.

The project root holds `slb.toml` (optional), the `target/` build tree and
the `dist/` directory where pipeline stages hand over release assets.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CONFIG_FILENAME, Config
from .result import Err, Ok, Result

__all__ = [
    "Project",
    "ProjectError",
    "ProjectInfo",
    "detect_project",
    "detect_project_info",
    "find_project_upward",
]


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be used."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A build project rooted at `root`."""

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    def target_dir(self, config: Config) -> Path:
        """Build root (`target/` by default)."""
        return self.root / config.build.target_dir

    def sources_dir(self, config: Config) -> Path:
        """Directory the OpenSSL sources are cloned into."""
        return self.target_dir(config) / "src"

    def build_root(self, config: Config, target: str) -> Path:
        """Per-target build root, so several triples can share one checkout."""
        return self.target_dir(config) / target

    def dist_dir(self, config: Config) -> Path:
        return self.root / config.pipeline.dist_dir

    def __str__(self) -> str:
        return str(self.root)


ProjectSource = Literal["env", "upward", "cwd"]


@dataclass(frozen=True, slots=True)
class ProjectInfo:
    project: Project
    source: ProjectSource


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start for a directory containing slb.toml."""
    for parent in (start, *start.parents):
        if (parent / CONFIG_FILENAME).is_file():
            return parent
    return None


def detect_project_info(
    *,
    start_dir: Path | None = None,
    env_var: str = "SLB_ROOT",
) -> Result[ProjectInfo, ProjectError]:
    """Detect the project root, with source metadata.

    Detection order:
    1. SLB_ROOT environment variable (must be an existing directory)
    2. Upward search from start_dir (or cwd) for slb.toml
    3. start_dir (or cwd) itself
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir():
            return Ok(ProjectInfo(project=Project(root=env_path), source="env"))
        return Err(
            ProjectError(
                message=f"${env_var} is set to '{env_value}' but it is not a directory",
                searched_from=None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    if found is not None:
        return Ok(ProjectInfo(project=Project(root=found), source="upward"))

    return Ok(ProjectInfo(project=Project(root=search_start), source="cwd"))


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = "SLB_ROOT",
) -> Result[Project, ProjectError]:
    info = detect_project_info(start_dir=start_dir, env_var=env_var)
    if isinstance(info, Err):
        return info
    return Ok(info.value.project)
