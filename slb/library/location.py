"""Source and release locations of a library."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

__all__ = ["GitLocation"]


@dataclass(frozen=True, slots=True)
class GitLocation:
    """A GitHub repository, optionally pinned to a branch or a tag.

    A tag doubles as the GitHub release name when the location is used to
    fetch prebuilt binaries.
    """

    owner: str
    repo: str
    branch: str | None = None
    tag: str | None = None

    @classmethod
    def github(cls, owner: str, repo: str) -> GitLocation:
        return cls(owner=owner, repo=repo)

    def with_branch(self, branch: str) -> GitLocation:
        return replace(self, branch=branch, tag=None)

    def with_tag(self, tag: str) -> GitLocation:
        return replace(self, branch=None, tag=tag)

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.slug}.git"

    @property
    def ref(self) -> str | None:
        return self.tag or self.branch

    def clone_command(self, dest: Path) -> list[str]:
        """Shallow clone of the pinned ref (default branch when unpinned)."""
        cmd = ["git", "clone", "--depth", "1"]
        if self.ref is not None:
            cmd += ["--branch", self.ref]
        cmd += [self.url, str(dest)]
        return cmd

    def __str__(self) -> str:
        if self.ref is None:
            return self.slug
        return f"{self.slug}@{self.ref}"
