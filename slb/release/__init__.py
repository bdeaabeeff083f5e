"""Release step: external releaser invocation and GitHub release queries."""

from .errors import ReleaseError
from .gh import PublishedRelease, latest_release
from .releaser import publish, releaser_command

__all__ = [
    "PublishedRelease",
    "ReleaseError",
    "latest_release",
    "publish",
    "releaser_command",
]
