from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ToolMissing:
    tool: str
    hint: str


@dataclass(frozen=True, slots=True)
class PrereqMissing:
    name: str
    hint: str


@dataclass(frozen=True, slots=True)
class SourcesUnavailable:
    location: str
    detail: str


@dataclass(frozen=True, slots=True)
class ConfigureFailed:
    library: str
    returncode: int


@dataclass(frozen=True, slots=True)
class CompileFailed:
    library: str
    returncode: int


@dataclass(frozen=True, slots=True)
class OutputMissing:
    library: str
    searched: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class NoReleaseVersion:
    library: str


@dataclass(frozen=True, slots=True)
class FetchFailed:
    asset: str
    detail: str


BuildError = (
    ToolMissing
    | PrereqMissing
    | SourcesUnavailable
    | ConfigureFailed
    | CompileFailed
    | OutputMissing
    | NoReleaseVersion
    | FetchFailed
)
