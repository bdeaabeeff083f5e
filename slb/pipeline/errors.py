from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InvalidParameter:
    name: str
    value: str
    allowed: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ArtifactMissing:
    library: str
    path: Path


PipelineError = InvalidParameter | ArtifactMissing
