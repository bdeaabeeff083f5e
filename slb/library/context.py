"""Compilation context shared by every library of one build."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .target import LibraryTarget

__all__ = ["LibraryCompilationContext", "Profile"]

Profile = Literal["debug", "release"]


@dataclass(frozen=True, slots=True)
class LibraryCompilationContext:
    """Where sources live, where builds go, and for which target.

    Attributes:
        sources_root: Directory holding source checkouts (one per repo).
        build_root: Directory holding per-library build trees and outputs.
        target: Target triple being built.
        debug: Build with the debug profile.
        android_target_api: Android API level for android targets.
        static: Build static archives instead of shared libraries.
    """

    sources_root: Path
    build_root: Path
    target: LibraryTarget
    debug: bool = False
    android_target_api: int = 24
    static: bool = False

    @property
    def profile(self) -> Profile:
        return "debug" if self.debug else "release"

    @property
    def is_windows(self) -> bool:
        return self.target.is_windows

    @property
    def is_unix(self) -> bool:
        return self.target.is_unix

    @property
    def is_android(self) -> bool:
        return self.target.is_android

    @property
    def library_extension(self) -> str:
        return self.target.library_extension(static=self.static)
