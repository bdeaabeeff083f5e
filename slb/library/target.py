"""Compilation targets (Rust-style target triples)."""

from __future__ import annotations

from enum import Enum

from slb.core.result import Err, Ok, Result
from slb.platform.detection import Arch, Platform, PlatformInfo, detect

__all__ = ["LibraryTarget", "UnknownTarget"]


class UnknownTarget(Exception):
    """Raised when a triple is not one of the supported targets."""

    def __init__(self, value: str) -> None:
        super().__init__(value)
        self.value = value
        self.available = tuple(t.value for t in LibraryTarget)

    def __str__(self) -> str:
        return f"unknown target: {self.value}"


class LibraryTarget(Enum):
    X86_64_APPLE_DARWIN = "x86_64-apple-darwin"
    AARCH64_APPLE_DARWIN = "aarch64-apple-darwin"
    X86_64_PC_WINDOWS_MSVC = "x86_64-pc-windows-msvc"
    AARCH64_PC_WINDOWS_MSVC = "aarch64-pc-windows-msvc"
    X86_64_UNKNOWN_LINUX_GNU = "x86_64-unknown-linux-gnu"
    AARCH64_UNKNOWN_LINUX_GNU = "aarch64-unknown-linux-gnu"
    AARCH64_LINUX_ANDROID = "aarch64-linux-android"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> LibraryTarget:
        """Parse a triple.

        Raises:
            UnknownTarget: If text is not a supported triple.
        """
        try:
            return cls(text.strip())
        except ValueError:
            raise UnknownTarget(text) from None

    @classmethod
    def for_platform(cls, info: PlatformInfo) -> Result[LibraryTarget, str]:
        """Target matching a host platform, or an error message."""
        match (info.platform, info.arch):
            case (Platform.MACOS, Arch.X64):
                return Ok(cls.X86_64_APPLE_DARWIN)
            case (Platform.MACOS, Arch.ARM64):
                return Ok(cls.AARCH64_APPLE_DARWIN)
            case (Platform.WINDOWS, Arch.X64):
                return Ok(cls.X86_64_PC_WINDOWS_MSVC)
            case (Platform.WINDOWS, Arch.ARM64):
                return Ok(cls.AARCH64_PC_WINDOWS_MSVC)
            case (Platform.LINUX, Arch.X64):
                return Ok(cls.X86_64_UNKNOWN_LINUX_GNU)
            case (Platform.LINUX, Arch.ARM64):
                return Ok(cls.AARCH64_UNKNOWN_LINUX_GNU)
        return Err(f"unsupported host platform: {info}")

    @classmethod
    def for_current_platform(cls) -> Result[LibraryTarget, str]:
        return cls.for_platform(detect())

    @property
    def platform(self) -> Platform:
        """Operating system the built library runs on (Android counts as Linux)."""
        if self.is_mac:
            return Platform.MACOS
        if self.is_windows:
            return Platform.WINDOWS
        return Platform.LINUX

    @property
    def arch(self) -> Arch:
        return Arch.X64 if self.value.startswith("x86_64") else Arch.ARM64

    @property
    def is_mac(self) -> bool:
        return self.value.endswith("apple-darwin")

    @property
    def is_windows(self) -> bool:
        return self.value.endswith("windows-msvc")

    @property
    def is_linux(self) -> bool:
        return self.value.endswith("linux-gnu")

    @property
    def is_android(self) -> bool:
        return self.value.endswith("linux-android")

    @property
    def is_unix(self) -> bool:
        return not self.is_windows

    @property
    def shared_library_extension(self) -> str:
        if self.is_mac:
            return "dylib"
        if self.is_windows:
            return "dll"
        return "so"

    @property
    def static_library_extension(self) -> str:
        return "lib" if self.is_windows else "a"

    def library_extension(self, *, static: bool) -> str:
        return self.static_library_extension if static else self.shared_library_extension
