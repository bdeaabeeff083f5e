"""OpenSSL build recipe (libcrypto and libssl).

Each artefact is configured out of tree in `<build_root>/<name>` from a single
shared checkout, installed into `<build_root>/<name>/build`, and the resulting
library is copied to `<build_root>/lib<name>.<ext>`:

- Unix targets: `perl Configure ...` then `make install_sw`
- Windows targets: `perl Configure ...` then `nmake install_sw` (needs nasm)
- Android: Unix flow with the NDK LLVM toolchain prepended to PATH
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from shutil import which
from typing import Literal

from slb.core.result import Err, Ok, Result
from slb.output.console import ConsoleProtocol, Style
from slb.platform.detection import Platform, detect
from slb.platform.process import run as run_process
from slb.platform.process import run_silent

from .context import LibraryCompilationContext
from .errors import (
    BuildError,
    CompileFailed,
    ConfigureFailed,
    FetchFailed,
    NoReleaseVersion,
    OutputMissing,
    PrereqMissing,
    SourcesUnavailable,
    ToolMissing,
)
from .location import GitLocation
from .target import LibraryTarget

__all__ = ["Artefact", "OpenSSLLibrary", "android_ndk_root"]

_CLONE_TIMEOUT_SECONDS = 15 * 60.0
_CONFIGURE_TIMEOUT_SECONDS = 20 * 60.0
_COMPILE_TIMEOUT_SECONDS = 90 * 60.0
_FETCH_TIMEOUT_SECONDS = 10 * 60.0

Artefact = Literal["crypto", "ssl"]

_CONFIGURE_TARGETS: dict[LibraryTarget, str] = {
    LibraryTarget.X86_64_APPLE_DARWIN: "darwin64-x86_64-cc",
    LibraryTarget.AARCH64_APPLE_DARWIN: "darwin64-arm64-cc",
    LibraryTarget.X86_64_PC_WINDOWS_MSVC: "VC-WIN64A",
    LibraryTarget.AARCH64_PC_WINDOWS_MSVC: "VC-WIN64-ARM",
    LibraryTarget.X86_64_UNKNOWN_LINUX_GNU: "linux-x86_64-clang",
    LibraryTarget.AARCH64_UNKNOWN_LINUX_GNU: "linux-aarch64",
    LibraryTarget.AARCH64_LINUX_ANDROID: "android-arm64",
}

_DEFAULT_SOURCE = GitLocation.github("syrel", "openssl").with_branch(
    "OpenSSL_1_1_1-stable-Windows-pkgconfig"
)


def android_ndk_root() -> Path | None:
    """NDK root from ANDROID_NDK, falling back to NDK_HOME."""
    value = os.environ.get("ANDROID_NDK") or os.environ.get("NDK_HOME")
    if not value:
        return None
    return Path(value).expanduser()


def _ndk_host_tag(host: Platform) -> str:
    # The NDK ships x86_64 host binaries only (Apple Silicon runs them via Rosetta).
    match host:
        case Platform.MACOS:
            return "darwin-x86_64"
        case Platform.WINDOWS:
            return "windows-x86_64"
        case _:
            return "linux-x86_64"


@dataclass(frozen=True, slots=True)
class OpenSSLLibrary:
    """One OpenSSL artefact (crypto or ssl) and where it comes from."""

    artefact: Artefact = "crypto"
    source_location: GitLocation = _DEFAULT_SOURCE
    binary_location: GitLocation | None = None

    def be_ssl(self) -> OpenSSLLibrary:
        return replace(self, artefact="ssl")

    def be_crypto(self) -> OpenSSLLibrary:
        return replace(self, artefact="crypto")

    def with_source_location(self, location: GitLocation) -> OpenSSLLibrary:
        return replace(self, source_location=location)

    def with_release_location(self, location: GitLocation | None) -> OpenSSLLibrary:
        return replace(self, binary_location=location)

    @property
    def name(self) -> str:
        return self.artefact

    @property
    def release_location(self) -> GitLocation:
        """Where prebuilt binaries are published; the sources when unpinned."""
        return self.binary_location or self.source_location

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def source_directory(self, context: LibraryCompilationContext) -> Path:
        return context.sources_root / self.source_location.repo

    def makefile_directory(self, context: LibraryCompilationContext) -> Path:
        return context.build_root / self.name

    def native_library_prefix(self, context: LibraryCompilationContext) -> Path:
        return context.build_root / self.name / "build"

    def compiled_library_directories(self, context: LibraryCompilationContext) -> list[Path]:
        prefix = self.native_library_prefix(context)
        if context.is_windows and not context.static:
            return [prefix / "bin"]
        return [prefix / "lib"]

    def native_library_include_headers(self, context: LibraryCompilationContext) -> list[Path]:
        directory = self.native_library_prefix(context) / "include"
        return [directory] if directory.is_dir() else []

    def native_library_linker_libraries(self, context: LibraryCompilationContext) -> list[Path]:
        directory = self.native_library_prefix(context) / "lib"
        return [directory] if directory.is_dir() else []

    def pkg_config_directory(self, context: LibraryCompilationContext) -> Path | None:
        directory = self.native_library_prefix(context) / "lib" / "pkgconfig"
        return directory if directory.is_dir() else None

    def compiled_library_binary_name(self, context: LibraryCompilationContext) -> str:
        return f"lib{self.name}.{context.library_extension}"

    def release_asset_name(self, target: LibraryTarget, *, static: bool = False) -> str:
        """File name of the published binary, unique per target."""
        return f"lib{self.name}-{target}.{target.library_extension(static=static)}"

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def compiler(self, context: LibraryCompilationContext) -> str:
        """OpenSSL Configure target for the context's triple."""
        return _CONFIGURE_TARGETS[context.target]

    def configure_command(self, context: LibraryCompilationContext) -> list[str]:
        prefix = self.native_library_prefix(context)
        cmd = [
            "perl",
            str(self.source_directory(context) / "Configure"),
            f"--{context.profile}",
            f"--prefix={prefix}",
            f"--openssldir={prefix}",
            self.compiler(context),
            "OPT_LEVEL=3",
        ]
        if context.static:
            cmd.append("no-shared")
        if context.is_android:
            cmd.append(f"-D__ANDROID_API__={context.android_target_api}")
        return cmd

    def make_command(self, context: LibraryCompilationContext) -> list[str]:
        if context.is_windows:
            return ["nmake", "install_sw"]
        return ["make", "install_sw"]

    def build_env(self, context: LibraryCompilationContext) -> dict[str, str] | None:
        """Environment for configure/make; None means inherit unchanged."""
        if not context.is_android:
            return None

        env = os.environ.copy()
        ndk = android_ndk_root()
        if ndk is None:
            return env

        toolchain_bin = (
            ndk / "toolchains" / "llvm" / "prebuilt" / _ndk_host_tag(detect().platform) / "bin"
        )
        env["PATH"] = f"{toolchain_bin}{os.pathsep}{env.get('PATH', '')}"
        env["ANDROID_NDK_ROOT"] = str(ndk)
        return env

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def ensure_requirements(self, context: LibraryCompilationContext) -> Result[None, BuildError]:
        """Check that the external build tools for this target are available."""
        if which("perl") is None:
            return Err(ToolMissing(tool="perl", hint="Install Perl 5 (Strawberry Perl on Windows)"))

        if context.is_unix and which("make") is None:
            return Err(ToolMissing(tool="make", hint="Install make (build-essential / Xcode CLT)"))

        if context.is_windows:
            if which("nasm") is None:
                return Err(ToolMissing(tool="nasm", hint="Install NASM and add it to PATH"))
            if which("nmake") is None:
                return Err(
                    ToolMissing(
                        tool="nmake",
                        hint="Run from a Visual Studio Developer PowerShell for the target arch",
                    )
                )

        if context.is_android and android_ndk_root() is None:
            return Err(
                PrereqMissing(
                    name="Android NDK",
                    hint="ANDROID_NDK or NDK_HOME must be defined",
                )
            )

        return Ok(None)

    def ensure_sources(
        self,
        context: LibraryCompilationContext,
        *,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> Result[Path, BuildError]:
        """Clone the source location unless a checkout already exists."""
        src = self.source_directory(context)
        if (src / "Configure").is_file():
            return Ok(src)

        cmd = self.source_location.clone_command(src)
        console.print(" ".join(cmd), Style.DIM)
        if dry_run:
            return Ok(src)

        context.sources_root.mkdir(parents=True, exist_ok=True)
        result = run_process(cmd, cwd=context.sources_root, timeout=_CLONE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                SourcesUnavailable(
                    location=str(self.source_location),
                    detail=result.error.stderr.strip() or str(result.error),
                )
            )
        return Ok(src)

    def force_compile(
        self,
        context: LibraryCompilationContext,
        *,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> Result[None, BuildError]:
        """Configure (once per build tree) and install the artefact."""
        makefile_dir = self.makefile_directory(context)
        env = self.build_env(context)

        if not dry_run:
            self.native_library_prefix(context).mkdir(parents=True, exist_ok=True)

        if not (makefile_dir / "makefile").exists():
            configure = self.configure_command(context)
            console.print(" ".join(configure), Style.DIM)
            if not dry_run:
                result = run_silent(
                    configure, cwd=makefile_dir, env=env, timeout=_CONFIGURE_TIMEOUT_SECONDS
                )
                if isinstance(result, Err):
                    return Err(
                        ConfigureFailed(library=self.name, returncode=result.error.returncode)
                    )

        make = self.make_command(context)
        console.print(" ".join(make), Style.DIM)
        if not dry_run:
            result = run_silent(make, cwd=makefile_dir, env=env, timeout=_COMPILE_TIMEOUT_SECONDS)
            if isinstance(result, Err):
                return Err(CompileFailed(library=self.name, returncode=result.error.returncode))

        return Ok(None)

    def find_compiled_library(self, context: LibraryCompilationContext) -> Path | None:
        """Locate the installed library file matching this artefact's name."""
        suffix = f".{context.library_extension}"
        candidates: list[Path] = []
        for directory in self.compiled_library_directories(context):
            if not directory.is_dir():
                continue
            for p in directory.iterdir():
                if p.is_file() and self.name in p.name and p.suffix == suffix:
                    candidates.append(p)
        if not candidates:
            return None
        # Prefer the unversioned name (libcrypto.so over libcrypto-1_1.so).
        return sorted(candidates, key=lambda p: (len(p.name), p.name))[0]

    def compile(
        self,
        context: LibraryCompilationContext,
        *,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> Result[Path, BuildError]:
        """Build the artefact and copy it to `<build_root>/lib<name>.<ext>`.

        Returns:
            Ok(path) of the copied library
            Err(BuildError) on failure
        """
        sources = self.ensure_sources(context, console=console, dry_run=dry_run)
        if isinstance(sources, Err):
            return sources

        requirements = self.ensure_requirements(context)
        if isinstance(requirements, Err):
            return requirements

        compiled = self.force_compile(context, console=console, dry_run=dry_run)
        if isinstance(compiled, Err):
            return compiled

        output = context.build_root / self.compiled_library_binary_name(context)
        if dry_run:
            return Ok(output)

        found = self.find_compiled_library(context)
        if found is None:
            return Err(
                OutputMissing(
                    library=self.name,
                    searched=tuple(self.compiled_library_directories(context)),
                )
            )

        shutil.copy2(found, output)
        return Ok(output)

    def fetch(
        self,
        target: LibraryTarget,
        dest_dir: Path,
        *,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> Result[Path, BuildError]:
        """Download the prebuilt binary for `target` from the release location."""
        location = self.binary_location
        if location is None or location.tag is None:
            return Err(NoReleaseVersion(library=self.name))

        asset = self.release_asset_name(target)
        cmd = [
            "gh",
            "release",
            "download",
            location.tag,
            "--repo",
            location.slug,
            "--pattern",
            asset,
            "--dir",
            str(dest_dir),
            "--clobber",
        ]
        console.print(" ".join(cmd), Style.DIM)
        if dry_run:
            return Ok(dest_dir / asset)

        if which("gh") is None:
            return Err(ToolMissing(tool="gh", hint="Install GitHub CLI: https://cli.github.com/"))

        dest_dir.mkdir(parents=True, exist_ok=True)
        result = run_process(cmd, cwd=dest_dir, timeout=_FETCH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                FetchFailed(asset=asset, detail=result.error.stderr.strip() or str(result.error))
            )

        path = dest_dir / asset
        if not path.is_file():
            return Err(FetchFailed(asset=asset, detail=f"not downloaded: {path}"))
        return Ok(path)
