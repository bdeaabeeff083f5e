"""Tests for slb.library.openssl module."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

import slb.library.openssl as openssl_mod
from slb.core.config import Config
from slb.core.result import Err, Ok
from slb.library import (
    GitLocation,
    LibraryCompilationContext,
    LibraryTarget,
    libcrypto,
    libopenssl,
    libraries_from_config,
    libssl,
)
from slb.library.errors import (
    CompileFailed,
    ConfigureFailed,
    FetchFailed,
    NoReleaseVersion,
    OutputMissing,
    PrereqMissing,
    SourcesUnavailable,
    ToolMissing,
)
from slb.output.console import MockConsole
from slb.platform.process import ProcessError


def _context(
    tmp_path: Path,
    target: LibraryTarget = LibraryTarget.X86_64_UNKNOWN_LINUX_GNU,
    **kwargs: object,
) -> LibraryCompilationContext:
    return LibraryCompilationContext(
        sources_root=tmp_path / "src",
        build_root=tmp_path / "build",
        target=target,
        **kwargs,  # type: ignore[arg-type]
    )


def _tools(monkeypatch: pytest.MonkeyPatch, *available: str) -> None:
    monkeypatch.setattr(
        openssl_mod, "which", lambda name: f"/usr/bin/{name}" if name in available else None
    )


def _fail(cmd: list[str], returncode: int = 1) -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr="boom"))


class TestFactories:
    """Test library constructors."""

    def test_defaults(self) -> None:
        library = libopenssl()
        assert library.name == "crypto"
        assert str(library.source_location) == (
            "syrel/openssl@OpenSSL_1_1_1-stable-Windows-pkgconfig"
        )
        assert library.binary_location is None
        assert library.release_location == library.source_location

    def test_binary_version(self) -> None:
        library = libssl("v1.1.1")
        assert library.name == "ssl"
        assert library.release_location == GitLocation("feenkcom", "libopenssl", tag="v1.1.1")

    def test_crypto(self) -> None:
        assert libcrypto().name == "crypto"
        assert libssl().be_crypto() == libcrypto()

    def test_from_config(self) -> None:
        config = Config.from_dict(
            {
                "source": {"owner": "openssl", "tag": "OpenSSL_1_1_1w"},
                "release": {"version": "v0.3.0"},
                "build": {"libraries": ["ssl", "crypto"]},
            }
        )
        libraries = libraries_from_config(config)

        assert [lib.name for lib in libraries] == ["ssl", "crypto"]
        assert str(libraries[0].source_location) == "openssl/openssl@OpenSSL_1_1_1w"
        assert libraries[0].release_location.tag == "v0.3.0"


class TestPaths:
    """Test build tree layout."""

    def test_layout(self, tmp_path: Path) -> None:
        context = _context(tmp_path)
        library = libssl()

        assert library.source_directory(context) == tmp_path / "src" / "openssl"
        assert library.makefile_directory(context) == tmp_path / "build" / "ssl"
        assert library.native_library_prefix(context) == tmp_path / "build" / "ssl" / "build"
        assert library.compiled_library_directories(context) == [
            tmp_path / "build" / "ssl" / "build" / "lib"
        ]

    def test_windows_shared_uses_bin(self, tmp_path: Path) -> None:
        context = _context(tmp_path, LibraryTarget.X86_64_PC_WINDOWS_MSVC)
        assert libcrypto().compiled_library_directories(context) == [
            tmp_path / "build" / "crypto" / "build" / "bin"
        ]

    def test_windows_static_uses_lib(self, tmp_path: Path) -> None:
        context = _context(tmp_path, LibraryTarget.X86_64_PC_WINDOWS_MSVC, static=True)
        assert libcrypto().compiled_library_directories(context)[0].name == "lib"

    def test_optional_dirs_only_when_present(self, tmp_path: Path) -> None:
        context = _context(tmp_path)
        library = libcrypto()
        assert library.native_library_include_headers(context) == []
        assert library.pkg_config_directory(context) is None

        pkgconfig = library.native_library_prefix(context) / "lib" / "pkgconfig"
        pkgconfig.mkdir(parents=True)
        (library.native_library_prefix(context) / "include").mkdir()

        assert library.pkg_config_directory(context) == pkgconfig
        assert library.native_library_linker_libraries(context) == [pkgconfig.parent]
        assert len(library.native_library_include_headers(context)) == 1

    def test_names(self, tmp_path: Path) -> None:
        context = _context(tmp_path, LibraryTarget.AARCH64_APPLE_DARWIN)
        library = libssl()
        assert library.compiled_library_binary_name(context) == "libssl.dylib"
        assert (
            library.release_asset_name(LibraryTarget.AARCH64_APPLE_DARWIN)
            == "libssl-aarch64-apple-darwin.dylib"
        )
        assert (
            library.release_asset_name(LibraryTarget.X86_64_PC_WINDOWS_MSVC, static=True)
            == "libssl-x86_64-pc-windows-msvc.lib"
        )


class TestCommands:
    """Test configure/make command construction."""

    @pytest.mark.parametrize(
        ("target", "compiler"),
        [
            (LibraryTarget.X86_64_APPLE_DARWIN, "darwin64-x86_64-cc"),
            (LibraryTarget.AARCH64_APPLE_DARWIN, "darwin64-arm64-cc"),
            (LibraryTarget.X86_64_PC_WINDOWS_MSVC, "VC-WIN64A"),
            (LibraryTarget.AARCH64_PC_WINDOWS_MSVC, "VC-WIN64-ARM"),
            (LibraryTarget.X86_64_UNKNOWN_LINUX_GNU, "linux-x86_64-clang"),
            (LibraryTarget.AARCH64_UNKNOWN_LINUX_GNU, "linux-aarch64"),
            (LibraryTarget.AARCH64_LINUX_ANDROID, "android-arm64"),
        ],
    )
    def test_compiler(self, tmp_path: Path, target: LibraryTarget, compiler: str) -> None:
        assert libcrypto().compiler(_context(tmp_path, target)) == compiler

    def test_configure_release(self, tmp_path: Path) -> None:
        context = _context(tmp_path)
        prefix = tmp_path / "build" / "crypto" / "build"

        assert libcrypto().configure_command(context) == [
            "perl",
            str(tmp_path / "src" / "openssl" / "Configure"),
            "--release",
            f"--prefix={prefix}",
            f"--openssldir={prefix}",
            "linux-x86_64-clang",
            "OPT_LEVEL=3",
        ]

    def test_configure_debug_static(self, tmp_path: Path) -> None:
        cmd = libcrypto().configure_command(_context(tmp_path, debug=True, static=True))
        assert "--debug" in cmd
        assert cmd[-1] == "no-shared"

    def test_configure_android_api(self, tmp_path: Path) -> None:
        context = _context(tmp_path, LibraryTarget.AARCH64_LINUX_ANDROID, android_target_api=28)
        cmd = libcrypto().configure_command(context)
        assert cmd[-1] == "-D__ANDROID_API__=28"
        assert "android-arm64" in cmd

    def test_make(self, tmp_path: Path) -> None:
        assert libcrypto().make_command(_context(tmp_path)) == ["make", "install_sw"]
        windows = _context(tmp_path, LibraryTarget.AARCH64_PC_WINDOWS_MSVC)
        assert libcrypto().make_command(windows) == ["nmake", "install_sw"]


class TestBuildEnv:
    """Test the Android NDK environment."""

    def test_inherit_for_desktop(self, tmp_path: Path) -> None:
        assert libcrypto().build_env(_context(tmp_path)) is None

    def test_android_prepends_toolchain(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        ndk = tmp_path / "ndk"
        monkeypatch.delenv("NDK_HOME", raising=False)
        monkeypatch.setenv("ANDROID_NDK", str(ndk))
        monkeypatch.setenv("PATH", "/usr/bin")

        env = libcrypto().build_env(_context(tmp_path, LibraryTarget.AARCH64_LINUX_ANDROID))

        assert env is not None
        assert env["ANDROID_NDK_ROOT"] == str(ndk)
        first = env["PATH"].split(os.pathsep)[0]
        assert first.startswith(str(ndk / "toolchains" / "llvm" / "prebuilt"))
        assert first.endswith("bin")

    def test_ndk_home_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANDROID_NDK", raising=False)
        monkeypatch.setenv("NDK_HOME", str(tmp_path))
        assert openssl_mod.android_ndk_root() == tmp_path


class TestEnsureRequirements:
    """Test tool checks."""

    def test_unix_ok(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "make")
        assert libcrypto().ensure_requirements(_context(tmp_path)) == Ok(None)

    def test_perl_checked_first(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch)
        result = libcrypto().ensure_requirements(_context(tmp_path))
        assert isinstance(result, Err)
        assert isinstance(result.error, ToolMissing)
        assert result.error.tool == "perl"

    def test_unix_make_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl")
        result = libcrypto().ensure_requirements(_context(tmp_path))
        assert isinstance(result, Err)
        assert result.error == ToolMissing(
            tool="make", hint="Install make (build-essential / Xcode CLT)"
        )

    def test_windows_needs_nasm(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "nmake")
        context = _context(tmp_path, LibraryTarget.X86_64_PC_WINDOWS_MSVC)
        result = libcrypto().ensure_requirements(context)
        assert isinstance(result, Err)
        assert isinstance(result.error, ToolMissing)
        assert result.error.tool == "nasm"

    def test_windows_needs_nmake(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "nasm")
        context = _context(tmp_path, LibraryTarget.X86_64_PC_WINDOWS_MSVC)

        result = libcrypto().ensure_requirements(context)

        assert isinstance(result, Err)
        assert isinstance(result.error, ToolMissing)
        assert result.error.tool == "nmake"
        assert "Developer PowerShell" in result.error.hint

    def test_windows_does_not_need_make(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _tools(monkeypatch, "perl", "nasm", "nmake")
        context = _context(tmp_path, LibraryTarget.AARCH64_PC_WINDOWS_MSVC)
        assert libcrypto().ensure_requirements(context) == Ok(None)

    def test_android_needs_ndk(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "make")
        monkeypatch.delenv("ANDROID_NDK", raising=False)
        monkeypatch.delenv("NDK_HOME", raising=False)
        context = _context(tmp_path, LibraryTarget.AARCH64_LINUX_ANDROID)

        result = libcrypto().ensure_requirements(context)

        assert isinstance(result, Err)
        assert isinstance(result.error, PrereqMissing)


class TestEnsureSources:
    """Test source checkout."""

    def test_existing_checkout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        src = tmp_path / "src" / "openssl"
        src.mkdir(parents=True)
        (src / "Configure").write_text("", encoding="utf-8")
        calls: list[list[str]] = []
        monkeypatch.setattr(openssl_mod, "run_process", lambda cmd, **_: calls.append(cmd))

        result = libcrypto().ensure_sources(_context(tmp_path), console=MockConsole())

        assert result == Ok(src)
        assert calls == []

    def test_clones(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], cwd: Path, env: object = None, **_: object) -> Ok[str]:
            calls.append(cmd)
            return Ok("")

        monkeypatch.setattr(openssl_mod, "run_process", fake_run)
        console = MockConsole()

        result = libcrypto().ensure_sources(_context(tmp_path), console=console)

        assert result == Ok(tmp_path / "src" / "openssl")
        assert calls[0][:2] == ["git", "clone"]
        assert console.find("git clone")

    def test_clone_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(openssl_mod, "run_process", lambda cmd, **_: _fail(cmd, 128))

        result = libcrypto().ensure_sources(_context(tmp_path), console=MockConsole())

        assert isinstance(result, Err)
        assert isinstance(result.error, SourcesUnavailable)
        assert result.error.detail == "boom"

    def test_dry_run_does_not_clone(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(openssl_mod, "run_process", pytest.fail)

        result = libcrypto().ensure_sources(
            _context(tmp_path), console=MockConsole(), dry_run=True
        )

        assert isinstance(result, Ok)
        assert not (tmp_path / "src").exists()


class TestCompile:
    """Test the full compile step with faked tools."""

    @pytest.fixture
    def checkout(self, tmp_path: Path) -> Path:
        src = tmp_path / "src" / "openssl"
        src.mkdir(parents=True)
        (src / "Configure").write_text("", encoding="utf-8")
        return src

    def _fake_build(
        self, monkeypatch: pytest.MonkeyPatch, installed: list[str]
    ) -> list[tuple[list[str], Path]]:
        calls: list[tuple[list[str], Path]] = []

        def fake_run_silent(cmd: list[str], cwd: Path, env: object = None, **_: object) -> Ok[None]:
            calls.append((cmd, cwd))
            if cmd[0] == "perl":
                (cwd / "makefile").write_text("", encoding="utf-8")
            if cmd[-1] == "install_sw":
                lib_dir = cwd / "build" / "lib"
                lib_dir.mkdir(parents=True, exist_ok=True)
                for name in installed:
                    (lib_dir / name).write_bytes(b"\x7fELF")
            return Ok(None)

        monkeypatch.setattr(openssl_mod, "run_silent", fake_run_silent)
        _tools(monkeypatch, "perl", "make")
        return calls

    @pytest.mark.usefixtures("checkout")
    def test_success(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = self._fake_build(
            monkeypatch, ["libcrypto.so", "libcrypto.so.1.1", "libcrypto.a", "libssl.so"]
        )
        context = _context(tmp_path)

        result = libcrypto().compile(context, console=MockConsole())

        assert result == Ok(tmp_path / "build" / "libcrypto.so")
        assert (tmp_path / "build" / "libcrypto.so").read_bytes() == b"\x7fELF"
        assert [cmd[0] for cmd, _ in calls] == ["perl", "make"]
        assert all(cwd == tmp_path / "build" / "crypto" for _, cwd in calls)

    @pytest.mark.usefixtures("checkout")
    def test_configure_runs_once(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = self._fake_build(monkeypatch, ["libssl.so"])
        context = _context(tmp_path)

        libssl().compile(context, console=MockConsole())
        libssl().compile(context, console=MockConsole())

        assert [cmd[0] for cmd, _ in calls] == ["perl", "make", "make"]

    @pytest.mark.usefixtures("checkout")
    def test_prefers_unversioned_name(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._fake_build(monkeypatch, ["libcrypto-1_1.so", "libcrypto.so"])
        context = _context(tmp_path)
        libcrypto().force_compile(context, console=MockConsole())

        found = libcrypto().find_compiled_library(context)

        assert found is not None
        assert found.name == "libcrypto.so"

    @pytest.mark.usefixtures("checkout")
    def test_output_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._fake_build(monkeypatch, ["libssl.so"])

        result = libcrypto().compile(_context(tmp_path), console=MockConsole())

        assert isinstance(result, Err)
        assert isinstance(result.error, OutputMissing)
        assert result.error.library == "crypto"

    @pytest.mark.usefixtures("checkout")
    def test_configure_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "make")
        monkeypatch.setattr(openssl_mod, "run_silent", lambda cmd, **_: _fail(cmd, 2))

        result = libcrypto().compile(_context(tmp_path), console=MockConsole())

        assert result == Err(ConfigureFailed(library="crypto", returncode=2))

    @pytest.mark.usefixtures("checkout")
    def test_make_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "make")
        makefile = tmp_path / "build" / "ssl" / "makefile"
        makefile.parent.mkdir(parents=True)
        makefile.write_text("", encoding="utf-8")
        monkeypatch.setattr(openssl_mod, "run_silent", lambda cmd, **_: _fail(cmd, 2))

        result = libssl().compile(_context(tmp_path), console=MockConsole())

        assert result == Err(CompileFailed(library="ssl", returncode=2))

    @pytest.mark.usefixtures("checkout")
    def test_missing_tool_stops_before_build(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _tools(monkeypatch)
        monkeypatch.setattr(openssl_mod, "run_silent", pytest.fail)

        result = libcrypto().compile(_context(tmp_path), console=MockConsole())

        assert isinstance(result, Err)
        assert isinstance(result.error, ToolMissing)

    @pytest.mark.usefixtures("checkout")
    def test_dry_run(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "perl", "make")
        monkeypatch.setattr(openssl_mod, "run_silent", pytest.fail)
        console = MockConsole()

        result = libcrypto().compile(_context(tmp_path), console=console, dry_run=True)

        assert result == Ok(tmp_path / "build" / "libcrypto.so")
        assert console.find("perl ")
        assert console.find("make install_sw")
        assert not (tmp_path / "build").exists()


class TestFetch:
    """Test downloading prebuilt binaries."""

    def test_requires_release_version(self, tmp_path: Path) -> None:
        result = libcrypto().fetch(
            LibraryTarget.X86_64_UNKNOWN_LINUX_GNU, tmp_path, console=MockConsole()
        )
        assert result == Err(NoReleaseVersion(library="crypto"))

    def test_dry_run(self, tmp_path: Path) -> None:
        console = MockConsole()

        result = libssl("v1.0.0").fetch(
            LibraryTarget.AARCH64_APPLE_DARWIN, tmp_path, console=console, dry_run=True
        )

        assert result == Ok(tmp_path / "libssl-aarch64-apple-darwin.dylib")
        assert console.messages[0].startswith(
            "gh release download v1.0.0 --repo feenkcom/libopenssl"
        )

    def test_download(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "gh")

        def fake_run(cmd: list[str], cwd: Path, env: object = None, **_: object) -> Ok[str]:
            pattern = cmd[cmd.index("--pattern") + 1]
            (cwd / pattern).write_bytes(b"lib")
            return Ok("")

        monkeypatch.setattr(openssl_mod, "run_process", fake_run)
        dest = tmp_path / "prebuilt"

        result = libcrypto("v1.0.0").fetch(
            LibraryTarget.X86_64_UNKNOWN_LINUX_GNU, dest, console=MockConsole()
        )

        assert result == Ok(dest / "libcrypto-x86_64-unknown-linux-gnu.so")

    def test_download_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch, "gh")
        monkeypatch.setattr(openssl_mod, "run_process", lambda cmd, **_: _fail(cmd))

        result = libcrypto("v1.0.0").fetch(
            LibraryTarget.X86_64_UNKNOWN_LINUX_GNU, tmp_path, console=MockConsole()
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, FetchFailed)

    def test_gh_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _tools(monkeypatch)

        result = libcrypto("v1.0.0").fetch(
            LibraryTarget.X86_64_UNKNOWN_LINUX_GNU, tmp_path, console=MockConsole()
        )

        assert isinstance(result, Err)
        assert result.error == ToolMissing(
            tool="gh", hint="Install GitHub CLI: https://cli.github.com/"
        )
