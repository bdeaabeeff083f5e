"""Tests for the slb command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from slb import __version__
from slb.cli.app import app
from slb.core.errors import ErrorCode
from slb.core.result import Err, Ok
from slb.library.target import LibraryTarget

runner = CliRunner()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("SLB_ROOT", str(tmp_path))
    monkeypatch.setenv("COLUMNS", "200")
    return tmp_path


class TestApp:
    """Test top-level options."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.output.strip() == __version__

    def test_root_must_exist(self, project: Path) -> None:
        result = runner.invoke(app, ["--root", str(project / "missing"), "targets"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)

    def test_invalid_config(self, project: Path) -> None:
        (project / "slb.toml").write_text('[pipeline]\nbump = "huge"\n', encoding="utf-8")

        result = runner.invoke(app, ["targets"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)


class TestTargets:
    """Test `slb targets`."""

    @pytest.mark.usefixtures("project")
    def test_lists_every_target(self) -> None:
        result = runner.invoke(app, ["targets"])

        assert result.exit_code == 0
        assert "aarch64-linux-android" in result.output
        assert "VC-WIN64-ARM" in result.output
        assert "darwin64-arm64-cc" in result.output

    @pytest.mark.usefixtures("project")
    def test_marks_host_target(self) -> None:
        result = runner.invoke(app, ["targets"])

        marked = [line for line in result.output.splitlines() if "(host)" in line]
        match LibraryTarget.for_current_platform():
            case Ok(host):
                assert len(marked) == 1
                assert marked[0].startswith(host.value)
            case Err():
                assert marked == []


class TestBuild:
    """Test `slb build` argument handling."""

    @pytest.mark.usefixtures("project")
    def test_unknown_target(self) -> None:
        result = runner.invoke(app, ["build", "--target", "sparc-sun-solaris"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "unknown target" in result.output

    @pytest.mark.usefixtures("project")
    def test_unknown_library(self) -> None:
        result = runner.invoke(
            app, ["build", "--target", "x86_64-unknown-linux-gnu", "--library", "tls"]
        )

        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "unknown library" in result.output


class TestFetch:
    """Test `slb fetch`."""

    @pytest.mark.usefixtures("project")
    def test_requires_version(self) -> None:
        result = runner.invoke(app, ["fetch", "--target", "x86_64-unknown-linux-gnu"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "no release version" in result.output

    @pytest.mark.usefixtures("project")
    def test_dry_run(self) -> None:
        result = runner.invoke(
            app,
            ["fetch", "--version", "v1.0.0", "--target", "aarch64-apple-darwin", "--dry-run"],
        )

        assert result.exit_code == 0
        assert "gh release download v1.0.0" in result.output
        assert "libssl-aarch64-apple-darwin.dylib" in result.output


class TestCollect:
    """Test `slb collect`."""

    def test_missing_outputs(self, project: Path) -> None:
        result = runner.invoke(app, ["collect", "--target", "x86_64-unknown-linux-gnu"])

        assert result.exit_code == int(ErrorCode.IO_ERROR)
        assert not (project / "dist").exists()

    def test_collects(self, project: Path) -> None:
        build_root = project / "target" / "x86_64-unknown-linux-gnu"
        build_root.mkdir(parents=True)
        (build_root / "libcrypto.so").write_bytes(b"crypto")
        (build_root / "libssl.so").write_bytes(b"ssl")

        result = runner.invoke(app, ["collect", "--target", "x86_64-unknown-linux-gnu"])

        assert result.exit_code == 0
        assert (project / "dist" / "libcrypto-x86_64-unknown-linux-gnu.so").is_file()
        assert (project / "dist" / "libssl-x86_64-unknown-linux-gnu.so.sha256").is_file()


class TestPipeline:
    """Test `slb pipeline`."""

    @pytest.mark.usefixtures("project")
    def test_show(self) -> None:
        result = runner.invoke(app, ["pipeline", "show"])

        assert result.exit_code == 0
        for name in ("MacOS x86_64", "MacOS M1", "Windows arm64", "Android arm64"):
            assert name in result.output
        assert "windows && x86_64" in result.output

    @pytest.mark.usefixtures("project")
    def test_show_invalid_target(self) -> None:
        result = runner.invoke(app, ["pipeline", "show", "--target", "bogus"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "invalid target: bogus" in result.output

    @pytest.mark.usefixtures("project")
    def test_run_invalid_bump(self) -> None:
        result = runner.invoke(app, ["pipeline", "run", "--bump", "huge", "--dry-run"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)

    def test_run_dry_run_with_release(self, project: Path) -> None:
        result = runner.invoke(
            app,
            [
                "pipeline",
                "run",
                "--target",
                "aarch64-linux-android",
                "--publish",
                "--force",
                "--dry-run",
            ],
        )

        assert result.exit_code == 0
        assert "Android arm64" in result.output
        assert "feenk-releaser" in result.output
        assert not (project / "dist").exists()


class TestRelease:
    """Test `slb release`."""

    @pytest.mark.usefixtures("project")
    def test_no_assets(self) -> None:
        result = runner.invoke(app, ["release", "--dry-run"])

        assert result.exit_code == int(ErrorCode.IO_ERROR)
        assert "no release assets" in result.output

    def test_dry_run(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        dist = project / "dist"
        dist.mkdir()
        (dist / "libssl-x86_64-unknown-linux-gnu.so").write_bytes(b"ssl")
        (dist / "libssl-x86_64-unknown-linux-gnu.so.sha256").write_text("x", encoding="utf-8")

        result = runner.invoke(app, ["release", "--bump", "minor", "--dry-run"])

        assert result.exit_code == 0
        assert "asset: libssl-x86_64-unknown-linux-gnu.so" in result.output
        assert "--bump minor" in result.output
        assert ".sha256" not in result.output

    @pytest.mark.usefixtures("project")
    def test_invalid_bump(self) -> None:
        result = runner.invoke(app, ["release", "--bump", "huge"])

        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "invalid bump: huge" in result.output
