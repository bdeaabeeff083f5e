"""Typed configuration loading and access.

The optional `slb.toml` at the project root is parsed into frozen
dataclasses. Every key has a default, so a missing file is equivalent to an
empty one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "BUMP_KINDS",
    "CONFIG_FILENAME",
    "DEFAULT_BUILD_COMMAND",
    "DEFAULT_TARGETS",
    "BuildConfig",
    "Config",
    "ConfigError",
    "PipelineConfig",
    "ReleaseConfig",
    "SourceConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "slb.toml"

BUMP_KINDS = ("patch", "minor", "major")

DEFAULT_TARGETS = (
    "x86_64-apple-darwin",
    "aarch64-apple-darwin",
    "x86_64-unknown-linux-gnu",
    "aarch64-unknown-linux-gnu",
    "x86_64-pc-windows-msvc",
    "aarch64-pc-windows-msvc",
    "aarch64-linux-android",
)

# Placeholders: {python}, {target}, {profile}
DEFAULT_BUILD_COMMAND = "{python} -m slb build --target {target} --{profile}"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Where the OpenSSL sources are cloned from."""

    owner: str = "syrel"
    repo: str = "openssl"
    branch: str | None = "OpenSSL_1_1_1-stable-Windows-pkgconfig"
    tag: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release repository and releaser executable.

    `version` pins the prebuilt binaries used by `slb fetch`; it does not
    influence what the releaser publishes.
    """

    owner: str = "feenkcom"
    repo: str = "libopenssl"
    releaser: str = "feenk-releaser"
    token_env: str = "GITHUB_TOKEN"
    version: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Compilation settings shared by every target."""

    target_dir: str = "target"
    android_api: int = 24
    static: bool = False
    libraries: tuple[str, ...] = ("crypto", "ssl")


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Pipeline parameters defaults."""

    targets: tuple[str, ...] = DEFAULT_TARGETS
    build_command: str = DEFAULT_BUILD_COMMAND
    bump: str = "patch"
    dist_dir: str = "dist"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    source: SourceConfig = field(default_factory=SourceConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a value is present but invalid.
        """
        source: StrDict = get_table(data, "source") or {}
        release: StrDict = get_table(data, "release") or {}
        build: StrDict = get_table(data, "build") or {}
        pipeline: StrDict = get_table(data, "pipeline") or {}

        source_defaults = SourceConfig()
        tag = get_str(source, "tag")
        branch = get_str(source, "branch")
        if tag is not None and branch is not None:
            raise ValueError("source.branch and source.tag are mutually exclusive")
        if tag is None and branch is None:
            branch = source_defaults.branch

        bump = get_str(pipeline, "bump") or "patch"
        if bump not in BUMP_KINDS:
            raise ValueError(f"pipeline.bump must be one of {', '.join(BUMP_KINDS)}: {bump}")

        android_api = get_int(build, "android_api")
        if android_api is not None and android_api <= 0:
            raise ValueError(f"build.android_api must be positive: {android_api}")

        libraries = get_str_list(build, "libraries")
        if libraries is not None:
            unknown = [name for name in libraries if name not in ("crypto", "ssl")]
            if unknown:
                raise ValueError(f"unknown build.libraries: {', '.join(unknown)}")

        return cls(
            source=SourceConfig(
                owner=get_str(source, "owner") or source_defaults.owner,
                repo=get_str(source, "repo") or source_defaults.repo,
                branch=branch,
                tag=tag,
            ),
            release=ReleaseConfig(
                owner=get_str(release, "owner") or "feenkcom",
                repo=get_str(release, "repo") or "libopenssl",
                releaser=get_str(release, "releaser") or "feenk-releaser",
                token_env=get_str(release, "token_env") or "GITHUB_TOKEN",
                version=get_str(release, "version"),
            ),
            build=BuildConfig(
                target_dir=get_str(build, "target_dir") or "target",
                android_api=android_api or 24,
                static=bool(get_bool(build, "static")),
                libraries=tuple(libraries) if libraries else ("crypto", "ssl"),
            ),
            pipeline=PipelineConfig(
                targets=tuple(get_str_list(pipeline, "targets") or DEFAULT_TARGETS),
                build_command=get_str(pipeline, "build_command") or DEFAULT_BUILD_COMMAND,
                bump=bump,
                dist_dir=get_str(pipeline, "dist_dir") or "dist",
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, default config otherwise.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
