"""OpenSSL library build recipes."""

from __future__ import annotations

from slb.core.config import Config

from .context import LibraryCompilationContext, Profile
from .errors import BuildError
from .location import GitLocation
from .openssl import Artefact, OpenSSLLibrary
from .target import LibraryTarget, UnknownTarget

__all__ = [
    "Artefact",
    "BuildError",
    "GitLocation",
    "LibraryCompilationContext",
    "LibraryTarget",
    "OpenSSLLibrary",
    "Profile",
    "UnknownTarget",
    "libcrypto",
    "libopenssl",
    "libraries_from_config",
    "libssl",
]


def libopenssl(binary_version: str | None = None) -> OpenSSLLibrary:
    """OpenSSL library; prebuilt binaries come from feenkcom/libopenssl@<version>."""
    release = None
    if binary_version is not None:
        release = GitLocation.github("feenkcom", "libopenssl").with_tag(binary_version)
    return OpenSSLLibrary().with_release_location(release)


def libssl(binary_version: str | None = None) -> OpenSSLLibrary:
    return libopenssl(binary_version).be_ssl()


def libcrypto(binary_version: str | None = None) -> OpenSSLLibrary:
    return libopenssl(binary_version).be_crypto()


def libraries_from_config(config: Config) -> list[OpenSSLLibrary]:
    """Libraries to build, in build order, with source/release from config."""
    source = GitLocation.github(config.source.owner, config.source.repo)
    if config.source.tag is not None:
        source = source.with_tag(config.source.tag)
    elif config.source.branch is not None:
        source = source.with_branch(config.source.branch)

    release = None
    if config.release.version is not None:
        release = GitLocation.github(config.release.owner, config.release.repo).with_tag(
            config.release.version
        )

    base = OpenSSLLibrary().with_source_location(source).with_release_location(release)
    out: list[OpenSSLLibrary] = []
    for name in config.build.libraries:
        out.append(base.be_ssl() if name == "ssl" else base.be_crypto())
    return out
