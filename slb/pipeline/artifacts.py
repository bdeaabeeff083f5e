"""Hand-over of compiled libraries between build stages and the release step.

Each stage copies its outputs into the dist directory under their release
asset names (`lib<name>-<triple>.<ext>`) next to a `.sha256` sidecar. The
release step then publishes every asset found there.
"""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path

from slb.core.result import Err, Ok, Result
from slb.library.openssl import OpenSSLLibrary
from slb.library.target import LibraryTarget
from slb.pipeline.errors import ArtifactMissing

__all__ = [
    "CHECKSUM_SUFFIX",
    "asset_names",
    "clean_assets",
    "collect_artifacts",
    "compiled_output",
    "list_assets",
    "sha256_file",
]

CHECKSUM_SUFFIX = ".sha256"


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def compiled_output(
    library: OpenSSLLibrary, target: LibraryTarget, build_root: Path, *, static: bool
) -> Path:
    """Where the build step leaves the library (`<build_root>/lib<name>.<ext>`)."""
    return build_root / f"lib{library.name}.{target.library_extension(static=static)}"


def collect_artifacts(
    *,
    libraries: list[OpenSSLLibrary],
    target: LibraryTarget,
    build_root: Path,
    dist_dir: Path,
    static: bool = False,
) -> Result[list[Path], ArtifactMissing]:
    """Copy a stage's compiled libraries into dist_dir as release assets."""
    collected: list[Path] = []
    for library in libraries:
        src = compiled_output(library, target, build_root, static=static)
        if not src.is_file():
            return Err(ArtifactMissing(library=library.name, path=src))

        dist_dir.mkdir(parents=True, exist_ok=True)
        dest = dist_dir / library.release_asset_name(target, static=static)
        shutil.copy2(src, dest)
        checksum = dest.with_name(dest.name + CHECKSUM_SUFFIX)
        checksum.write_text(f"{sha256_file(dest)}  {dest.name}\n", encoding="utf-8")
        collected.append(dest)
    return Ok(collected)


def asset_names(libraries: list[OpenSSLLibrary]) -> frozenset[str]:
    """Every asset name the libraries can produce, for any target and link mode."""
    return frozenset(
        library.release_asset_name(target, static=static)
        for library in libraries
        for target in LibraryTarget
        for static in (False, True)
    )


def list_assets(dist_dir: Path, libraries: list[OpenSSLLibrary]) -> list[Path]:
    """Stashed release assets in dist_dir, sorted; other files are ignored."""
    if not dist_dir.is_dir():
        return []
    names = asset_names(libraries)
    return sorted(p for p in dist_dir.iterdir() if p.is_file() and p.name in names)


def clean_assets(dist_dir: Path, libraries: list[OpenSSLLibrary]) -> list[Path]:
    """Remove assets left over from a previous run; other files are kept."""
    if not dist_dir.is_dir():
        return []

    assets = asset_names(libraries)
    names = assets | {name + CHECKSUM_SUFFIX for name in assets}

    removed: list[Path] = []
    for p in sorted(dist_dir.iterdir()):
        if p.is_file() and p.name in names:
            p.unlink()
            removed.append(p)
    return removed
