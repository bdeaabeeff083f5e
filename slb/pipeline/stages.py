"""Declarative build stages: one per target, each bound to an agent label.

On the CI host every stage runs on an agent whose labels satisfy the stage's
label expression (`macos && arm64`). Locally the same expression decides
whether the current host can run the stage.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass

from slb.core.config import Config
from slb.library.target import LibraryTarget
from slb.pipeline.params import BuildParameters
from slb.platform.detection import Arch, PlatformInfo
from slb.platform.shell import ShellKind, join_command, wrap_command

__all__ = [
    "Stage",
    "build_step",
    "can_run_on",
    "default_stages",
    "host_labels",
    "select_stages",
]


@dataclass(frozen=True, slots=True)
class Stage:
    name: str
    target: LibraryTarget
    agent_label: str
    shell: ShellKind

    @property
    def label_terms(self) -> frozenset[str]:
        return frozenset(t.strip() for t in self.agent_label.split("&&") if t.strip())


_STAGES: tuple[Stage, ...] = (
    Stage("MacOS x86_64", LibraryTarget.X86_64_APPLE_DARWIN, "macos && x86_64", "sh"),
    Stage("MacOS M1", LibraryTarget.AARCH64_APPLE_DARWIN, "macos && arm64", "sh"),
    Stage("Linux x86_64", LibraryTarget.X86_64_UNKNOWN_LINUX_GNU, "linux && x86_64", "sh"),
    Stage("Linux arm64", LibraryTarget.AARCH64_UNKNOWN_LINUX_GNU, "linux && arm64", "sh"),
    Stage(
        "Windows x86_64",
        LibraryTarget.X86_64_PC_WINDOWS_MSVC,
        "windows && x86_64",
        "powershell",
    ),
    # Cross-compiled from an x86_64 host with the arm64 MSVC toolset.
    Stage(
        "Windows arm64",
        LibraryTarget.AARCH64_PC_WINDOWS_MSVC,
        "windows && x86_64",
        "powershell",
    ),
    # Cross-compiled with the NDK.
    Stage("Android arm64", LibraryTarget.AARCH64_LINUX_ANDROID, "linux && x86_64", "sh"),
)


def default_stages() -> tuple[Stage, ...]:
    return _STAGES


def select_stages(stages: tuple[Stage, ...], targets: tuple[LibraryTarget, ...]) -> list[Stage]:
    """Stages for `targets`, in the order the targets were given."""
    by_target = {s.target: s for s in stages}
    return [by_target[t] for t in targets if t in by_target]


def host_labels(host: PlatformInfo) -> frozenset[str]:
    arch = {Arch.X64: "x86_64", Arch.ARM64: "arm64"}.get(host.arch, "unknown")
    return frozenset({str(host.platform), arch})


def can_run_on(stage: Stage, host: PlatformInfo) -> bool:
    """True if every term of the stage's agent label is a label of `host`."""
    return stage.label_terms <= host_labels(host)


def build_step(stage: Stage, params: BuildParameters, config: Config) -> list[str]:
    """Argv running the build tool for the stage through the stage's shell."""
    command = config.pipeline.build_command.format(
        python=join_command([sys.executable], stage.shell),
        target=stage.target.value,
        profile=params.profile,
    )
    return wrap_command(stage.shell, command)
