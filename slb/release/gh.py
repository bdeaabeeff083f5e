from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep

from slb.core.result import Err, Ok, Result
from slb.core.structured import as_obj_list, as_str_dict, get_str
from slb.platform.process import ProcessError
from slb.platform.process import run as run_process
from slb.release.errors import ReleaseError, ReleaseErrorKind
from slb.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def run_gh_read(
    *,
    cwd: Path,
    cmd: list[str],
    kind: ReleaseErrorKind,
    message: str,
    hint: str | None = None,
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ReleaseError]:
    """Run a read-only gh command, retrying transient network failures."""
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=cwd, timeout=timeout)
        if isinstance(result, Ok):
            return result

        error = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue

        return Err(ReleaseError(kind=kind, message=message, hint=error.stderr.strip() or hint))

    return Err(ReleaseError(kind=kind, message=message, hint=hint))


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def gh_api_json(*, cwd: Path, endpoint: str) -> Result[object, ReleaseError]:
    result = run_gh_read(
        cwd=cwd,
        cmd=["gh", "api", endpoint],
        kind="invalid_input",
        message=f"gh api failed: {endpoint}",
        hint=endpoint,
    )
    if isinstance(result, Err):
        return result

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"gh api returned invalid JSON: {e}",
                hint=endpoint,
            )
        )
    return Ok(obj)


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    tag: str
    url: str | None
    assets: tuple[str, ...]


def latest_release(*, cwd: Path, repo: str) -> Result[PublishedRelease, ReleaseError]:
    """Latest published (non-draft, non-prerelease) release of `repo`."""
    obj = gh_api_json(cwd=cwd, endpoint=f"repos/{repo}/releases/latest")
    if isinstance(obj, Err):
        return obj

    data = as_str_dict(obj.value)
    if data is None:
        return Err(ReleaseError(kind="invalid_input", message=f"unexpected release payload: {repo}"))

    tag = get_str(data, "tag_name")
    if tag is None:
        return Err(ReleaseError(kind="invalid_input", message=f"missing tag_name: {repo}"))

    names: list[str] = []
    for item in as_obj_list(data.get("assets")) or []:
        asset = as_str_dict(item)
        if asset is None:
            continue
        name = get_str(asset, "name")
        if name is not None:
            names.append(name)

    return Ok(PublishedRelease(tag=tag, url=get_str(data, "html_url"), assets=tuple(names)))
