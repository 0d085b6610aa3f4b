from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Iterable, List

from ..errors import GitError, NotFoundError, ValidationError


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, check=False, text=True, capture_output=True)


def release_exists(tag: str) -> bool:
    cp = _run(["gh", "release", "view", tag])
    return cp.returncode == 0


def release_is_draft(tag: str) -> bool:
    cmd = ["gh", "release", "view", tag, "--json", "isDraft"]
    cp = _run(cmd)
    if cp.returncode != 0:
        raise NotFoundError(f"GitHub release not found: {tag}")
    try:
        data = json.loads(cp.stdout or "{}")
    except json.JSONDecodeError as e:
        raise GitError(cmd, cp.returncode, message=f"unexpected gh output for {tag}: {e}") from e
    return bool(data.get("isDraft"))


def verify_release(tag: str) -> None:
    """A release passes verification when it exists and is published (not a draft)."""
    if not release_exists(tag):
        raise NotFoundError(f"GitHub release not found: {tag}")
    if release_is_draft(tag):
        raise ValidationError(f"GitHub release {tag} is still in draft")


def mark_release_draft(tag: str) -> None:
    """Roll a release back by turning it into a draft again."""
    cmd = ["gh", "release", "edit", tag, "--draft"]
    cp = _run(cmd)
    if cp.returncode != 0:
        raise GitError(cmd, cp.returncode, cp.stderr, message=f"Failed to mark release {tag} as draft: {cp.stderr.strip()}")


def upload_release_assets(tag: str, files: Iterable[Path], clobber: bool = True) -> None:
    cmd = ["gh", "release", "upload", tag]
    if clobber:
        cmd.append("--clobber")
    cmd.extend([str(p) for p in files])
    cp = _run(cmd)
    if cp.returncode != 0:
        raise GitError(cmd, cp.returncode, cp.stderr, message=f"Failed to upload release assets for {tag}: {cp.stderr.strip()}")
