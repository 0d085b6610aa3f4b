"""Stability tags.

``stable`` and ``unstable`` are movable pointers at a released version. Moving
one is a forced tag update followed by a forced push: the last writer wins and
concurrent runs are not coordinated.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import ValidationError
from ..github import git
from ..utils import log
from .classify import STABILITY_TAGS


@dataclass(frozen=True)
class StabilityTagResult:
    tag: str
    version: str
    version_ref: str
    commit: str
    pushed: bool


def resolve_version_ref(version: str, tag_prefix: str = "v", repo: Optional[Path] = None) -> str:
    """Find the ref for ``version``. Both ``1.2.3`` and ``v1.2.3`` are accepted."""
    v = version.strip()
    candidates = [v]
    if tag_prefix and not v.startswith(tag_prefix):
        candidates.insert(0, f"{tag_prefix}{v}")
    for ref in candidates:
        if git.ref_exists(f"{ref}^{{commit}}", cwd=repo):
            return ref
    raise ValidationError(f"Version not found in repository: {version}")


def apply_stability_tag(
    tag_name: str,
    version: str,
    *,
    repo: Optional[Path] = None,
    remote: str = "origin",
    push: bool = True,
    tag_prefix: str = "v",
) -> StabilityTagResult:
    if not tag_name or not version:
        raise ValidationError("Usage: apply-stability-tag <stable|unstable> <version>")
    if tag_name not in STABILITY_TAGS:
        raise ValidationError(f"Invalid stability tag {tag_name!r} (expected one of {list(STABILITY_TAGS)})")

    version_ref = resolve_version_ref(version, tag_prefix, repo)
    # Peel annotated tags so the pointer names the commit, not the tag object.
    commit = git.commit_of(version_ref, cwd=repo)

    git.configure_bot_identity(cwd=repo)
    git.force_tag(tag_name, commit, cwd=repo)
    log.info("tags", f"{tag_name} -> {version_ref} ({commit[:7]})")

    if push:
        git.push_tag(tag_name, remote=remote, force=True, cwd=repo)
        log.info("tags", f"force-pushed {tag_name} to {remote}")

    return StabilityTagResult(tag=tag_name, version=version, version_ref=version_ref, commit=commit, pushed=push)
