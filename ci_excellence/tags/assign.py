"""Tag assignment.

Version and state tags record release history: they are created once and
only ``force_move`` rewrites them. Environment tags point at the current
deployment and move freely. Every assigned tag is annotated and records the
commit it replaced.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..errors import ConflictError, NotFoundError, ValidationError
from ..github import git
from ..utils import log
from .classify import is_movable, validate_tag


ASSIGNABLE_KINDS: Tuple[str, ...] = ("version", "environment", "state")

SUBPROJECT_RE = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")


@dataclass(frozen=True)
class TagAssignment:
    tag: str
    kind: str
    commit: str
    previous: Optional[str]
    moved: bool
    pushed: bool

    @property
    def should_deploy(self) -> bool:
        return self.kind == "environment"


def assignment_tag_name(
    kind: str,
    *,
    version: str = "",
    environment: str = "",
    state: str = "",
    subproject: str = "",
    tag_prefix: str = "v",
) -> str:
    """Build the tag name for ``kind`` and check it classifies as that kind.

    ``api`` + ``v1.2.3`` gives ``api/v1.2.3``; state ``stable`` gives
    ``api/v1.2.3-stable``; environment ``production`` gives ``api/production``.
    """
    if kind not in ASSIGNABLE_KINDS:
        raise ValidationError(f"Invalid tag type: {kind!r} (must be one of {', '.join(ASSIGNABLE_KINDS)})")
    subproject = subproject.strip()
    if subproject and not SUBPROJECT_RE.match(subproject):
        raise ValidationError(f"Invalid subproject {subproject!r}: use lowercase letters, digits and hyphens")
    scope = f"{subproject}/" if subproject else ""

    if kind == "environment":
        if not environment.strip():
            raise ValidationError("Environment is required for environment tags")
        name = f"{scope}{environment.strip()}"
    else:
        v = version.strip()
        if not v:
            raise ValidationError(f"Version is required for {kind} tags")
        if tag_prefix and not v.startswith(tag_prefix):
            v = f"{tag_prefix}{v}"
        if kind == "state":
            if not state.strip():
                raise ValidationError("State is required for state tags")
            v = f"{v}-{state.strip()}"
        name = f"{scope}{v}"

    validate_tag(name, kind)
    return name


def _tag_message(kind: str, tag: str, commit: str, previous: Optional[str]) -> str:
    if previous is None:
        return f"Created {kind} tag: {tag}\n\nCommit: {commit}"
    return f"Moved {kind} tag: {tag}\n\nOld commit: {previous}\nNew commit: {commit}"


def assign_tag(
    kind: str,
    *,
    version: str = "",
    environment: str = "",
    state: str = "",
    subproject: str = "",
    commit: str = "HEAD",
    force_move: bool = False,
    repo: Optional[Path] = None,
    remote: str = "origin",
    push: bool = False,
    tag_prefix: str = "v",
) -> TagAssignment:
    """Create or move a version, environment or state tag at ``commit``.

    An existing version or state tag raises ConflictError unless ``force_move``
    is set. A tag already at ``commit`` is left alone.
    """
    name = assignment_tag_name(
        kind,
        version=version,
        environment=environment,
        state=state,
        subproject=subproject,
        tag_prefix=tag_prefix,
    )
    if not git.ref_exists(f"{commit}^{{commit}}", cwd=repo):
        raise NotFoundError(f"Commit not found: {commit}")
    target = git.commit_of(commit, cwd=repo)

    previous = git.commit_of(name, cwd=repo) if git.tag_exists(name, cwd=repo) else None
    if previous is not None and not is_movable(name):
        if not force_move:
            raise ConflictError(f"{kind.capitalize()} tag {name} already exists and is immutable; use force_move to override")
        log.warn("tags", f"Force moving existing {kind} tag: {name}")

    if previous == target:
        log.info("tags", f"{name} already points to {target[:7]}")
        return TagAssignment(name, kind, target, previous, moved=False, pushed=False)

    git.configure_bot_identity(cwd=repo)
    git.force_tag(name, target, cwd=repo, message=_tag_message(kind, name, target, previous))
    if previous is None:
        log.info("tags", f"Created {kind} tag {name} -> {target[:7]}")
    else:
        log.info("tags", f"Moved {kind} tag {name}: {previous[:7]} -> {target[:7]}")

    if push:
        git.push_tag(name, remote=remote, force=previous is not None, cwd=repo)
        log.info("tags", f"Pushed {name} to {remote}")
    return TagAssignment(name, kind, target, previous, moved=previous is not None, pushed=push)
