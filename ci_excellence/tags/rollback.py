from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..errors import NotFoundError, ValidationError
from ..github import git
from ..utils import log
from .classify import ROLLBACK_TAG_RE


ROLLBACK_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# (feature flag, action text) in the order they are announced.
ROLLBACK_ACTIONS = (
    ("npm_publish", "Deprecate NPM package version"),
    ("github_release", "Mark GitHub release as draft"),
    ("docker_publish", "Tag Docker images as deprecated"),
)


@dataclass(frozen=True)
class RollbackTarget:
    ref: str
    commit: str
    source: str  # explicit | stable | environment | rollback


def rollback_tag_name(environment: str, now: Optional[datetime] = None) -> str:
    env = str(environment or "").strip() or "all"
    ts = (now or datetime.now(timezone.utc)).strftime(ROLLBACK_TIMESTAMP_FORMAT)
    name = f"rollback-{ts}-{env}"
    if not ROLLBACK_TAG_RE.match(name):
        raise ValidationError(f"Invalid rollback environment name: {environment!r}")
    return name


def latest_rollback_tag(repo: Optional[Path] = None) -> Optional[str]:
    tags = [t for t in git.list_tags("rollback-*", cwd=repo) if ROLLBACK_TAG_RE.match(t)]
    if not tags:
        return None
    # The timestamp is fixed-width, so the lexical maximum is the newest.
    return max(tags, key=lambda t: ROLLBACK_TAG_RE.match(t).group("timestamp"))  # type: ignore[union-attr]


def find_rollback_target(
    *,
    explicit_tag: str = "",
    use_latest_stable: bool = False,
    environment: str = "",
    repo: Optional[Path] = None,
) -> RollbackTarget:
    """Choose what to roll back to.

    Order: an explicit tag, then the ``stable`` pointer when requested, then the
    environment tag, then the newest ``rollback-*`` tag.
    """
    if explicit_tag:
        if not git.ref_exists(f"{explicit_tag}^{{commit}}", cwd=repo):
            raise NotFoundError(f"Rollback tag not found: {explicit_tag}")
        return RollbackTarget(explicit_tag, git.commit_of(explicit_tag, cwd=repo), "explicit")

    if use_latest_stable:
        if not git.tag_exists("stable", cwd=repo):
            raise NotFoundError("No stable tags found for rollback")
        return RollbackTarget("stable", git.commit_of("stable", cwd=repo), "stable")

    if environment and git.tag_exists(environment, cwd=repo):
        return RollbackTarget(environment, git.commit_of(environment, cwd=repo), "environment")

    tag = latest_rollback_tag(repo)
    if tag:
        return RollbackTarget(tag, git.commit_of(tag, cwd=repo), "rollback")

    raise NotFoundError("No suitable rollback tag found")


def confirm_rollback_message(version: str, enabled: Optional[List[str]] = None) -> str:
    """Warning printed before a rollback, listing the actions it will take.

    ``enabled`` holds the feature names that are switched on; None announces
    every action as conditional.
    """
    lines = [
        f"WARNING: Rolling back version {version or 'unknown'}",
        "This action will:",
    ]
    for feature, text in ROLLBACK_ACTIONS:
        if enabled is None:
            lines.append(f"  - {text} (if enabled)")
        elif feature in enabled:
            lines.append(f"  - {text}")
    if enabled is not None and len(lines) == 2:
        lines.append("  - Nothing (no rollback targets are enabled)")
    return "\n".join(lines)


def create_rollback_tag(
    environment: str,
    target: RollbackTarget,
    *,
    repo: Optional[Path] = None,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> str:
    name = rollback_tag_name(environment, now)
    if dry_run:
        log.info("rollback", f"[DRY RUN] Would create rollback tag {name} -> {target.ref}")
        return name
    git.configure_bot_identity(cwd=repo)
    head = git.short_sha("HEAD", cwd=repo)
    git.force_tag(name, target.commit, cwd=repo, message=f"Rollback from {head} to {target.ref}")
    log.info("rollback", f"Rollback tag created: {name} -> {target.ref} ({target.commit[:7]})")
    return name
