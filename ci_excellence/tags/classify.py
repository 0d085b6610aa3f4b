from __future__ import annotations

import re
from typing import Literal, Tuple

from ..errors import ValidationError
from ..versioning.semver import VERSION_RE


TagKind = Literal["version", "environment", "state", "stability", "rollback", "unknown"]
TAG_KIND_VALUES: Tuple[str, ...] = ("version", "environment", "state", "stability", "rollback", "unknown")

ENVIRONMENTS: Tuple[str, ...] = ("production", "staging", "canary", "sandbox", "performance")
STABILITY_TAGS: Tuple[str, ...] = ("stable", "unstable")
STATES: Tuple[str, ...] = ("stable", "unstable", "deprecated")

ENVIRONMENT_TAG_RE = re.compile(r"^(?:(?P<subproject>.+)/)?(?P<environment>" + "|".join(ENVIRONMENTS) + r")$")
STATE_TAG_RE = re.compile(
    r"^(?:(?P<subproject>.+)/)?v(?P<version>[0-9]+\.[0-9]+\.[0-9]+(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?)"
    r"-(?P<state>" + "|".join(STATES) + r")$"
)
ROLLBACK_TAG_RE = re.compile(r"^rollback-(?P<timestamp>[0-9]{8}-[0-9]{6})-(?P<environment>[A-Za-z0-9_.-]+)$")

# git describe --exclude patterns that keep state tags out of version lookups.
STATE_TAG_GLOBS: Tuple[str, ...] = tuple(f"*-{state}" for state in STATES)


def strip_ref(tag: str) -> str:
    s = str(tag or "").strip()
    return s[len("refs/tags/"):] if s.startswith("refs/tags/") else s


def tag_kind(tag: str) -> TagKind:
    t = strip_ref(tag)
    if t in STABILITY_TAGS:
        return "stability"
    if ROLLBACK_TAG_RE.match(t):
        return "rollback"
    # State tags would also satisfy the version grammar (-stable reads as a prerelease).
    if STATE_TAG_RE.match(t):
        return "state"
    if t.rsplit("/", 1)[-1].startswith("v") and VERSION_RE.match(t):
        return "version"
    if ENVIRONMENT_TAG_RE.match(t):
        return "environment"
    return "unknown"


def validate_tag(tag: str, expected: str = "") -> TagKind:
    kind = tag_kind(tag)
    if kind == "unknown":
        raise ValidationError(f"Unknown tag format: {tag}")
    if expected and kind != expected:
        raise ValidationError(f"Tag type mismatch. Expected: {expected}, Got: {kind}")
    return kind


def is_movable(tag: str) -> bool:
    """Environment and stability tags are pointers; release history tags never move."""
    return tag_kind(tag) in ("environment", "stability")


def is_protected(tag: str) -> bool:
    return tag_kind(tag) == "environment"
