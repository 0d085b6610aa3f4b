from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import CiConfig
from ..errors import ValidationError
from ..github import git
from ..tags.classify import STATE_TAG_GLOBS
from ..utils import log
from .calculator import next_version
from .semver import SemVer, parse_version


_POST_RELEASE_VERSION_RE = re.compile(r"^(v[0-9]+\.[0-9]+\.[0-9]+|[0-9]+\.[0-9]+\.[0-9]+.*)$")


@dataclass(frozen=True)
class VersionOutputs:
    version: str
    is_prerelease: bool


def current_version(config: CiConfig, repo: Optional[Path] = None) -> SemVer:
    """Version of the closest reachable release tag, or the configured default."""
    prefix = config.versioning.tag_prefix
    tag = git.describe_latest_tag(f"{prefix}*", cwd=repo, exclude=STATE_TAG_GLOBS)
    if tag is None:
        log.warn("version", f"No existing tags found. Defaulting to {config.versioning.default_version}")
        return parse_version(config.versioning.default_version)
    raw = tag[len(prefix):] if prefix and tag.startswith(prefix) else tag
    return parse_version(raw)


def determine_next_version(
    release_type: str,
    label: Optional[str],
    config: CiConfig,
    repo: Optional[Path] = None,
) -> SemVer:
    current = current_version(config, repo)
    log.info("version", f"Current Version: {current}")
    log.info("version", f"Release Type: {release_type}")
    new = next_version(current, release_type, label or config.versioning.prerelease_label)
    log.info("version", f"Calculated Version: {new}")
    return new


def version_outputs(
    release_type: str,
    prerelease_input: bool,
    config: CiConfig,
    repo: Optional[Path] = None,
    label: Optional[str] = None,
) -> VersionOutputs:
    new = determine_next_version(release_type, label, config, repo)
    return VersionOutputs(version=str(new), is_prerelease=bool(prerelease_input) or new.is_prerelease)


def select_version(event_name: str, release_tag: str = "", input_version: str = "") -> str:
    """Pick the version for a release run: the release tag on ``release`` events, else the input."""
    if event_name == "release" and release_tag.strip():
        return release_tag.strip()
    if input_version.strip():
        return input_version.strip()
    raise ValidationError("Version not provided")


def post_release_version(event_name: str, release_tag: str = "", input_version: str = "") -> str:
    """Version targeted by a post-release run, from a ``release`` or ``workflow_dispatch`` event."""
    if event_name == "release":
        version = release_tag.strip()
        log.info("version", f"Version from release event: {version}")
    elif event_name == "workflow_dispatch":
        version = input_version.strip()
        log.info("version", f"Version from workflow_dispatch input: {version}")
    else:
        raise ValidationError(f"Unsupported event type: {event_name!r}")

    if not version:
        raise ValidationError("Version is empty")
    if not _POST_RELEASE_VERSION_RE.match(version):
        raise ValidationError(f"Invalid version format: {version} (expected v1.2.3, 1.2.3 or 1.2.3-alpha)")
    return version
