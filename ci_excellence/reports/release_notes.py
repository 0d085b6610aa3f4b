from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..github import git
from ..tags.classify import STATE_TAG_GLOBS
from ..utils import log


def generate_release_notes(version: str, repo: Optional[Path] = None, tag_pattern: str = "v*") -> str:
    """Markdown release notes listing commit subjects since the previous release tag.

    With no earlier tag the whole history is listed.
    """
    prev = git.previous_tag("HEAD", tag_pattern, cwd=repo, exclude=STATE_TAG_GLOBS)
    if prev:
        heading = f"### Changes since {prev}"
        subjects = git.log_subjects(f"{prev}..HEAD", cwd=repo)
    else:
        heading = f"### Changes in {version}"
        subjects = git.log_subjects(None, cwd=repo)
    log.info("release-notes", f"{len(subjects)} commit(s) for {version}")

    lines = [f"## Release {version}", "", heading, ""]
    lines.extend(f"- {s}" for s in subjects)
    if not subjects:
        lines.append("- No changes")
    return "\n".join(lines)
