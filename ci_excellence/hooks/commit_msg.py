"""Conventional Commits check for the ``commit-msg`` hook."""

from __future__ import annotations

import re
from typing import List

from ..errors import ValidationError


COMMIT_TYPES = ("feat", "fix", "docs", "style", "refactor", "perf", "test", "build", "ci", "chore", "revert")

SUBJECT_RE = re.compile(r"^(" + "|".join(COMMIT_TYPES) + r")(\(.+\))?(!)?:\s.+")
_HEAD_RE = re.compile(r"^[a-z]+(\([^)]*\))?!?:\s(?P<description>.*)$")

MAX_SUBJECT_LENGTH = 72

COMMIT_HELP = """Conventional commit format:
  <type>(<optional scope>)!: <description>

Examples:
  feat(pipeline): add automated deployment system
  fix(security): resolve credential exposure vulnerability
  docs(readme): update installation instructions

Available types: """ + ", ".join(COMMIT_TYPES)


def message_subject(text: str) -> str:
    """First non-comment, non-blank line of a commit message file."""
    for line in text.splitlines():
        if line.startswith("#"):
            continue
        if line.strip():
            return line.strip()
    return ""


def is_exempt(subject: str) -> bool:
    return subject.startswith("Merge") or subject.lower().startswith("revert ")


def validate_commit_message(text: str) -> List[str]:
    """Validate a commit message; returns style warnings.

    Merge and git-generated revert commits are not checked. A subject that
    does not follow Conventional Commits raises ValidationError.
    """
    subject = message_subject(text)
    if not subject:
        raise ValidationError("Commit message is empty")
    if is_exempt(subject):
        return []
    if not SUBJECT_RE.match(subject):
        raise ValidationError(f"Invalid commit message format: {subject!r}\n\n{COMMIT_HELP}")

    warnings: List[str] = []
    if len(subject) > MAX_SUBJECT_LENGTH:
        warnings.append(f"Subject is {len(subject)} characters; keep it under {MAX_SUBJECT_LENGTH}")
    m = _HEAD_RE.match(subject)
    description = m.group("description") if m else ""
    if description[:1].isupper():
        warnings.append("Description should start with a lowercase letter")
    if subject.endswith("."):
        warnings.append("Commit message should not end with a period")
    return warnings
