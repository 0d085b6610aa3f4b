from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from ..errors import ConflictError
from ..utils import log
from .classify import is_protected, strip_ref, tag_kind


RECOMMENDED_KINDS = ("version", "state", "stability", "rollback")


@dataclass
class PushCheckResult:
    checked: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    overridden: List[str] = field(default_factory=list)


def pushed_tags(lines: Iterable[str]) -> List[str]:
    """Tag names from pre-push hook input (``<local ref> <local sha> <remote ref> <remote sha>``)."""
    tags: List[str] = []
    for line in lines:
        parts = line.split()
        if len(parts) != 4:
            continue
        remote_ref = parts[2]
        if remote_ref.startswith("refs/tags/"):
            tags.append(strip_ref(remote_ref))
    return tags


def check_pushed_tags(tags: Iterable[str], allow_override: bool = False) -> PushCheckResult:
    """Refuse protected environment tags; they are only moved by ``tag-assign`` in CI.

    ``allow_override`` (ALLOW_PROTECTED_TAG_PUSH=true) is the emergency admin bypass.
    """
    result = PushCheckResult()
    for tag in tags:
        result.checked.append(tag)
        if is_protected(tag):
            if not allow_override:
                raise ConflictError(
                    f"Protected environment tag detected: {tag}. "
                    "Environment tags must be assigned in CI with `ci-excellence tag-assign environment`."
                )
            log.warn("tag-protection", f"protected tag {tag} allowed by ALLOW_PROTECTED_TAG_PUSH=true")
            result.overridden.append(tag)
            continue
        if tag_kind(tag) not in RECOMMENDED_KINDS:
            msg = f"Tag does not follow recommended patterns: {tag}"
            log.warn("tag-protection", msg)
            result.warnings.append(msg)
    return result


def check_pushed_refs(lines: Iterable[str], allow_override: bool = False) -> PushCheckResult:
    """Run the tag checks over raw pre-push hook input."""
    return check_pushed_tags(pushed_tags(lines), allow_override)
