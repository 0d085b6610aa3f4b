from __future__ import annotations

from typing import Literal, Tuple

from ..errors import ValidationError
from .semver import SemVer, VersionLike, increment_version, parse_version


ReleaseType = Literal["major", "minor", "patch", "premajor", "preminor", "prepatch", "prerelease"]
RELEASE_TYPE_VALUES: Tuple[str, ...] = ("major", "minor", "patch", "premajor", "preminor", "prepatch", "prerelease")

DEFAULT_LABEL = "alpha"


def is_valid_release_type(value: object) -> bool:
    return str(value or "").strip() in RELEASE_TYPE_VALUES


def _with_label(core: SemVer, label: str) -> SemVer:
    return SemVer(core.major, core.minor, core.patch, prerelease=label)


def _next_prerelease(current: SemVer, label: str) -> SemVer:
    if not current.prerelease:
        # 1.2.3 -> 1.2.4-alpha
        return _with_label(increment_version(current, "patch"), label)

    pre = current.prerelease
    if pre == label:
        # 1.2.4-alpha -> 1.2.4-alpha.1
        return SemVer(current.major, current.minor, current.patch, prerelease=f"{label}.1")

    prefix = f"{label}."
    if pre.startswith(prefix):
        number = pre[len(prefix):]
        if not number.isdigit():
            raise ValidationError(f"Cannot auto-increment complex pre-release identifier: {pre}")
        return SemVer(current.major, current.minor, current.patch, prerelease=f"{label}.{int(number) + 1}")

    # Label switch (alpha -> beta) keeps the core and restarts without a number.
    return SemVer(current.major, current.minor, current.patch, prerelease=label)


def next_version(current: VersionLike, release_type: str, label: str = DEFAULT_LABEL) -> SemVer:
    """Compute the version that follows ``current`` for a release type.

    Rules:
      - major/minor/patch: bump the component, reset lower ones, drop prerelease/build.
      - premajor/preminor/prepatch: bump, then append ``-<label>`` with no number.
      - prerelease:
          * no prerelease yet: bump patch and append ``-<label>``
          * same label: increment the trailing number (absent counts as 0)
          * different label: keep the core, replace the identifier with ``<label>``

    Raises:
        ValidationError: unknown release type, malformed version, or a prerelease
            identifier whose suffix after the label is not a plain number.
    """
    rt = str(release_type or "").strip()
    if not is_valid_release_type(rt):
        raise ValidationError(f"Unknown release type '{release_type}'")

    lbl = str(label or "").strip() or DEFAULT_LABEL
    if not all(c.isalnum() or c == "-" for c in lbl):
        raise ValidationError(f"Invalid pre-release label: {label!r}")

    v = parse_version(current)

    if rt in ("major", "minor", "patch"):
        return increment_version(v, rt)
    if rt in ("premajor", "preminor", "prepatch"):
        return _with_label(increment_version(v, rt[len("pre"):]), lbl)
    return _next_prerelease(v, lbl)
