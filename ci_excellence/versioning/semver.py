"""Semantic version parsing, formatting, comparison, and core increments.

Accepted forms: ``1.2.3``, ``v1.2.3``, ``1.2.3-alpha.4+build.5`` and, for tags
of a subproject in a monorepo, ``api/v1.2.3``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple, Union

from ..errors import ValidationError


VERSION_RE = re.compile(
    r"^(?:(?P<subproject>.+)/)?v?"
    r"(?P<major>[0-9]+)\.(?P<minor>[0-9]+)\.(?P<patch>[0-9]+)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

COMPARE_OPERATORS: Tuple[str, ...] = ("lt", "le", "eq", "ne", "ge", "gt")
CORE_PARTS: Tuple[str, ...] = ("major", "minor", "patch")


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""
    subproject: str = ""

    @property
    def core(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __str__(self) -> str:
        out = self.core
        if self.prerelease:
            out += f"-{self.prerelease}"
        if self.build:
            out += f"+{self.build}"
        return out

    def tag(self, prefix: str = "v") -> str:
        base = f"{prefix}{self}"
        return f"{self.subproject}/{base}" if self.subproject else base


VersionLike = Union[str, SemVer]


def parse_version(text: VersionLike) -> SemVer:
    if isinstance(text, SemVer):
        return text
    s = str(text or "").strip()
    m = VERSION_RE.match(s)
    if not m:
        raise ValidationError(f"Invalid semantic version: {s!r}")
    return SemVer(
        major=int(m.group("major")),
        minor=int(m.group("minor")),
        patch=int(m.group("patch")),
        prerelease=m.group("prerelease") or "",
        build=m.group("build") or "",
        subproject=m.group("subproject") or "",
    )


def is_valid_version(text: str) -> bool:
    return VERSION_RE.match(str(text or "").strip()) is not None


def is_prerelease(text: VersionLike) -> bool:
    return parse_version(text).is_prerelease


def increment_version(version: VersionLike, part: str) -> SemVer:
    """Bump one core component. Lower components reset, prerelease and build are dropped."""
    v = parse_version(version)
    if part == "major":
        return SemVer(v.major + 1, 0, 0)
    if part == "minor":
        return SemVer(v.major, v.minor + 1, 0)
    if part == "patch":
        return SemVer(v.major, v.minor, v.patch + 1)
    raise ValidationError(f"Invalid increment type: {part!r} (expected one of {list(CORE_PARTS)})")


def _prerelease_key(identifier: str) -> Tuple[int, Union[int, str]]:
    # Numeric identifiers sort before alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


def _compare_prerelease(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return 1
    if not b:
        return -1
    left: List[str] = a.split(".")
    right: List[str] = b.split(".")
    for x, y in zip(left, right):
        kx, ky = _prerelease_key(x), _prerelease_key(y)
        if kx == ky:
            continue
        return -1 if kx < ky else 1
    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


def version_cmp(a: VersionLike, b: VersionLike) -> int:
    """Return -1, 0 or 1 by semver precedence. Build metadata is ignored."""
    va, vb = parse_version(a), parse_version(b)
    ca, cb = (va.major, va.minor, va.patch), (vb.major, vb.minor, vb.patch)
    if ca != cb:
        return -1 if ca < cb else 1
    return _compare_prerelease(va.prerelease, vb.prerelease)


def compare_versions(a: VersionLike, op: str, b: VersionLike) -> bool:
    if op not in COMPARE_OPERATORS:
        raise ValidationError(f"Unknown comparison operator: {op!r} (expected one of {list(COMPARE_OPERATORS)})")
    r = version_cmp(a, b)
    return {
        "lt": r < 0,
        "le": r <= 0,
        "eq": r == 0,
        "ne": r != 0,
        "ge": r >= 0,
        "gt": r > 0,
    }[op]
