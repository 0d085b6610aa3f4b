from __future__ import annotations

from .calculator import RELEASE_TYPE_VALUES, next_version
from .semver import SemVer, compare_versions, increment_version, is_prerelease, parse_version

__all__ = [
    "RELEASE_TYPE_VALUES",
    "SemVer",
    "compare_versions",
    "increment_version",
    "is_prerelease",
    "next_version",
    "parse_version",
]
