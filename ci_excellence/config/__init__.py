"""CI configuration.

Settings live in ``.config/ci-config.yml`` at the repository root. The file is
optional; when it is absent every command runs on built-in defaults.
"""
from __future__ import annotations

from .loader import (
    CiConfig,
    StepConfig,
    VersioningConfig,
    load_ci_config,
    parse_config,
    resolve_config_path,
)

__all__ = [
    "CiConfig",
    "StepConfig",
    "VersioningConfig",
    "load_ci_config",
    "parse_config",
    "resolve_config_path",
]
