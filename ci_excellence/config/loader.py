from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jsonschema

from ..errors import ValidationError
from ..utils.env import env_get, env_key, is_truthy
from ..utils.yamlio import read_yaml


DEFAULT_CONFIG_REL_PATH = Path(".config/ci-config.yml")

DEFAULT_TAG_PREFIX = "v"
DEFAULT_VERSION = "0.0.1-alpha"
DEFAULT_PRERELEASE_LABEL = "alpha"


@dataclass(frozen=True)
class StepConfig:
    command: List[str] = field(default_factory=list)
    timeout_seconds: Optional[int] = None


@dataclass(frozen=True)
class VersioningConfig:
    tag_prefix: str = DEFAULT_TAG_PREFIX
    default_version: str = DEFAULT_VERSION
    prerelease_label: str = DEFAULT_PRERELEASE_LABEL


@dataclass(frozen=True)
class CiConfig:
    project_name: str = ""
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    features: Dict[str, bool] = field(default_factory=dict)
    steps: Dict[str, StepConfig] = field(default_factory=dict)
    environment_variables: Dict[str, str] = field(default_factory=dict)
    notifications_enabled: Optional[bool] = None
    source_path: Optional[Path] = None

    def feature_enabled(self, name: str, env: Optional[Mapping[str, str]] = None) -> bool:
        """Resolve an ``ENABLE_<NAME>`` flag. The environment wins over the file."""
        raw = env_get(f"ENABLE_{env_key(name)}", env)
        if raw:
            return is_truthy(raw)
        return bool(self.features.get(name.lower(), False))

    def step(self, name: str) -> StepConfig:
        return self.steps.get(name, StepConfig())


def _config_schema() -> Dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "project_name": {"type": "string"},
            "versioning": {
                "type": "object",
                "properties": {
                    "tag_prefix": {"type": "string"},
                    "default_version": {"type": "string", "minLength": 5},
                    "prerelease_label": {"type": "string", "pattern": "^[0-9A-Za-z-]+$"},
                },
                "additionalProperties": False,
            },
            "features": {
                "type": "object",
                "additionalProperties": {"type": "boolean"},
            },
            "steps": {
                "type": "object",
                "additionalProperties": {
                    "type": "object",
                    "properties": {
                        "command": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                        "timeout_seconds": {"type": "integer", "minimum": 1},
                    },
                    "additionalProperties": False,
                },
            },
            "environment_variables": {
                "type": "object",
                "additionalProperties": {"type": ["string", "number", "boolean"]},
            },
            "notifications": {
                "type": "object",
                "properties": {"enabled": {"type": "boolean"}},
                "additionalProperties": False,
            },
        },
        "additionalProperties": False,
    }


def resolve_config_path(repo_root: Path, cli_path: Optional[str] = None) -> Path:
    """Resolve the CI config YAML path.

    Precedence:
      1) CLI flag --config
      2) CI_CONFIG_PATH
      3) <repo_root>/.config/ci-config.yml
    """
    if cli_path and str(cli_path).strip():
        return Path(str(cli_path).strip()).expanduser().resolve()

    env_path = str(os.environ.get("CI_CONFIG_PATH", "") or "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()

    return (repo_root / DEFAULT_CONFIG_REL_PATH).resolve()


def parse_config(data: Dict[str, Any], source_path: Optional[Path] = None) -> CiConfig:
    try:
        jsonschema.validate(instance=data, schema=_config_schema())
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ValidationError(f"ci config schema validation failed at {where}: {e.message}") from e

    ver_raw = data.get("versioning") or {}
    versioning = VersioningConfig(
        tag_prefix=str(ver_raw.get("tag_prefix", DEFAULT_TAG_PREFIX)),
        default_version=str(ver_raw.get("default_version", DEFAULT_VERSION)),
        prerelease_label=str(ver_raw.get("prerelease_label", DEFAULT_PRERELEASE_LABEL)),
    )

    steps: Dict[str, StepConfig] = {}
    for name, raw in (data.get("steps") or {}).items():
        steps[str(name)] = StepConfig(
            command=[str(x) for x in raw.get("command") or []],
            timeout_seconds=raw.get("timeout_seconds"),
        )

    notifications = data.get("notifications") or {}

    return CiConfig(
        project_name=str(data.get("project_name", "") or ""),
        versioning=versioning,
        features={str(k).lower(): bool(v) for k, v in (data.get("features") or {}).items()},
        steps=steps,
        environment_variables={str(k): str(v) for k, v in (data.get("environment_variables") or {}).items()},
        notifications_enabled=notifications.get("enabled"),
        source_path=source_path,
    )


def load_ci_config(repo_root: Path, cli_path: Optional[str] = None) -> CiConfig:
    """Load and validate the CI config.

    A missing file at the default location yields built-in defaults. A file
    named explicitly (flag or CI_CONFIG_PATH) must exist.
    """
    path = resolve_config_path(repo_root, cli_path)
    explicit = bool((cli_path and str(cli_path).strip()) or os.environ.get("CI_CONFIG_PATH", "").strip())
    if not path.exists():
        if explicit:
            raise ValidationError(f"ci config not found: {path}")
        return CiConfig(project_name=repo_root.resolve().name)

    cfg = parse_config(read_yaml(path), source_path=path)
    if not cfg.project_name:
        cfg = replace(cfg, project_name=repo_root.resolve().name)
    return cfg
