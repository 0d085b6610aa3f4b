from __future__ import annotations

import os
from typing import Mapping, Optional

_TRUTHY = {"1", "true", "yes", "y", "on"}
_FALSY = {"0", "false", "no", "n", "off", "disabled"}


def env_get(name: str, env: Optional[Mapping[str, str]] = None) -> str:
    source = os.environ if env is None else env
    return str(source.get(name, "") or "").strip()


def is_truthy(value: object) -> bool:
    return str(value or "").strip().lower() in _TRUTHY


def is_false_like(value: object) -> bool:
    """True for explicit opt-outs such as ``false``, ``No``, ``0``, ``off``, ``disabled``."""
    return str(value or "").strip().lower() in _FALSY


def env_truthy(name: str, env: Optional[Mapping[str, str]] = None) -> bool:
    return is_truthy(env_get(name, env))


def env_key(name: str) -> str:
    """Normalise a step or feature name into an environment variable fragment."""
    return "".join(c if c.isalnum() else "_" for c in name.strip()).upper()
