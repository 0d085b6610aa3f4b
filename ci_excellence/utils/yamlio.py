from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import ValidationError


def read_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping. An empty file reads as an empty mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValidationError(f"YAML syntax error in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"expected a YAML mapping at top level: {path}")
    return data
