"""Testability modes for pipeline steps.

Every step resolves its mode once, by precedence:

  1) PIPELINE_SCRIPT_<STEP>_BEHAVIOR
  2) <STEP>_MODE
  3) CI_TEST_MODE
  4) EXECUTE
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from ..errors import ValidationError
from ..utils import log
from ..utils.env import env_key


class StepMode(str, enum.Enum):
    EXECUTE = "EXECUTE"
    DRY_RUN = "DRY_RUN"
    PASS = "PASS"
    FAIL = "FAIL"
    SKIP = "SKIP"
    TIMEOUT = "TIMEOUT"


def parse_mode(value: str, source: str = "") -> StepMode:
    norm = str(value or "").strip().upper().replace("-", "_")
    try:
        return StepMode(norm)
    except ValueError:
        where = f" ({source})" if source else ""
        allowed = [m.value for m in StepMode]
        raise ValidationError(f"Invalid step mode {value!r}{where}; expected one of {allowed}") from None


def mode_variables(step: str) -> Tuple[str, str, str]:
    key = env_key(step)
    return (f"PIPELINE_SCRIPT_{key}_BEHAVIOR", f"{key}_MODE", "CI_TEST_MODE")


@dataclass
class ModeResolver:
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    default: StepMode = StepMode.EXECUTE
    _cache: Dict[str, StepMode] = field(default_factory=dict, repr=False)

    def mode_for(self, step: str) -> StepMode:
        if step in self._cache:
            return self._cache[step]
        mode = self.default
        for var in mode_variables(step):
            raw = str(self.env.get(var, "") or "").strip()
            if raw:
                mode = parse_mode(raw, var)
                log.debug("mode", f"{step}: {mode.value} from {var}")
                break
        self._cache[step] = mode
        return mode

    def source_for(self, step: str) -> Optional[str]:
        """Name of the variable that decided the mode, or None for the default."""
        for var in mode_variables(step):
            if str(self.env.get(var, "") or "").strip():
                return var
        return None
