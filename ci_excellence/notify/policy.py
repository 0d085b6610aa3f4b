from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from ..utils.env import env_get, is_false_like


@dataclass(frozen=True)
class NotificationDecision:
    enabled: bool
    reason: str
    missing: List[str] = field(default_factory=list)
    opted_out: bool = False


def notifications_enabled(env: Optional[Mapping[str, str]] = None, config_enabled: Optional[bool] = None) -> NotificationDecision:
    """Decide whether notifications run.

    ENABLE_NOTIFICATIONS set to a false-like value disables them outright. A
    config ``notifications.enabled: false`` does the same when the variable is
    unset. Both are opt-outs that apply to every transport. Otherwise they
    run when both Telegram secrets are present.
    """
    flag = env_get("ENABLE_NOTIFICATIONS", env)
    if flag and is_false_like(flag):
        return NotificationDecision(False, f"explicitly disabled via ENABLE_NOTIFICATIONS={flag}", opted_out=True)
    if not flag and config_enabled is False:
        return NotificationDecision(False, "disabled in ci config", opted_out=True)

    missing = [name for name in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID") if not env_get(name, env)]
    if missing:
        return NotificationDecision(False, "required secrets missing", missing)
    return NotificationDecision(True, "notification secrets available")
