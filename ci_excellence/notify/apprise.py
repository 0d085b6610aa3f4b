from __future__ import annotations

import shutil
import subprocess
from typing import List, Mapping, Optional

from ..utils import log
from ..utils.env import env_get


URL_HELP = (
    "Set APPRISE_URLS (space separated), e.g. "
    "slack://token_a/token_b/token_c msteams://webhook_url "
    "discord://webhook_id/webhook_token tgram://bot_token/chat_id"
)


def apprise_urls(env: Optional[Mapping[str, str]] = None) -> List[str]:
    return env_get("APPRISE_URLS", env).split()


def send_apprise(title: str, body: str, kind: str, env: Optional[Mapping[str, str]] = None) -> bool:
    """Hand a message to the ``apprise`` CLI.

    Missing URLs, a missing CLI, or a delivery failure are logged and
    reported as False; notification problems never fail a pipeline.
    """
    urls = apprise_urls(env)
    if not urls:
        log.warn("notify", f"No notification URLs configured. {URL_HELP}")
        return False

    exe = shutil.which("apprise")
    if exe is None:
        log.warn("notify", "apprise CLI not found; install it with `pip install apprise`. Notifications skipped")
        return False

    cmd = [exe, f"--title={title}", f"--body={body}", "--input-format=html", f"--tag={kind}", *urls]
    cp = subprocess.run(cmd, check=False, text=True, capture_output=True)
    if cp.returncode != 0:
        log.warn("notify", f"Failed to send notification (non-fatal): {(cp.stderr or cp.stdout).strip()}")
        return False
    log.info("notify", f"Notification sent to {len(urls)} service(s)")
    return True
