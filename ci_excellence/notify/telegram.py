"""Telegram notifications with reply threading.

Consecutive messages of one pipeline reply to the previous message so they
read as a thread. The id of the last message sent is kept in
``~/.cache/ci-notify/thread-context.json``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from ..utils import log
from ..utils.fs import atomic_write_text


TELEGRAM_API = "https://api.telegram.org"


def default_thread_context_path() -> Path:
    home = os.environ.get("HOME") or "/tmp"
    return Path(home) / ".cache" / "ci-notify" / "thread-context.json"


@dataclass(frozen=True)
class TelegramConfig:
    bot_token: str
    chat_id: str
    thread_id: Optional[int] = None

    @classmethod
    def from_env(cls) -> "TelegramConfig":
        thread = str(os.environ.get("TELEGRAM_THREAD_ID", "") or "").strip()
        return cls(
            bot_token=str(os.environ.get("TELEGRAM_BOT_TOKEN", "") or "").strip(),
            chat_id=str(os.environ.get("TELEGRAM_CHAT_ID", "") or "").strip(),
            thread_id=int(thread) if thread.isdigit() else None,
        )


class TelegramNotifier:
    def __init__(self, config: TelegramConfig, context_path: Optional[Path] = None, timeout: int = 30):
        self.config = config
        self.context_path = context_path or default_thread_context_path()
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return f"{TELEGRAM_API}/bot{self.config.bot_token}"

    def _last_message_id(self) -> Optional[int]:
        try:
            data = json.loads(self.context_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        mid = data.get("lastMessageId") if isinstance(data, dict) else None
        return mid if isinstance(mid, int) else None

    def _save_message_id(self, message_id: int) -> None:
        payload = {"lastMessageId": message_id, "threadId": self.config.thread_id}
        try:
            atomic_write_text(self.context_path, json.dumps(payload, indent=2))
        except OSError as e:
            log.warn("telegram", f"Failed to save thread context: {e}")

    def start_thread(self) -> None:
        """Forget the previous message so the next one starts a new thread."""
        if self.context_path.exists():
            try:
                atomic_write_text(self.context_path, "{}")
            except OSError as e:
                log.warn("telegram", f"Failed to clear thread context: {e}")

    def send(
        self,
        body: str,
        parse_mode: str = "HTML",
        thread: bool = True,
    ) -> Optional[int]:
        """Send a message; returns the Telegram message id, or None on any API error."""
        payload: Dict[str, Any] = {
            "chat_id": self.config.chat_id,
            "text": body,
            "parse_mode": parse_mode,
            "disable_web_page_preview": True,
        }
        if self.config.thread_id:
            payload["message_thread_id"] = self.config.thread_id
        reply_to = self._last_message_id() if thread else None
        if reply_to:
            payload["reply_to_message_id"] = reply_to

        try:
            r = requests.post(f"{self.base_url}/sendMessage", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log.error("telegram", f"Failed to send notification: {e}")
            return None

        if r.status_code != 200:
            log.error("telegram", f"HTTP error {r.status_code}: {r.text[:2000]}")
            return None
        try:
            data = r.json()
        except ValueError:
            log.error("telegram", f"Unexpected response: {r.text[:2000]}")
            return None
        if not data.get("ok"):
            log.error("telegram", f"Telegram API error: {data.get('description')} (code: {data.get('error_code')})")
            return None

        message_id = (data.get("result") or {}).get("message_id")
        if isinstance(message_id, int):
            self._save_message_id(message_id)
            return message_id
        return None
