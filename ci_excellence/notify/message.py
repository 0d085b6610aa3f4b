from __future__ import annotations

import html
from typing import Dict

from ..github.actions import GithubContext


TYPE_EMOJI: Dict[str, str] = {
    "success": "✅",
    "failure": "❌",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
}


def type_emoji(kind: str) -> str:
    return TYPE_EMOJI.get(str(kind or "").strip().lower(), TYPE_EMOJI["info"])


def format_notification(title: str, message: str, kind: str, ctx: GithubContext) -> str:
    """HTML body with repository, workflow, run link and actor appended.

    Each HTML element opens and closes on one line; Telegram rejects the
    message otherwise.
    """
    esc = html.escape
    parts = [f"{type_emoji(kind)} <b>{esc(title)}</b>", "", esc(message)]

    context = []
    if ctx.repository:
        context.append(f"<b>Repository:</b> {esc(ctx.repository)}")
    if ctx.workflow:
        context.append(f"<b>Workflow:</b> {esc(ctx.workflow)}")
    if ctx.run_url:
        context.append(f'<b>Run:</b> <a href="{esc(ctx.run_url)}">View Logs</a>')
    if ctx.actor:
        context.append(f"<b>Triggered by:</b> {esc(ctx.actor)}")
    if context:
        parts.append("")
        parts.extend(context)
    return "\n".join(parts)
