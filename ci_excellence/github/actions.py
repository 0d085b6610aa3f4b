"""GitHub Actions step I/O.

Commands never append to ``$GITHUB_OUTPUT`` or ``$GITHUB_STEP_SUMMARY`` while
they work. They fill a :class:`CiResult` and the CLI writes it once when the
command finishes.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..utils.fs import append_text


@dataclass(frozen=True)
class GithubContext:
    sha: str = ""
    ref_name: str = ""
    run_number: str = ""
    run_id: str = ""
    repository: str = ""
    actor: str = ""
    server_url: str = "https://github.com"
    workflow: str = ""
    event_name: str = ""

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GithubContext":
        e = os.environ if env is None else env

        def g(name: str) -> str:
            return str(e.get(name, "") or "").strip()

        return cls(
            sha=g("GITHUB_SHA"),
            ref_name=g("GITHUB_REF_NAME"),
            run_number=g("GITHUB_RUN_NUMBER"),
            run_id=g("GITHUB_RUN_ID"),
            repository=g("GITHUB_REPOSITORY"),
            actor=g("GITHUB_ACTOR"),
            server_url=g("GITHUB_SERVER_URL") or "https://github.com",
            workflow=g("GITHUB_WORKFLOW"),
            event_name=g("GITHUB_EVENT_NAME"),
        )

    @property
    def short_sha(self) -> str:
        return self.sha[:7] if self.sha else "unknown"

    @property
    def run_url(self) -> str:
        if not (self.repository and self.run_id):
            return ""
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"


def format_output(name: str, value: str) -> str:
    """Render one output in the form the runner parses.

    Single-line values use ``name=value``. Multi-line values use the heredoc
    form with a delimiter that cannot occur inside the value.
    """
    text = str(value)
    if "\n" not in text and "\r" not in text:
        return f"{name}={text}\n"
    delim = f"EOF_{uuid.uuid4().hex}"
    while delim in text:
        delim = f"EOF_{uuid.uuid4().hex}"
    return f"{name}<<{delim}\n{text}\n{delim}\n"


@dataclass
class CiResult:
    """Outputs and summary markdown produced by one command."""

    outputs: Dict[str, str] = field(default_factory=dict)
    summary: List[str] = field(default_factory=list)
    exit_code: int = 0

    def set_output(self, name: str, value: object) -> None:
        if isinstance(value, bool):
            value = "true" if value else "false"
        self.outputs[name] = str(value)

    def add_summary(self, markdown: str) -> None:
        self.summary.append(markdown.rstrip("\n") + "\n")

    def render_outputs(self) -> str:
        return "".join(format_output(k, v) for k, v in self.outputs.items())

    def render_summary(self) -> str:
        return "\n".join(self.summary)

    def write(self, env: Optional[Mapping[str, str]] = None) -> None:
        """Append to the runner files. Unset variables (local runs) are skipped."""
        e = os.environ if env is None else env
        output_path = str(e.get("GITHUB_OUTPUT", "") or "").strip()
        summary_path = str(e.get("GITHUB_STEP_SUMMARY", "") or "").strip()
        if output_path and self.outputs:
            append_text(Path(output_path), self.render_outputs())
        if summary_path and self.summary:
            append_text(Path(summary_path), self.render_summary())
