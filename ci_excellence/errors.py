from __future__ import annotations

from typing import List, Optional


class CiError(Exception):
    """Base class for ci-excellence errors."""


class ValidationError(CiError):
    """Raised when an argument, version string, or config fails validation."""


class NotFoundError(CiError):
    """Raised when a requested tag, file, or release cannot be found."""


class ConflictError(CiError):
    """Raised when an operation conflicts with tag protection rules."""


class GitError(CiError):
    """Raised when a git or gh invocation exits non-zero."""

    def __init__(self, cmd: List[str], returncode: int, stderr: str = "", message: Optional[str] = None):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        if message is None:
            message = f"{' '.join(self.cmd)} failed (exit {returncode})"
            if self.stderr:
                message = f"{message}: {self.stderr}"
        super().__init__(message)
