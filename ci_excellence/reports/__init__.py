"""Markdown for ``$GITHUB_STEP_SUMMARY`` and release notes."""
