"""Git context detection for the working directory."""

from __future__ import annotations

import subprocess
from pathlib import Path

from agent_router.models import GitContext


def _git(args: list[str], cwd: Path | None) -> str | None:
    """Run a git command; return stdout, or None on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=cwd,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout


def _lines(output: str | None) -> list[str]:
    if output is None:
        return []
    return [line for line in output.splitlines() if line]


def detect_git_context(cwd: Path | None = None) -> GitContext | None:
    """Branch, changed/staged files and exact tag of HEAD. None outside a repo."""
    inside = _git(["rev-parse", "--is-inside-work-tree"], cwd)
    if inside is None or inside.strip() != "true":
        return None

    branch = (_git(["branch", "--show-current"], cwd) or "").strip()
    tag = (_git(["describe", "--tags", "--exact-match", "HEAD"], cwd) or "").strip()
    return GitContext(
        branch=branch,
        changed_files=_lines(_git(["diff", "--name-only"], cwd)),
        staged_files=_lines(_git(["diff", "--staged", "--name-only"], cwd)),
        tag=tag or None,
    )
