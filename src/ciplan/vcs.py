# Copyright (c) Syntropy Systems
"""Version control queries."""
from __future__ import annotations

import logging
import shutil
import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def _run_command(
    argv: list[str],
    *,
    timeout: float,
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str] | None:
    cmd_path = shutil.which(argv[0])
    if cmd_path is None:
        return None
    try:
        return subprocess.run(  # noqa: S603
            [cmd_path, *argv[1:]],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
            cwd=None if cwd is None else str(cwd),
        )
    except (OSError, subprocess.TimeoutExpired):
        return None


def commit_message(commit_id: str, cwd: Path | None = None) -> str | None:
    """Return the full message of a commit, or None if it can't be read."""
    result = _run_command(
        ["git", "log", "--format=%B", "-n", "1", commit_id],
        timeout=10,
        cwd=cwd,
    )
    if result is None:
        logger.debug("git unavailable, no message for %s", commit_id)
        return None
    if result.returncode != 0:
        logger.debug("git log failed for %s: %s", commit_id, result.stderr.strip())
        return None
    return result.stdout.strip()


def git_available() -> bool:
    """Check whether a git executable is on PATH."""
    return shutil.which("git") is not None
