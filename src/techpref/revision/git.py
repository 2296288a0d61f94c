"""Thin wrappers around the git command line."""

import os
import subprocess
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 300

# Never block on a credential prompt; a private or vanished repository fails fast
_GIT_ENV = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}


def run_git(
    args: list[str],
    cwd: Optional[Union[str, Path]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Run a git command and return its stripped stdout.

    Raises:
        subprocess.CalledProcessError: On a non-zero exit status
        subprocess.TimeoutExpired: When the command exceeds ``timeout``
    """
    cmd = ["git"] + args
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd or ".")
    result = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd is not None else None,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=_GIT_ENV,
    )
    if result.returncode != 0:
        raise subprocess.CalledProcessError(result.returncode, cmd, result.stdout, result.stderr)
    return result.stdout.strip()


def describe_git_error(exc: Exception) -> str:
    """One-line description of a failed git invocation, for logs and errors."""
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or "").strip().splitlines()
        tail = stderr[-1] if stderr else f"exit status {exc.returncode}"
        return f"{' '.join(exc.cmd[:2])}: {tail}"
    if isinstance(exc, subprocess.TimeoutExpired):
        return f"{' '.join(exc.cmd[:2])}: timed out after {exc.timeout:g}s"
    return str(exc)


def head_commit(path: Union[str, Path], timeout: float = DEFAULT_TIMEOUT) -> str:
    """Full SHA of HEAD in the working copy at ``path``."""
    return run_git(["rev-parse", "HEAD"], cwd=path, timeout=timeout)


def commit_date(
    path: Union[str, Path], revision: str = "HEAD", timeout: float = DEFAULT_TIMEOUT
) -> str:
    """ISO-8601 committer date of ``revision`` (strict format, with offset)."""
    return run_git(["log", "-1", "--format=%cI", revision], cwd=path, timeout=timeout)


def is_git_repo(path: Union[str, Path]) -> bool:
    try:
        run_git(["rev-parse", "--git-dir"], cwd=path, timeout=10)
        return True
    except (FileNotFoundError, NotADirectoryError, subprocess.SubprocessError):
        return False
