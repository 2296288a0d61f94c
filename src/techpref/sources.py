"""Source-file discovery for scheduling (smaller repositories go first)."""

import os
import subprocess
from pathlib import Path, PurePosixPath
from typing import Iterable, Union

from .logging_config import get_logger
from .revision.git import run_git

logger = get_logger(__name__)

SOURCE_EXTENSIONS = frozenset({".ts", ".tsx", ".js", ".jsx"})
EXCLUDED_DIRS = frozenset({"node_modules", "dist", "build", ".git"})


def is_source_file(relative: str) -> bool:
    """Whether a working-copy relative path counts as analyzable source."""
    path = PurePosixPath(relative)
    if path.suffix not in SOURCE_EXTENSIONS or path.name.endswith(".d.ts"):
        return False
    return not any(part in EXCLUDED_DIRS for part in path.parts[:-1])


def count_source_files(working_copy: Union[str, Path]) -> int:
    """Number of TypeScript/JavaScript sources in a working copy.

    Uses the git index when available, which skips untracked build output,
    and falls back to walking the tree.
    """
    root = Path(working_copy)
    try:
        listing = run_git(["ls-files", "-z"], cwd=root, timeout=60)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git ls-files failed in %s (%s); walking the tree", root, e)
        return _count(_walk(root))
    return _count(name for name in listing.split("\0") if name)


def _count(paths: Iterable[str]) -> int:
    return sum(1 for p in paths if is_source_file(p))


def _walk(root: Path) -> Iterable[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in EXCLUDED_DIRS]
        rel_dir = Path(dirpath).relative_to(root)
        for name in filenames:
            yield (rel_dir / name).as_posix()
