"""Keep the result store in step with its git upstream.

Discipline: pull before reading, commit what changed, pull again with rebase,
then push. A rejected rebase or push is aborted and retried once; a second
rejection is fatal for the run. Nothing already committed is lost either way.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Union

from ..exceptions import StoreSyncError
from ..logging_config import get_logger
from ..revision.git import DEFAULT_TIMEOUT, describe_git_error, is_git_repo, run_git

logger = get_logger(__name__)


class StoreSync:
    """Git operations on the repository that holds the data directory.

    Commands run inside ``data_dir``, which may sit anywhere in its git
    repository; only changes beneath it are staged.

    Args:
        data_dir: Directory holding the catalog and analysis documents
        author_name: Commit author/committer name
        author_email: Commit author/committer email
        timeout: Limit for each git command
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        author_name: str = "techpref-bot",
        author_email: str = "techpref-bot@users.noreply.github.com",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.data_dir = Path(data_dir)
        self.author_name = author_name
        self.author_email = author_email
        self.timeout = timeout

    def pull(self) -> None:
        """``git pull --rebase --autostash``.

        Raises:
            StoreSyncError: If the pull cannot be completed
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not is_git_repo(self.data_dir):
            raise StoreSyncError("pull", f"{self.data_dir} is not inside a git repository")
        try:
            self._git(["pull", "--rebase", "--autostash"])
        except (OSError, subprocess.SubprocessError) as e:
            self._abort_rebase()
            raise StoreSyncError("pull", describe_git_error(e))
        logger.debug("Pulled result store")

    def commit_and_push(self, message: str) -> bool:
        """Commit pending changes under the data directory and push them.

        Returns:
            True if a commit was created and pushed, False if nothing changed

        Raises:
            StoreSyncError: If the push is rejected twice or git fails
        """
        try:
            self._git(["add", "-A", "--", "."])
            if not self._has_staged_changes():
                logger.debug("No result changes to commit")
                return False
            self._git(
                [
                    "-c", f"user.name={self.author_name}",
                    "-c", f"user.email={self.author_email}",
                    "commit", "-m", message,
                ]
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise StoreSyncError("commit", describe_git_error(e))

        self._push_with_retry()
        logger.info("Pushed result store: %s", message)
        return True

    def _push_with_retry(self) -> None:
        last_error = ""
        for attempt in (1, 2):
            try:
                self._git(["pull", "--rebase"])
                self._git(["push"])
                return
            except (OSError, subprocess.SubprocessError) as e:
                last_error = describe_git_error(e)
                self._abort_rebase()
                if attempt == 1:
                    logger.warning("Result store push rejected, retrying once: %s", last_error)
        raise StoreSyncError("push", last_error)

    def _has_staged_changes(self) -> bool:
        try:
            self._git(["diff", "--cached", "--quiet", "--", "."])
        except subprocess.CalledProcessError as e:
            if e.returncode == 1:
                return True
            raise
        return False

    def _abort_rebase(self) -> None:
        try:
            self._git(["rebase", "--abort"])
        except (OSError, subprocess.SubprocessError):
            pass  # no rebase in progress

    def _git(self, args: list[str]) -> str:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return run_git(args, cwd=self.data_dir, timeout=self.timeout)
