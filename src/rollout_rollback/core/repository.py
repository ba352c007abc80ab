"""Git access for guarding, reading history, and rolling back rollout files."""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional

import git
from git.exc import GitCommandError, GitCommandNotFound

from rollout_rollback.core.exceptions import (
    CheckoutFailed,
    CommitFailed,
    HistoryUnavailable,
    NotARepository,
    ProtectedBranch,
)
from rollout_rollback.models import HistoryEntry
from rollout_rollback.models.history import LOG_DATE_FORMAT, LOG_FORMAT

logger = logging.getLogger(__name__)


def _git_error_text(error: GitCommandError) -> str:
    stderr = error.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    text = (stderr or "").strip()
    if text.startswith("stderr:"):
        text = text[len("stderr:"):].strip().strip("'").strip()
    return text or str(error)


def rollback_commit_message(file_path: Path, revision: str) -> str:
    """Message used for the commit that records a rollback."""
    return f"Rolled back '{file_path}' to commit {revision}"


class GitRepository:
    """Thin wrapper around the git executable for one working directory.

    Read-only queries go through GitPython and are captured for parsing.
    checkout and commit run through subprocess with their output passed
    straight to the terminal so the operator sees git's own diagnostics.
    """

    def __init__(self, working_dir: Optional[Path] = None):
        self.working_dir = Path(working_dir or Path.cwd()).resolve()
        self._git: Optional[git.Git] = None

    @property
    def git(self) -> git.Git:
        """Git command runner bound to the working directory."""
        if self._git is None:
            self._git = git.Git(str(self.working_dir))
        return self._git

    def is_work_tree(self) -> bool:
        """Check whether the working directory is inside a git work tree."""
        try:
            out = self.git.rev_parse("--is-inside-work-tree")
        except (GitCommandError, GitCommandNotFound) as e:
            logger.debug("rev-parse failed in %s: %s", self.working_dir, e)
            return False
        return out.strip() == "true"

    def current_branch(self) -> str:
        """Name of the checked-out branch (empty when HEAD is detached)."""
        try:
            return self.git.branch("--show-current").strip()
        except (GitCommandError, GitCommandNotFound) as e:
            raise NotARepository(
                f"failed to get the current branch: {_git_error_text(e)}"
            ) from e

    def ensure_safe_to_rollback(self, protected_branches: Iterable[str]) -> str:
        """Verify this is a git work tree on a branch that accepts rollbacks.

        Returns:
            The current branch name

        Raises:
            NotARepository: not inside a work tree, or branch lookup failed
            ProtectedBranch: current branch is in ``protected_branches``
        """
        if not self.is_work_tree():
            raise NotARepository("not a git repository")

        branch = self.current_branch()
        logger.debug("Current branch: %r", branch)
        if branch in set(protected_branches):
            raise ProtectedBranch(branch)
        return branch

    def file_history(self, file_path: Path, limit: int = 10) -> List[HistoryEntry]:
        """Most recent commits touching ``file_path``, newest first.

        Raises:
            HistoryUnavailable: git log failed or found no commits
        """
        logger.debug("Reading last %d commits of %s", limit, file_path)
        try:
            output = self.git.log(
                f"--pretty=format:{LOG_FORMAT}",
                f"--date=format:{LOG_DATE_FORMAT}",
                "-n",
                str(limit),
                "--",
                str(file_path),
            )
        except (GitCommandError, GitCommandNotFound) as e:
            raise HistoryUnavailable(
                f"failed to retrieve git history for '{file_path}': "
                f"{_git_error_text(e) if isinstance(e, GitCommandError) else e}"
            ) from e

        lines = [line for line in output.strip().splitlines() if line.strip()]
        if not lines:
            raise HistoryUnavailable(f"no git history found for '{file_path}'")
        return [HistoryEntry.parse(line) for line in lines[:limit]]

    def _run_passthrough(self, args: List[str]) -> subprocess.CompletedProcess:
        cmd = ["git"] + args
        logger.debug("Running %s", " ".join(cmd))
        return subprocess.run(cmd, cwd=self.working_dir, check=False)  # noqa: S603

    def checkout_file(self, file_path: Path, revision: str) -> None:
        """Overwrite the working copy of ``file_path`` with its content at ``revision``."""
        try:
            result = self._run_passthrough(["checkout", revision, "--", str(file_path)])
        except OSError as e:
            raise CheckoutFailed(f"failed to checkout commit {revision}: {e}") from e
        if result.returncode != 0:
            raise CheckoutFailed(
                f"failed to checkout commit {revision} for '{file_path}' "
                f"(git exited with status {result.returncode})"
            )

    def commit_file(self, file_path: Path, revision: str) -> None:
        """Commit only ``file_path`` with a message naming the target revision."""
        message = rollback_commit_message(file_path, revision)
        try:
            result = self._run_passthrough(["commit", "-m", message, "--", str(file_path)])
        except OSError as e:
            raise CommitFailed(file_path, revision, str(e)) from e
        if result.returncode != 0:
            raise CommitFailed(
                file_path, revision, f"git exited with status {result.returncode}"
            )

    def rollback_file(self, file_path: Path, revision: str) -> None:
        """Restore ``file_path`` to ``revision`` and commit the change.

        A failed checkout skips the commit. A failed commit leaves the
        restored file in the working tree, uncommitted.
        """
        self.checkout_file(file_path, revision)
        self.commit_file(file_path, revision)
