"""Exceptions raised while guarding, reading, and rolling back rollout files."""

from pathlib import Path


class RollbackError(Exception):
    """Base exception for rollout-rollback."""

    pass


class ConfigError(RollbackError):
    """Configuration file could not be loaded."""

    pass


class PathNotFound(RollbackError):
    """The requested path does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"The path '{path}' does not exist.")


class NotARepository(RollbackError):
    """Working directory is not inside a git work tree."""

    pass


class ProtectedBranch(RollbackError):
    """The checked-out branch does not accept rollback commits."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"current branch '{branch}' is a protected branch")


class HistoryUnavailable(RollbackError):
    """git log failed or returned nothing for the file."""

    pass


class InvalidSelection(RollbackError):
    """Operator entered something that is not a menu number."""

    pass


class CheckoutFailed(RollbackError):
    """Restoring the file at the chosen revision failed."""

    pass


class CommitFailed(RollbackError):
    """The restored file could not be committed.

    The working tree keeps the restored content, uncommitted.
    """

    def __init__(self, path: Path, revision: str, reason: str):
        self.path = path
        self.revision = revision
        super().__init__(
            f"failed to create commit for '{path}' at {revision}: {reason}"
        )


class WalkFailed(RollbackError):
    """Directory traversal hit an unreadable entry."""

    pass
