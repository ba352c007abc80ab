"""Data models for rollout-rollback."""

from .history import HistoryEntry
from .session import FileRollback, RollbackOutcome, RolloutFileSet, Session

__all__ = ["HistoryEntry", "FileRollback", "RollbackOutcome", "RolloutFileSet", "Session"]
