"""Session models for a single rollback invocation."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from .history import HistoryEntry


class RollbackOutcome(str, Enum):
    """What happened to a rollout file."""

    PENDING = "pending"
    UNCHANGED = "unchanged"
    ROLLED_BACK = "rolled_back"


class RolloutFileSet(BaseModel):
    """Rollout files discovered beneath a directory, in walk order."""

    root: Path
    paths: List[Path] = []

    @property
    def count(self) -> int:
        return len(self.paths)


class FileRollback(BaseModel):
    """Per-file state: fetched history and the operator's choice."""

    path: Path
    entries: List[HistoryEntry] = []
    selected_index: Optional[int] = None
    revision: Optional[str] = None
    outcome: RollbackOutcome = RollbackOutcome.PENDING


class Session(BaseModel):
    """Transient state of one ``rollback`` invocation."""

    target: Path
    is_directory: bool = False
    branch: Optional[str] = None
    files: List[FileRollback] = []

    @property
    def rolled_back(self) -> List[FileRollback]:
        """Files that received a rollback commit."""
        return [f for f in self.files if f.outcome == RollbackOutcome.ROLLED_BACK]
