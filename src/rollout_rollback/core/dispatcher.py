"""Orchestration of the single-file and directory rollback flows."""

import logging
from pathlib import Path
from typing import Callable, List, Optional

import click
from rich.console import Console
from rich.markup import escape

from rollout_rollback.core.config import RollbackConfig
from rollout_rollback.core.exceptions import PathNotFound
from rollout_rollback.core.repository import GitRepository
from rollout_rollback.core.selector import choose_revision
from rollout_rollback.core.walker import find_rollout_files
from rollout_rollback.models import (
    FileRollback,
    HistoryEntry,
    RollbackOutcome,
    RolloutFileSet,
    Session,
)

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Runs one ``rollback <path>`` invocation against a repository."""

    def __init__(
        self,
        repository: GitRepository,
        config: Optional[RollbackConfig] = None,
        console: Optional[Console] = None,
        prompt: Optional[Callable[..., str]] = None,
    ):
        self.repository = repository
        self.config = config or RollbackConfig()
        self.console = console or Console(highlight=False, soft_wrap=True, emoji=False)
        self.prompt = prompt or click.prompt

    def _echo(self, message: str) -> None:
        self.console.print(escape(message))

    def dispatch(self, target: Path) -> Session:
        """Validate preconditions, then run the file or directory flow.

        Raises:
            RollbackError: any fatal failure; nothing is undone
        """
        target = Path(target)
        if not target.exists():
            raise PathNotFound(target)

        branch = self.repository.ensure_safe_to_rollback(self.config.protected_branches)
        session = Session(target=target, is_directory=target.is_dir(), branch=branch)

        if session.is_directory:
            self._rollback_directory(session, target)
        elif target.is_file() and self.config.targets_path(target):
            self._rollback_single(session, target)
        else:
            self._echo(
                f"'{target}' is not a {self.config.target_filename} file; nothing to do."
            )
        return session

    def _print_history(self, file_path: Path, entries: List[HistoryEntry]) -> None:
        self.console.print()
        self._echo(f"Git history for '{file_path}':")
        for number, entry in enumerate(entries, start=1):
            self._echo(f"{number:>2}. {entry.raw}")

    def _rollback_single(self, session: Session, file_path: Path) -> FileRollback:
        entries = self.repository.file_history(file_path, self.config.history_limit)
        record = FileRollback(path=file_path, entries=entries)
        session.files.append(record)
        self._print_history(file_path, entries)

        index = choose_revision(
            entries,
            preferred_default=self.config.default_selection,
            prompt=self.prompt,
            echo=self._echo,
        )
        record.selected_index = index

        if index == 1:
            record.outcome = RollbackOutcome.UNCHANGED
            self._echo(
                f"No rollback has been done for '{file_path}' because it is "
                f"already at commit number 1."
            )
            return record

        entry: HistoryEntry = entries[index - 1]
        record.revision = entry.revision
        logger.debug("Rolling back %s to %s", file_path, entry.revision)
        self.repository.rollback_file(file_path, entry.revision)
        record.outcome = RollbackOutcome.ROLLED_BACK
        self.console.print(
            f"[green]Successfully rolled back '{escape(str(file_path))}' "
            f"to commit {escape(entry.revision)}.[/green]"
        )
        return record

    def _confirm_all(self, files: RolloutFileSet) -> bool:
        answer = self.prompt(
            f"Would you like to continue with rolling back all {files.count} "
            f"of these files? (yes/no)",
            default="",
            show_default=False,
            type=str,
        )
        return answer.strip().lower() == "yes"

    def _rollback_directory(self, session: Session, dir_path: Path) -> None:
        files = find_rollout_files(dir_path, self.config.target_filename)

        self._echo(f"Found {files.count} {self.config.target_filename} files:")
        for path in files.paths:
            self._echo(str(path))

        if files.count == 0:
            return

        if not self._confirm_all(files):
            self.console.print("[yellow]Operation aborted by the user.[/yellow]")
            return

        self._echo(
            f"Proceeding with rollback for all {self.config.target_filename} files..."
        )
        for path in files.paths:
            self._rollback_single(session, path)
