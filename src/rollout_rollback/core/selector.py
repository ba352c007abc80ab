"""Interactive choice of the revision to roll back to."""

from typing import Callable, List, Optional

import click

from rollout_rollback.core.exceptions import InvalidSelection
from rollout_rollback.models import HistoryEntry

PROMPT_TEXT = "Enter the number of the commit to rollback to"
INVALID_MESSAGE = "Invalid number. Please try again."


def default_index(entry_count: int, preferred: int = 2) -> int:
    """Menu number offered when the operator just presses enter."""
    return min(preferred, entry_count)


def parse_selection(raw: str, entry_count: int, default: int) -> int:
    """Turn operator input into a 1-based menu number.

    Raises:
        InvalidSelection: input is not a number in [1, entry_count]
    """
    text = raw.strip()
    if not text:
        return default

    try:
        index = int(text)
    except ValueError as e:
        raise InvalidSelection(f"'{raw}' is not a number") from e

    if index < 1 or index > entry_count:
        raise InvalidSelection(f"{index} is not between 1 and {entry_count}")
    return index


def choose_revision(
    entries: List[HistoryEntry],
    preferred_default: int = 2,
    prompt: Optional[Callable[..., str]] = None,
    echo: Optional[Callable[[str], None]] = None,
) -> int:
    """Prompt until the operator picks a valid menu number and return it.

    There is no attempt limit; only interrupting the process ends the loop
    early.
    """
    if not entries:
        raise InvalidSelection("no history entries to choose from")

    prompt = prompt or click.prompt
    echo = echo or click.echo
    default = default_index(len(entries), preferred_default)

    while True:
        raw = prompt(
            PROMPT_TEXT, default=str(default), show_default=True, type=str
        )
        try:
            return parse_selection(raw, len(entries), default)
        except InvalidSelection:
            echo(INVALID_MESSAGE)
