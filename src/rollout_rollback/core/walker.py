"""Discovery of rollout files beneath a directory."""

import logging
import os
from pathlib import Path
from typing import List

from rollout_rollback.core.exceptions import WalkFailed
from rollout_rollback.models import RolloutFileSet

logger = logging.getLogger(__name__)


def _raise_walk_error(error: OSError) -> None:
    raise WalkFailed(f"Error walking the directory: {error}") from error


def find_rollout_files(root: Path, filename: str = "rollout.yaml") -> RolloutFileSet:
    """Recursively collect files named ``filename``, ignoring case.

    Paths come back in the order ``os.walk`` visits them. Any unreadable
    directory aborts the whole walk with WalkFailed.
    """
    root = Path(root)
    if not root.is_dir():
        raise WalkFailed(f"Error walking the directory: '{root}' is not a directory")

    target = filename.lower()
    found: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        for name in filenames:
            if name.lower() == target:
                found.append(Path(dirpath) / name)

    logger.debug("Found %d %s file(s) under %s", len(found), filename, root)
    return RolloutFileSet(root=root, paths=found)
