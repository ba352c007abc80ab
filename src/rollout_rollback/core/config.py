"""Configuration for rollout-rollback."""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from rollout_rollback.core.exceptions import ConfigError

CONFIG_FILENAME = ".rollout-rollback.json"
DEFAULT_PROTECTED_BRANCHES = ["master", "develop", "main"]
MAX_HISTORY_LIMIT = 10


class RollbackConfig(BaseModel):
    """Settings that shape a rollback run."""

    target_filename: str = "rollout.yaml"
    protected_branches: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES)
    )
    history_limit: int = Field(default=MAX_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT)
    default_selection: int = Field(default=2, ge=1)

    @field_validator("protected_branches")
    @classmethod
    def _keep_builtin_branches(cls, branches: List[str]) -> List[str]:
        # Built-in branches can be extended, never removed
        merged = list(DEFAULT_PROTECTED_BRANCHES)
        for branch in branches:
            if branch not in merged:
                merged.append(branch)
        return merged

    def targets_path(self, path: Path) -> bool:
        """Whether a file path ends with the rollout filename, ignoring case.

        Prefixed names such as ``prod-rollout.yaml`` count as rollout files.
        """
        return str(path).lower().endswith(self.target_filename.lower())


def find_config_file(start: Path) -> Optional[Path]:
    """Find the nearest config file, stopping at the git root."""
    current = Path(start).resolve()
    if current.is_file():
        current = current.parent

    for parent in [current] + list(current.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if (parent / ".git").exists():
            break
    return None


def load_config(start: Optional[Path] = None) -> RollbackConfig:
    """Load configuration, falling back to defaults when no file exists."""
    config_file = find_config_file(start or Path.cwd())
    if config_file is None:
        return RollbackConfig()

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a JSON object")

    try:
        return RollbackConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e
