"""Repository configuration management for hunkstage.

Handles reading and writing the .hunkstage/config.yaml file in each
repository. Values are validated through the StagingConfig model.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from hunkstage.logging_utils import logger


class StagingConfig(BaseModel):
    """Tunable settings of the staging engine."""

    # Hunks with more new lines than this are checked for pure reformatting
    large_hunk_threshold: int = Field(default=20, ge=0)
    # Share of content-bearing lines below which a large hunk is reformatting
    min_content_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    # Context lines kept around a synthesized single-line change
    context_lines: int = Field(default=3, ge=0)
    # Similarity needed to pair an added line with a deleted one
    similarity_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    # Concurrent git processes per repository
    max_git_processes: int = Field(default=2, ge=1)
    # Reject malformed hunk headers instead of recovering
    strict_hunk_headers: bool = False


class ConfigError(Exception):
    """Raised when a configuration value is invalid."""

    pass


def get_config_dir(repo_root: Path) -> Path:
    """Get the repository config directory.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to .hunkstage/
    """
    return repo_root / ".hunkstage"


def get_config_file(repo_root: Path) -> Path:
    """Return path to the config.yaml file.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to .hunkstage/config.yaml
    """
    return get_config_dir(repo_root) / "config.yaml"


def load_config(repo_root: Path) -> StagingConfig:
    """Load the hunkstage configuration from config.yaml.

    Missing keys take their default values. A missing file gives the
    defaults; so does an unreadable or invalid one, with a warning.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        The StagingConfig.
    """
    config_file = get_config_file(repo_root)

    if not config_file.exists():
        return StagingConfig()

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
        return StagingConfig(**data)
    except (yaml.YAMLError, ValidationError, TypeError, OSError) as e:
        logger.warning(f"Ignoring invalid configuration in {config_file}: {e}")
        return StagingConfig()


def save_config(repo_root: Path, config: StagingConfig) -> None:
    """Save the configuration to config.yaml.

    Args:
        repo_root: The root directory of the git repository.
        config: Configuration to save.
    """
    config_file = get_config_file(repo_root)

    # Ensure directory exists
    config_file.parent.mkdir(exist_ok=True)

    with open(config_file, "w") as f:
        yaml.dump(
            config.model_dump(),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


def set_config_value(repo_root: Path, key: str, value: Any) -> StagingConfig:
    """Set a single configuration value and save the file.

    Args:
        repo_root: The root directory of the git repository.
        key: Setting name (a StagingConfig field).
        value: New value; strings are converted by the model.

    Returns:
        The updated StagingConfig.

    Raises:
        ConfigError: If the key is unknown or the value is invalid.
    """
    if key not in StagingConfig.model_fields:
        raise ConfigError(f"Unknown setting: {key}")

    data = load_config(repo_root).model_dump()
    data[key] = value
    try:
        config = StagingConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value}") from e

    save_config(repo_root, config)
    return config
