"""Configuration loading for projsnap (.projsnap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".projsnap.yml"
DEFAULT_TRUNK_BRANCH = "master"
DEFAULT_VERSION_TAG = "1.0.0"
DEFAULT_OUTPUT = "code.json"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitConfig:
    """Settings for git-aware snapshots."""

    trunk_branch: str = DEFAULT_TRUNK_BRANCH


@dataclass
class SnapshotConfig:
    """Represents the settings defined in .projsnap.yml."""

    root: Path
    name: Optional[str] = None
    version_tag: Optional[str] = None
    output: Optional[Path] = None
    exclude_paths: List[str] = field(default_factory=list)
    git: GitConfig = field(default_factory=GitConfig)


def load_config(config_path: Path) -> SnapshotConfig:
    """Load configuration from disk.

    ``config_path`` may point at the project directory or at the config file
    itself. A missing file yields the defaults.
    """
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SnapshotConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    git_data = _as_dict(data.get("git"))
    git = GitConfig()
    if git_data:
        git.trunk_branch = _as_str(git_data.get("trunk_branch")) or DEFAULT_TRUNK_BRANCH

    output_str = _as_str(data.get("output"))

    return SnapshotConfig(
        root=root,
        name=_as_str(data.get("name")),
        version_tag=_as_str(data.get("version_tag")),
        output=root / output_str if output_str else None,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        git=git,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_OUTPUT",
    "DEFAULT_TRUNK_BRANCH",
    "DEFAULT_VERSION_TAG",
    "GitConfig",
    "SnapshotConfig",
    "load_config",
]
