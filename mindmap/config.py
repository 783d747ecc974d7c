"""
Configuration management for the mind-map editor.

Handles persistent editor settings:
- How drag moves reach the host (commit policy)
- Undo history depth
- Handle hit radius

Settings are stored in mindmap.json at the project root. Environment
variables override the file:
- MINDMAP_CONFIG: alternative path to the config file
- MINDMAP_COMMIT_POLICY: "per_move" or "per_gesture"
- MINDMAP_HISTORY_SIZE: integer >= 1
"""

import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from mindmap.constants import HANDLE_RADIUS, HISTORY_SIZE


class CommitPolicy(str, Enum):
    """When node positions are handed to the host during a drag."""
    PER_MOVE = "per_move"        # on every pointer move (live secondary views stay in sync)
    PER_GESTURE = "per_gesture"  # once, on pointer up

    @classmethod
    def parse(cls, value) -> "CommitPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid commit policy {value!r} (expected one of: {valid})")


@dataclass
class EditorSettings:
    commit_policy: CommitPolicy = CommitPolicy.PER_MOVE
    history_size: int = HISTORY_SIZE
    handle_radius: float = HANDLE_RADIUS


def get_config_path() -> Path:
    """Path to mindmap.json: $MINDMAP_CONFIG, else next to the mindmap package."""
    env_path = os.environ.get("MINDMAP_CONFIG")
    if env_path:
        return Path(env_path)
    return Path(__file__).parent.parent / "mindmap.json"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from mindmap.json. Missing or unreadable files give {}."""
    config_path = Path(config_path) if config_path else get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to mindmap.json."""
    config_path = Path(config_path) if config_path else get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def _parse_history_size(value) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid history size {value!r}")
    if size < 1:
        raise ValueError(f"History size must be at least 1, got {size}")
    return size


def get_editor_settings(config_path: Optional[Path] = None) -> EditorSettings:
    """
    Resolve editor settings.

    Priority:
    1. Environment variables
    2. Stored in mindmap.json
    3. Built-in defaults
    """
    config = load_config(config_path)
    settings = EditorSettings()

    policy = os.environ.get("MINDMAP_COMMIT_POLICY") or config.get("commit_policy")
    if policy:
        settings.commit_policy = CommitPolicy.parse(policy)

    history_size = os.environ.get("MINDMAP_HISTORY_SIZE") or config.get("history_size")
    if history_size is not None:
        settings.history_size = _parse_history_size(history_size)

    if "handle_radius" in config:
        settings.handle_radius = float(config["handle_radius"])

    return settings


def set_commit_policy(policy, config_path: Optional[Path] = None) -> None:
    """Persist the commit policy to mindmap.json."""
    config = load_config(config_path)
    config["commit_policy"] = CommitPolicy.parse(policy).value
    save_config(config, config_path)
