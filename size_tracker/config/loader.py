"""
Configuration management and loading.

Settings come from an optional YAML file and from the action inputs
(``INPUT_*`` environment variables); inputs win over the file.
"""

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..errors import ConfigurationError
from ..storage.notes import DEFAULT_NOTES_REF, DEFAULT_PUSH_ATTEMPTS
from ..core.trend import DEFAULT_SMA_WINDOW

ALLOWED_KEYS = {
    'build_command',
    'notes_ref',
    'artifact_path',
    'graph_path',
    'sma_window',
    'push_attempts',
    'default_branch',
    'remote',
}

INT_KEYS = {'sma_window', 'push_attempts'}


@dataclass(frozen=True)
class TrackerConfig:
    """Complete Size Tracker configuration."""
    build_command: List[str]
    github_token: str
    notes_ref: str = DEFAULT_NOTES_REF
    artifact_path: str = "out"
    graph_path: str = "graph.png"
    sma_window: int = DEFAULT_SMA_WINDOW
    push_attempts: int = DEFAULT_PUSH_ATTEMPTS
    default_branch: Optional[str] = None
    remote: str = "origin"

    def __post_init__(self):
        """Validate configuration values."""
        if not self.build_command:
            raise ConfigurationError("parsed build command is empty")
        if not self.github_token:
            raise ConfigurationError("environment variable GITHUB_TOKEN is unset")
        if not self.notes_ref.startswith("refs/notes/"):
            raise ConfigurationError(f"notes_ref must start with 'refs/notes/': {self.notes_ref}")
        if self.sma_window < 1:
            raise ConfigurationError("sma_window must be >= 1")
        if self.push_attempts < 1:
            raise ConfigurationError("push_attempts must be >= 1")
        if not self.artifact_path:
            raise ConfigurationError("artifact_path cannot be empty")
        if not self.graph_path:
            raise ConfigurationError("graph_path cannot be empty")


def _input_names(key: str) -> List[str]:
    """Environment variable names GitHub Actions uses for an input."""
    dashed = key.replace('_', '-').upper()
    return [f"INPUT_{dashed}", f"INPUT_{key.upper()}"]


def _read_inputs(env: Mapping[str, str]) -> Dict[str, str]:
    inputs = {}
    for key in ALLOWED_KEYS:
        for name in _input_names(key):
            value = env.get(name, "").strip()
            if value:
                inputs[key] = value
                break
    return inputs


def _read_config_file(path: str) -> Dict[str, Any]:
    """Load and validate the YAML configuration file.

    Raises:
        ConfigurationError: If the file is missing, invalid or has unknown keys
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML in config file {path}: {e}") from e

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    unknown_keys = set(raw_config.keys()) - ALLOWED_KEYS
    if unknown_keys:
        raise ConfigurationError(f"unknown configuration keys: {sorted(unknown_keys)}")
    return raw_config


def _parse_build_command(value: Any) -> List[str]:
    if isinstance(value, list):
        if not all(isinstance(arg, str) for arg in value):
            raise ConfigurationError("'build_command' list must contain only strings")
        return list(value)
    if not isinstance(value, str):
        raise ConfigurationError("'build_command' must be a string or a list of strings")
    try:
        return shlex.split(value)
    except ValueError as e:
        raise ConfigurationError(f"parsing build command: {e}") from e


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")


def load_tracker_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> TrackerConfig:
    """Load and validate the tracker configuration.

    Args:
        path: Optional YAML configuration file
        env: Environment to read inputs and GITHUB_TOKEN from

    Returns:
        Validated TrackerConfig

    Raises:
        ConfigurationError: If a required input is missing or a value is invalid
    """
    if env is None:
        env = os.environ

    values: Dict[str, Any] = _read_config_file(path) if path else {}
    values.update(_read_inputs(env))

    if 'build_command' not in values:
        raise ConfigurationError("required input 'build-command' is unset")

    settings: Dict[str, Any] = {
        'build_command': _parse_build_command(values.pop('build_command')),
        'github_token': env.get("GITHUB_TOKEN", ""),
    }
    for key, value in values.items():
        if value is None:
            continue
        if key in INT_KEYS:
            settings[key] = _parse_int(key, value)
        elif not isinstance(value, str):
            raise ConfigurationError(f"'{key}' must be a string")
        else:
            settings[key] = value

    return TrackerConfig(**settings)
