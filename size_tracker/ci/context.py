"""
CI event context.

Reads the run's event metadata from the GitHub Actions environment.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationError


@dataclass(frozen=True)
class CIContext:
    """Event metadata for one CI run."""
    event_name: str
    sha: str
    ref: str = ""
    ref_type: str = ""
    repository: str = ""
    default_branch: Optional[str] = None
    workspace: str = "."
    server_url: str = "https://github.com"


def _load_event_payload(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    event_path = Path(path)
    if not event_path.exists():
        return {}
    try:
        with open(event_path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"cannot read event payload {path}: {e}") from e
    return payload if isinstance(payload, dict) else {}


def load_ci_context(env: Mapping[str, str]) -> CIContext:
    """Build the CI context from GitHub Actions environment variables.
    
    The default branch is taken from ``repository.default_branch`` in the
    event payload at ``GITHUB_EVENT_PATH``.
    
    Raises:
        ConfigurationError: If the event name or commit SHA is missing
    """
    event_name = env.get("GITHUB_EVENT_NAME", "")
    if not event_name:
        raise ConfigurationError("environment variable GITHUB_EVENT_NAME is unset")
    sha = env.get("GITHUB_SHA", "")
    if not sha:
        raise ConfigurationError("environment variable GITHUB_SHA is unset")
    
    payload = _load_event_payload(env.get("GITHUB_EVENT_PATH"))
    repository = payload.get("repository") or {}
    default_branch = repository.get("default_branch") if isinstance(repository, dict) else None
    
    return CIContext(
        event_name=event_name,
        sha=sha,
        ref=env.get("GITHUB_REF", ""),
        ref_type=env.get("GITHUB_REF_TYPE", ""),
        repository=env.get("GITHUB_REPOSITORY", ""),
        default_branch=default_branch or None,
        workspace=env.get("GITHUB_WORKSPACE", "") or ".",
        server_url=env.get("GITHUB_SERVER_URL", "") or "https://github.com",
    )
