"""
Trigger classification.

Decides what a CI event means for the size history:

- pushes to the default branch record a new baseline,
- pull requests and pushes to other branches compare against the history,
- tags and every other event are skipped.
"""

from enum import Enum
from typing import Optional

BRANCH_PREFIX = "refs/heads/"
TAG_PREFIX = "refs/tags/"

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})


class Trigger(Enum):
    """What a run does with the measured size."""
    SKIP = "skip"
    RECORD = "record"
    COMPARE = "compare"


def branch_name(ref: str) -> str:
    """Strip the ``refs/heads/`` prefix from a ref."""
    if ref.startswith(BRANCH_PREFIX):
        return ref[len(BRANCH_PREFIX):]
    return ref


def classify_trigger(
    event_name: str,
    ref_type: Optional[str],
    ref: Optional[str],
    default_branch: Optional[str],
) -> Trigger:
    """Classify a CI event.
    
    Args:
        event_name: Event that started the run (``push``, ``pull_request``...)
        ref_type: ``branch`` or ``tag``, when the platform reports it
        ref: Ref the event is for (``refs/heads/main``)
        default_branch: Repository's default branch name
        
    Returns:
        The Trigger for the event. Never raises.
    """
    ref = ref or ""
    if ref_type == "tag" or ref.startswith(TAG_PREFIX):
        return Trigger.SKIP
    
    if event_name in PULL_REQUEST_EVENTS:
        return Trigger.COMPARE
    
    if event_name == "push":
        if default_branch and branch_name(ref) == default_branch:
            return Trigger.RECORD
        return Trigger.COMPARE
    
    return Trigger.SKIP
