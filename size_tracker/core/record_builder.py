"""
Size record construction.

Combines the measured artifact size with the commit's own time, never the
wall clock of the measurement.
"""

from datetime import datetime, timezone
from typing import Union

from ..errors import InvalidTimestamp, SizeOverflow
from ..storage.codec import parse_timestamp
from ..storage.models import MAX_RECORD_SIZE, SizeRecord


def parse_commit_timestamp(raw: Union[str, bytes]) -> datetime:
    """Parse the commit time reported by git.
    
    Accepts unix seconds (``git log --pretty=format:%ct``) or an ISO-8601
    timestamp (``%cI``).
    
    Raises:
        InvalidTimestamp: If the value is empty or cannot be parsed
    """
    text = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else raw
    text = text.strip()
    if not text:
        raise InvalidTimestamp("commit time is empty")
    
    if text.lstrip("-").isdigit():
        try:
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidTimestamp(f"commit time {text!r} is out of range") from e
    
    try:
        return parse_timestamp(text)
    except ValueError as e:
        raise InvalidTimestamp(f"cannot parse commit time {text!r}") from e


def build_record(commit: str, measured_size: int, raw_commit_time: Union[str, bytes]) -> SizeRecord:
    """Build the size record for one commit.
    
    Args:
        commit: Commit identifier from the CI context
        measured_size: Artifact size in bytes
        raw_commit_time: Commit time as printed by git
        
    Returns:
        The SizeRecord
        
    Raises:
        InvalidTimestamp: If the commit time cannot be parsed
        SizeOverflow: If the size does not fit the stored field
    """
    if not 0 <= measured_size <= MAX_RECORD_SIZE:
        raise SizeOverflow(
            f"artifact size {measured_size} bytes does not fit the 32-bit "
            f"record size field (max {MAX_RECORD_SIZE})"
        )
    timestamp = parse_commit_timestamp(raw_commit_time)
    return SizeRecord(commit=commit, timestamp=timestamp, size=measured_size)
