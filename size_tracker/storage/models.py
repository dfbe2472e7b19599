"""
Data models for the storage layer.

Defines the size record persisted per commit and the raw notes listing entry.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from ..errors import SizeOverflow

# Stored size field is an unsigned 32-bit integer.
MAX_RECORD_SIZE = 2**32 - 1


@dataclass(frozen=True)
class SizeRecord:
    """Size of the built artifact at one commit.
    
    Keyed by commit in the record store. Writing a record for a commit that
    already has one replaces it; records for distinct commits accumulate.
    """
    commit: str
    timestamp: datetime
    size: int
    
    def __post_init__(self):
        """Validate record fields."""
        if not self.commit:
            raise ValueError("commit cannot be empty")
        if not 0 <= self.size <= MAX_RECORD_SIZE:
            raise SizeOverflow(
                f"size {self.size} does not fit the 32-bit record size field "
                f"(0..{MAX_RECORD_SIZE})"
            )
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))


@dataclass(frozen=True)
class NoteEntry:
    """One entry of the notes listing: note blob attached to a commit."""
    commit: str
    blob: str
