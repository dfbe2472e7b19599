"""
Record store interface.

The comparator and pipeline only depend on this interface, so the git notes
backend can be replaced by another keyed store without touching them.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..errors import CorruptEntry
from .models import NoteEntry, SizeRecord

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Commit-keyed store of size records.
    
    Records for distinct commits accumulate and are never removed by this
    tool. Writing a record for a commit that already has one replaces it.
    Writes are staged locally and only become visible to other runs after
    ``publish``.
    """
    
    @abstractmethod
    def sync_remote(self) -> None:
        """Fetch the remote records into the local copy.
        
        Raises:
            NoRemoteHistory: If nothing has ever been published
        """
    
    @abstractmethod
    def list_entries(self) -> List[NoteEntry]:
        """List local entries. Order is store-defined, not chronological."""
    
    @abstractmethod
    def read_entry(self, entry: NoteEntry) -> SizeRecord:
        """Read and decode one entry.
        
        Raises:
            CorruptEntry: If the stored content is not a valid record
        """
    
    @abstractmethod
    def write_entry(self, record: SizeRecord) -> None:
        """Stage a record for its commit, replacing any existing one."""
    
    @abstractmethod
    def publish(self) -> None:
        """Make staged writes visible on the remote.
        
        Raises:
            PushRejected: If concurrent writers kept winning the race
        """
    
    def load_records(self, skip_corrupt: bool = True) -> List[SizeRecord]:
        """Read every local record.
        
        Args:
            skip_corrupt: Skip undecodable entries with a warning instead of
                failing the whole load
                
        Returns:
            Records in store order (callers must sort before temporal use)
        """
        records = []
        for entry in self.list_entries():
            try:
                records.append(self.read_entry(entry))
            except CorruptEntry as e:
                if not skip_corrupt:
                    raise
                logger.warning("Skipping size record for commit %s: %s", entry.commit, e)
        return records
    
    def save(self, record: SizeRecord) -> None:
        """Write a record and publish it."""
        self.write_entry(record)
        self.publish()
