"""
Record store backed by git notes.

Each record is the content of a note attached to its commit under a
dedicated notes ref. The remote repository is the source of truth; the local
ref is a disposable copy valid for one run.
"""

import logging
from typing import List

from ..errors import PushRejected
from .codec import decode_record, encode_record
from .git import GitClient
from .models import NoteEntry, SizeRecord
from .repository import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_NOTES_REF = "refs/notes/size-tracker"
DEFAULT_PUSH_ATTEMPTS = 3


class NotesRecordStore(RecordStore):
    """Size records stored as git notes."""
    
    def __init__(
        self,
        git: GitClient,
        ref: str = DEFAULT_NOTES_REF,
        remote: str = "origin",
        push_attempts: int = DEFAULT_PUSH_ATTEMPTS,
    ):
        """Initialize the store.
        
        Args:
            git: Git collaborator for the working tree
            ref: Fully qualified notes ref holding the records
            remote: Remote the ref is fetched from and pushed to
            push_attempts: Total push attempts before giving up on conflicts
        """
        if not ref.startswith("refs/notes/"):
            raise ValueError(f"notes ref must start with 'refs/notes/': {ref}")
        if push_attempts < 1:
            raise ValueError("push_attempts must be >= 1")
        self.git = git
        self.ref = ref
        self.remote = remote
        self.push_attempts = push_attempts
    
    @property
    def scratch_ref(self) -> str:
        """Local ref the remote notes are fetched into when a push conflicts."""
        return f"{self.ref}-remote"
    
    def sync_remote(self) -> None:
        self.git.fetch_notes(self.remote, self.ref, self.ref)
    
    def list_entries(self) -> List[NoteEntry]:
        return self.git.list_notes(self.ref)
    
    def read_entry(self, entry: NoteEntry) -> SizeRecord:
        return decode_record(self.git.read_blob(entry.blob), blob=entry.blob)
    
    def write_entry(self, record: SizeRecord) -> None:
        self.git.add_note(self.ref, record.commit, encode_record(record).decode("utf-8"))
    
    def publish(self) -> None:
        """Push the notes ref, merging in concurrent writes on rejection.
        
        Records for different commits never conflict, so a rejected push is
        resolved by fetching the remote ref, merging it into the local one
        (local note wins for the same commit) and pushing again.
        """
        for attempt in range(1, self.push_attempts + 1):
            try:
                self.git.push_notes(self.remote, self.ref)
                return
            except PushRejected:
                if attempt == self.push_attempts:
                    break
                logger.warning(
                    "Push of %s rejected (attempt %d/%d), merging remote notes and retrying",
                    self.ref, attempt, self.push_attempts
                )
                self.git.fetch_notes(self.remote, self.ref, self.scratch_ref)
                self.git.merge_notes(self.ref, self.scratch_ref)
        
        raise PushRejected(
            f"push of {self.ref} to '{self.remote}' rejected after "
            f"{self.push_attempts} attempts",
            attempts=self.push_attempts
        )
