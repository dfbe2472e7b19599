"""
Shared fixtures: an in-memory git collaborator and record factories.
"""

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Tuple

import pytest

from size_tracker.errors import NoRemoteHistory, PushRejected
from size_tracker.storage.codec import encode_record
from size_tracker.storage.models import NoteEntry, SizeRecord
from size_tracker.storage.notes import DEFAULT_NOTES_REF

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(commit: str, size: int, hours: int = 0) -> SizeRecord:
    """Create a record ``hours`` after BASE_TIME."""
    return SizeRecord(commit=commit, timestamp=BASE_TIME + timedelta(hours=hours), size=size)


class FakeGit:
    """In-memory stand-in for GitClient.
    
    Notes refs are dicts of commit -> note content, one set for the local
    clone and one for the remote. ``racing_writes`` are applied to the remote
    one per push, each making that push fail as a concurrent writer would.
    """
    
    def __init__(self, commit_time: str = "1704110400"):
        self.commit_time = commit_time
        self.local_refs: Dict[str, Dict[str, str]] = {}
        self.remote_refs: Dict[str, Dict[str, str]] = {}
        self.blobs: Dict[str, str] = {}
        self.racing_writes: List[Tuple[str, str, str]] = []
        self.calls: List[tuple] = []
        self.identity_configured = False
    
    def seed_remote(self, *records: SizeRecord, ref: str = DEFAULT_NOTES_REF) -> None:
        notes = self.remote_refs.setdefault(ref, {})
        for record in records:
            notes[record.commit] = encode_record(record).decode("utf-8") + "\n"
    
    def configure_identity(self) -> None:
        self.calls.append(("configure_identity",))
        self.identity_configured = True
    
    def commit_timestamp(self, rev: str = "HEAD") -> str:
        self.calls.append(("commit_timestamp", rev))
        return self.commit_time
    
    def fetch_notes(self, remote: str, src: str, dst: str) -> None:
        self.calls.append(("fetch_notes", remote, src, dst))
        if src not in self.remote_refs:
            raise NoRemoteHistory(f"remote '{remote}' has no {src}")
        self.local_refs[dst] = dict(self.remote_refs[src])
    
    def list_notes(self, ref: str) -> List[NoteEntry]:
        self.calls.append(("list_notes", ref))
        entries = []
        for commit, content in sorted(self.local_refs.get(ref, {}).items()):
            blob = hashlib.sha1(content.encode("utf-8")).hexdigest()
            self.blobs[blob] = content
            entries.append(NoteEntry(commit=commit, blob=blob))
        return entries
    
    def read_blob(self, blob: str) -> str:
        self.calls.append(("read_blob", blob))
        return self.blobs[blob]
    
    def add_note(self, ref: str, commit: str, message: str) -> None:
        self.calls.append(("add_note", ref, commit))
        self.local_refs.setdefault(ref, {})[commit] = message + "\n"
    
    def merge_notes(self, ref: str, other: str) -> None:
        self.calls.append(("merge_notes", ref, other))
        merged = dict(self.local_refs.get(other, {}))
        merged.update(self.local_refs.get(ref, {}))
        self.local_refs[ref] = merged
    
    def push_notes(self, remote: str, ref: str) -> None:
        self.calls.append(("push_notes", remote, ref))
        if self.racing_writes:
            race_ref, commit, content = self.racing_writes.pop(0)
            self.remote_refs.setdefault(race_ref, {})[commit] = content
            raise PushRejected(f"push of {ref} to '{remote}' was rejected", attempts=1)
        self.remote_refs[ref] = dict(self.local_refs.get(ref, {}))
    
    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def baseline_record() -> SizeRecord:
    return make_record("abc123", 1048576)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to streams captured by an earlier test."""
    yield
    logging.getLogger("size_tracker").handlers.clear()
