"""
Git command collaborator.

Thin wrapper over the git executable. Everything the record store and the
pipeline need from git goes through this class so tests can swap in a fake.
"""

import base64
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import CommandError, CorruptEntry, NoRemoteHistory, PushRejected
from ..process import run_command
from .models import NoteEntry

logger = logging.getLogger(__name__)

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "41898282+github-actions[bot]@users.noreply.github.com"

_MISSING_REMOTE_REF = "couldn't find remote ref"
_REJECTED_MARKERS = ("[rejected]", "non-fast-forward", "fetch first", "stale info")


class GitClient:
    """Runs git commands against one working tree."""
    
    def __init__(
        self,
        repo_dir: Union[str, Path] = ".",
        token: Optional[str] = None,
        server_url: str = "https://github.com",
    ):
        """Initialize the client.
        
        Args:
            repo_dir: Working tree the commands run in
            token: Token used to authenticate fetch and push over HTTPS
            server_url: Host the token is sent to
        """
        self.repo_dir = Path(repo_dir)
        self.token = token
        self.server_url = server_url.rstrip("/")
    
    def _auth_args(self) -> List[str]:
        if not self.token:
            return []
        basic = base64.b64encode(f"x-access-token:{self.token}".encode()).decode()
        key = f"http.{self.server_url}/.extraheader"
        # An empty value resets the list, so a header persisted by checkout is not sent twice
        return ["-c", f"{key}=", "-c", f"{key}=AUTHORIZATION: basic {basic}"]
    
    def run(self, *args: str, authenticated: bool = False) -> str:
        """Run ``git <args>`` and return its combined output."""
        auth = self._auth_args() if authenticated else []
        display = ["git"] + (["-c", "http.extraheader=***"] if auth else []) + list(args)
        return run_command(["git", *auth, *args], cwd=self.repo_dir, display=display)
    
    def configure_identity(self) -> None:
        """Trust the workspace and set the committer identity used for notes.
        
        Global config is written because the container image's own config is
        not picked up inside the runner.
        """
        cwd = str(self.repo_dir.resolve())
        self.run("config", "--global", "--add", "safe.directory", cwd)
        self.run("config", "--global", "user.name", BOT_NAME)
        self.run("config", "--global", "user.email", BOT_EMAIL)
    
    def commit_timestamp(self, rev: str = "HEAD") -> str:
        """Raw commit time of ``rev`` in unix seconds, as printed by git."""
        return self.run("log", "--pretty=format:%ct", "-1", rev)
    
    def fetch_notes(self, remote: str, src: str, dst: str) -> None:
        """Force-fetch the remote notes ref ``src`` into local ref ``dst``.
        
        Raises:
            NoRemoteHistory: If the remote has no such ref
        """
        try:
            self.run("fetch", remote, f"+{src}:{dst}", authenticated=True)
        except CommandError as e:
            if _MISSING_REMOTE_REF in e.output:
                raise NoRemoteHistory(f"remote '{remote}' has no {src}") from e
            raise
    
    def list_notes(self, ref: str) -> List[NoteEntry]:
        """List ``(commit, blob)`` pairs of a local notes ref.
        
        A ref that does not exist locally lists as empty.
        """
        try:
            self.run("rev-parse", "--verify", "--quiet", ref)
        except CommandError:
            return []
        out = self.run("notes", f"--ref={ref}", "list")
        entries = []
        for line in out.splitlines():
            line = line.strip()
            if not line:
                continue
            blob, sep, commit = line.partition(" ")
            if not sep or not commit:
                raise CorruptEntry(f"malformed git notes output line: {line!r}")
            entries.append(NoteEntry(commit=commit.strip(), blob=blob))
        return entries
    
    def read_blob(self, blob: str) -> str:
        return self.run("cat-file", "blob", blob)
    
    def add_note(self, ref: str, commit: str, message: str) -> None:
        """Create or overwrite the note for ``commit``."""
        self.run("notes", f"--ref={ref}", "add", "-f", "-m", message, commit)
    
    def merge_notes(self, ref: str, other: str) -> None:
        """Merge ``other`` into ``ref``, keeping local notes on conflict."""
        self.run("notes", f"--ref={ref}", "merge", "-s", "ours", "--quiet", other)
    
    def push_notes(self, remote: str, ref: str) -> None:
        """Push a notes ref.
        
        Raises:
            PushRejected: If the remote rejected the push as non-fast-forward
        """
        try:
            self.run("push", remote, f"{ref}:{ref}", authenticated=True)
        except CommandError as e:
            if any(marker in e.output for marker in _REJECTED_MARKERS):
                raise PushRejected(f"push of {ref} to '{remote}' was rejected", attempts=1) from e
            raise
