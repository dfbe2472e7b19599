"""
Error taxonomy for Size Tracker.

Lower layers raise these; the CLI is the only place that turns them
into exit codes.
"""

from typing import Sequence


class SizeTrackerError(Exception):
    """Base class for all failures surfaced by Size Tracker."""


class ConfigurationError(SizeTrackerError):
    """A required input is missing or invalid. Never retried."""


class CommandError(SizeTrackerError):
    """An external command exited with a non-zero status."""
    def __init__(self, args: Sequence[str], output: str, returncode: int):
        self.args_list = list(args)
        self.output = output
        self.returncode = returncode
        super().__init__(
            f"running command {' '.join(self.args_list)} failed "
            f"(exit status {returncode}):\n{output.rstrip()}"
        )


class InvalidTimestamp(SizeTrackerError):
    """Commit time could not be parsed from the collaborator output."""


class SizeOverflow(SizeTrackerError):
    """Measured size does not fit the stored 32-bit size field."""


class NoRemoteHistory(SizeTrackerError):
    """The remote has no notes ref yet. Expected on the first run."""


class CorruptEntry(SizeTrackerError):
    """A stored note could not be decoded into a size record."""
    def __init__(self, message: str, blob: str = ""):
        super().__init__(message)
        self.blob = blob


class PushRejected(SizeTrackerError):
    """Publishing the notes ref kept losing the race against other writers."""
    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class RenderError(SizeTrackerError):
    """The trend chart could not be written."""


class RunCancelled(SizeTrackerError):
    """The run was interrupted by SIGINT or SIGTERM."""
