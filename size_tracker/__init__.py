"""
Size Tracker.

Tracks the size of a built binary across the history of a git repository
and reports how a change affects it.
"""

__version__ = "0.4.0"
