"""
Command-line interface for Size Tracker.
"""
