"""
Core modules for Size Tracker.

This package contains trigger classification, record construction,
comparison against the size history and trend rendering.
"""
