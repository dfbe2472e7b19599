"""
Configuration loading for Size Tracker.
"""
