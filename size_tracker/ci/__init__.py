"""
CI platform collaborators.

Reads the event context provided by GitHub Actions and runs the user's
build command.
"""
