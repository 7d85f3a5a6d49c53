"""
Version control integration.

This package contains the :class:`GitClient` used to read staged changes
and to create the final commit.
"""

from .git_client import FileChange, GitClient, GitError  # noqa: F401
