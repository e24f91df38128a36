"""
Infrastructure layer for commitlog.

Contains abstractions for external systems:
- GitClient: Git command execution, synchronous and asyncio

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitProcessError

__all__ = [
    'GitClient',
    'GitProcessError',
]
