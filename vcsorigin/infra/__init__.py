"""
Infrastructure layer for vcsorigin.

Contains abstractions for external systems:
- GitClient: Git command execution
- ClonePool: Cached local clones with one active user per location
- staged_checkout: Working directory replacement with rollback

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitCommit
from .clone_pool import ClonePool
from .workdir import staged_checkout, list_files

__all__ = [
    'GitClient',
    'GitCommit',
    'ClonePool',
    'staged_checkout',
    'list_files',
]
