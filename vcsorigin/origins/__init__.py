"""
Concrete origins for vcsorigin.

- GitOrigin: git repositories, through a cached bare mirror
- FolderOrigin: a plain directory snapshot, without history
- MemoryOrigin: an in-memory commit graph (reference backend, tests)
"""

from .git import GitOrigin, GitReader, GitRevision, GIT_LABEL_NAME
from .folder import FolderOrigin, FolderReader, FolderRevision, FOLDER_LABEL_NAME
from .memory import (
    MemoryOrigin,
    MemoryReader,
    MemoryRepository,
    MemoryRevision,
    MEMORY_LABEL_NAME,
)

__all__ = [
    'GitOrigin',
    'GitReader',
    'GitRevision',
    'GIT_LABEL_NAME',
    'FolderOrigin',
    'FolderReader',
    'FolderRevision',
    'FOLDER_LABEL_NAME',
    'MemoryOrigin',
    'MemoryReader',
    'MemoryRepository',
    'MemoryRevision',
    'MEMORY_LABEL_NAME',
]
