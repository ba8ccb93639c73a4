"""
vcsorigin - Read source history from any version-control backend.

vcsorigin is the read side of a code-migration pipeline. An Origin
resolves references to immutable revisions; a Reader, bound to a path
filter and an authoring policy, lists the changes between two revisions
and checks revisions out into a working directory.

Quick Start:
    from vcsorigin import Authoring, Author, Glob
    from vcsorigin.origins import GitOrigin

    origin = GitOrigin("https://github.com/user/repo.git")
    authoring = Authoring(default_author=Author("Bot", "bot@example.com"))
    reader = origin.new_reader(Glob(include=("src/**",)), authoring)

    target = origin.resolve("main")
    for change in reader.changes(None, target):
        reader.checkout(change.revision, "/tmp/work")
        ...  # transform, then record change.revision.as_string()
             # under origin.get_label_name() in the destination

Domain Objects:
    Revision - Immutable point in history
    Reference - Named pointer pinned to a revision, with labels
    Change - One historical entry
    Author / Authoring - Canonical authors and the policy producing them
    Glob - Include/exclude path filter

Origins:
    GitOrigin - git repositories (cached mirror)
    FolderOrigin - directory snapshots, no history
    MemoryOrigin - in-memory commit graph

Errors:
    ValidationError - user errors, never retried
    RepoError - operational errors, retryable by callers
"""

__version__ = "0.1.0"

# Domain objects
from .domain import (
    Revision,
    Reference,
    Change,
    Author,
    Authoring,
    AuthoringMode,
    Glob,
)

# Contracts
from .origin import Origin, Reader, GraphReader, VisitResult, AuthoringPolicy

# Errors
from .errors import (
    OriginError,
    ValidationError,
    RepoError,
    MalformedReferenceError,
    DisallowedAuthorError,
    InvalidGlobError,
    UnsupportedFilterError,
    RevisionNotFoundError,
    InvalidIntervalError,
    HistoryNotSupportedError,
    OperationCancelledError,
    CheckoutError,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain objects
    "Revision",
    "Reference",
    "Change",
    "Author",
    "Authoring",
    "AuthoringMode",
    "Glob",
    # Contracts
    "Origin",
    "Reader",
    "GraphReader",
    "VisitResult",
    "AuthoringPolicy",
    # Errors
    "OriginError",
    "ValidationError",
    "RepoError",
    "MalformedReferenceError",
    "DisallowedAuthorError",
    "InvalidGlobError",
    "UnsupportedFilterError",
    "RevisionNotFoundError",
    "InvalidIntervalError",
    "HistoryNotSupportedError",
    "OperationCancelledError",
    "CheckoutError",
    # Configuration
    "load_config",
    "save_config",
]
