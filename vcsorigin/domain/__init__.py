"""
Domain layer for vcsorigin.

Contains pure domain objects with no I/O or side effects:
- Revision: Immutable identity of one point in history
- Reference: Named pointer pinned to a revision, plus labels
- Change: One historical entry for a revision
- Author / Authoring: Canonical authors and the policy producing them
- Glob: Include/exclude path filter

These objects are immutable and provide serialization methods for
JSONL output.
"""

from .revision import Revision
from .reference import Reference
from .change import Change
from .author import Author
from .authoring import Authoring, AuthoringMode
from .glob import Glob

__all__ = [
    'Revision',
    'Reference',
    'Change',
    'Author',
    'Authoring',
    'AuthoringMode',
    'Glob',
]
