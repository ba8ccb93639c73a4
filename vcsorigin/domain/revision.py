"""
Revision domain object for vcsorigin.

A Revision is the immutable identity of one point in a backend's history.
Backends subclass it; identity is the canonical string from as_string().
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class Revision(ABC):
    """
    Immutable identity for one point in a backend's history.

    Subclasses must implement as_string(), returning a canonical form that
    is stable enough to persist externally (e.g. a git SHA-1). Two
    revisions are equal iff they are of the same type and share that
    canonical form.
    """

    @abstractmethod
    def as_string(self) -> str:
        """Canonical, persistable string form."""

    @property
    def timestamp(self) -> Optional[datetime]:
        """Optional timestamp, used for ordering when topology is not enough."""
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Revision):
            return NotImplemented
        return type(self) is type(other) and self.as_string() == other.as_string()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.as_string()))

    def __str__(self) -> str:
        return self.as_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.as_string()!r})"
