"""
Change domain object for vcsorigin.

A Change is one historical entry: the revision it belongs to, its
already-canonicalized author, when it happened, its message and the paths
it touched. Changes are produced by readers and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar

from .author import Author
from .revision import Revision

R = TypeVar('R', bound=Revision)


@dataclass(frozen=True)
class Change(Generic[R]):
    """
    Immutable history entry for a single revision.

    Attributes:
        revision: Revision this change belongs to (its identity)
        author: Canonical author, after the authoring policy ran
        timestamp: Timezone-aware time of the change
        message: Full change message
        changed_paths: Sorted paths touched by the change, or None when
            the backend cannot tell
        labels: "Name: value" labels found in the message
    """

    revision: R
    author: Author
    timestamp: datetime
    message: str
    changed_paths: Optional[Tuple[str, ...]] = None
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.changed_paths is not None:
            object.__setattr__(self, 'changed_paths', tuple(self.changed_paths))
        object.__setattr__(self, 'labels', MappingProxyType(dict(self.labels)))

    def __hash__(self) -> int:
        return hash(self.revision)

    @property
    def first_line(self) -> str:
        """First line of the message."""
        return self.message.split('\n', 1)[0] if self.message else ''

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'revision': self.revision.as_string(),
            'author': str(self.author),
            'timestamp': self.timestamp.isoformat(),
            'message': self.message,
            'changed_paths': list(self.changed_paths) if self.changed_paths is not None else None,
            'labels': dict(self.labels),
        }
        return {k: v for k, v in result.items() if v is not None}

    def __str__(self) -> str:
        return f"{self.revision.as_string()[:12]} {self.first_line}"
