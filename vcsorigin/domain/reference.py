"""
Reference domain object for vcsorigin.

A Reference is a named, possibly mutable pointer ('main', 'v1.2') pinned
to the Revision it resolved to, plus backend metadata labels such as the
repository URL.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

from .revision import Revision

R = TypeVar('R', bound=Revision)


@dataclass(frozen=True)
class Reference(Generic[R]):
    """
    Immutable named pointer plus optional pinned revision.

    Attributes:
        name: The reference text as requested (e.g. "main")
        revision: The revision it resolved to, or None if not pinned
        labels: Read-only backend metadata surfaced to the workflow
    """

    name: str
    revision: Optional[R] = None
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.name is None:
            raise ValueError("Reference name is required")
        object.__setattr__(self, 'labels', MappingProxyType(dict(self.labels)))

    def __hash__(self) -> int:
        return hash((self.name, self.revision))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'revision': self.revision.as_string() if self.revision else None,
            'labels': dict(self.labels),
        }
