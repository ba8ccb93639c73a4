"""
Author domain object for vcsorigin.
"""

import re
from dataclasses import dataclass
from typing import Optional

_AUTHOR_RE = re.compile(r'^\s*(?P<name>[^<>]*?)\s*<(?P<email>[^<>]*)>\s*$')


@dataclass(frozen=True)
class Author:
    """Canonical author record: a display name and an email address."""

    name: str
    email: str

    @classmethod
    def parse(cls, raw: str) -> Optional['Author']:
        """
        Parse an identity string of the form "Name <email>".

        Returns:
            Author, or None if the string does not have that shape
        """
        if not raw:
            return None
        match = _AUTHOR_RE.match(raw)
        if not match:
            return None
        name = match.group('name').strip()
        email = match.group('email').strip()
        if not name and not email:
            return None
        return cls(name=name, email=email)

    def to_dict(self):
        return {'name': self.name, 'email': self.email}

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
