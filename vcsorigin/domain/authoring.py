"""
Authoring policy for vcsorigin.

Maps raw backend identity strings ("Jane <jane@example.com>") to canonical
Author records and decides which identities are allowed. Readers run every
change author through the policy exactly once.
"""

import fnmatch
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .author import Author
from ..errors import DisallowedAuthorError, ValidationError


class AuthoringMode(Enum):
    """How raw authors are mapped."""
    PASS_THRU = "pass_thru"    # Keep the original author
    OVERWRITE = "overwrite"    # Always use the default author
    ALLOWED = "allowed"        # Keep authors whose email is allowed


@dataclass(frozen=True)
class Authoring:
    """
    Concrete authoring policy.

    Attributes:
        default_author: Fallback author (and the author for OVERWRITE)
        mode: Mapping mode
        allowed: Email glob patterns accepted in ALLOWED mode
        strict: If True, a disallowed author raises DisallowedAuthorError;
            otherwise the default author is substituted
    """

    default_author: Author
    mode: AuthoringMode = AuthoringMode.PASS_THRU
    allowed: FrozenSet[str] = frozenset()
    strict: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Authoring':
        """
        Build a policy from the 'authoring' configuration section.

        Raises:
            ValidationError: if the default author or the mode is invalid
        """
        raw_default = config.get('default_author', '')
        default_author = Author.parse(raw_default)
        if default_author is None:
            raise ValidationError(f"Invalid default author: {raw_default!r}")
        mode_name = str(config.get('mode', AuthoringMode.PASS_THRU.value)).lower()
        try:
            mode = AuthoringMode(mode_name)
        except ValueError:
            raise ValidationError(f"Unknown authoring mode: {mode_name!r}") from None
        return cls(
            default_author=default_author,
            mode=mode,
            allowed=frozenset(config.get('allowed', ())),
            strict=bool(config.get('strict', False)),
        )

    def _lookup(self, raw: str) -> Optional[Author]:
        if self.mode == AuthoringMode.OVERWRITE:
            return self.default_author
        author = Author.parse(raw)
        if author is None:
            return None
        if self.mode == AuthoringMode.ALLOWED:
            email = author.email.lower()
            if not any(fnmatch.fnmatchcase(email, p.lower()) for p in self.allowed):
                return None
        return author

    def is_allowed(self, raw: str) -> bool:
        """Check whether a raw identity is accepted as-is."""
        return self._lookup(raw) is not None

    def canonicalize(self, raw: str) -> Author:
        """
        Map a raw identity to its canonical author.

        Raises:
            DisallowedAuthorError: if the identity is disallowed and the
                policy is strict
        """
        author = self._lookup(raw)
        if author is not None:
            return author
        if self.strict:
            raise DisallowedAuthorError(raw)
        return self.default_author
