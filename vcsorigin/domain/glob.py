"""
Path filter (glob) domain object for vcsorigin.

A Glob is an include/exclude pattern set over repository-relative paths.
A path matches iff it matches at least one include pattern and no exclude
pattern.

Pattern syntax:
    *    any run of characters within one path segment
    ?    one character other than '/'
    **   as a whole segment, any number of segments (including none)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Pattern, Tuple

from ..errors import InvalidGlobError

_WILDCARDS = frozenset('*?')


def _validate(pattern: str) -> None:
    if not pattern:
        raise InvalidGlobError("Empty glob pattern")
    if pattern.startswith('/'):
        raise InvalidGlobError(f"Glob pattern must be relative: {pattern!r}")
    for segment in pattern.split('/'):
        if segment in ('', '.', '..'):
            raise InvalidGlobError(f"Glob pattern is not normalized: {pattern!r}")
        if '**' in segment and segment != '**':
            raise InvalidGlobError(f"'**' must be a whole path segment: {pattern!r}")


def _segment_regex(segment: str) -> str:
    out = []
    for char in segment:
        if char == '*':
            out.append('[^/]*')
        elif char == '?':
            out.append('[^/]')
        else:
            out.append(re.escape(char))
    return ''.join(out)


def compile_pattern(pattern: str) -> Pattern:
    """Compile one glob pattern to an anchored regular expression."""
    _validate(pattern)
    parts = pattern.split('/')
    regex = ''
    for i, part in enumerate(parts):
        last = i == len(parts) - 1
        if part == '**':
            regex += '.*' if last else '(?:[^/]+/)*'
        else:
            regex += _segment_regex(part) + ('' if last else '/')
    return re.compile(regex + r'\Z')


@dataclass(frozen=True)
class Glob:
    """
    Immutable include/exclude path filter.

    Example:
        glob = Glob(include=("src/**", "README.md"), exclude=("src/**/*_test.py",))
        glob.matches("src/app/main.py")       # True
        glob.matches("src/app/main_test.py")  # False
    """

    include: Tuple[str, ...] = ('**',)
    exclude: Tuple[str, ...] = ()
    _compiled: Tuple[Tuple[Pattern, ...], Tuple[Pattern, ...]] = field(
        init=False, repr=False, compare=False, default=((), ()))

    def __post_init__(self):
        include = tuple(self.include)
        exclude = tuple(self.exclude)
        object.__setattr__(self, 'include', include)
        object.__setattr__(self, 'exclude', exclude)
        object.__setattr__(self, '_compiled', (
            tuple(compile_pattern(p) for p in include),
            tuple(compile_pattern(p) for p in exclude),
        ))

    @classmethod
    def all_files(cls) -> 'Glob':
        """Glob matching every path."""
        return cls(include=('**',))

    @classmethod
    def from_patterns(cls, include: Iterable[str] = (), exclude: Iterable[str] = ()) -> 'Glob':
        """Build a Glob, defaulting to all files when no include is given."""
        include = tuple(include) or ('**',)
        return cls(include=include, exclude=tuple(exclude))

    def matches(self, path: str) -> bool:
        """Check whether a repository-relative POSIX path passes the filter."""
        includes, excludes = self._compiled
        if not any(p.match(path) for p in includes):
            return False
        return not any(p.match(path) for p in excludes)

    def filter(self, paths: Iterable[str]) -> Tuple[str, ...]:
        """Return the matching paths, in input order."""
        return tuple(p for p in paths if self.matches(p))

    def roots(self) -> FrozenSet[str]:
        """
        Literal directory prefixes of the include patterns.

        "src/main/**/*.java" has root "src/main"; "**" and "*.md" have
        root "" (the repository root).
        """
        roots = set()
        for pattern in self.include:
            literal = []
            for segment in pattern.split('/')[:-1]:
                if _WILDCARDS & set(segment):
                    break
                literal.append(segment)
            roots.add('/'.join(literal))
        return frozenset(roots)

    def to_dict(self) -> Dict[str, Any]:
        return {'include': list(self.include), 'exclude': list(self.exclude)}

    def __str__(self) -> str:
        text = f"glob({list(self.include)!r}"
        if self.exclude:
            text += f", exclude={list(self.exclude)!r}"
        return text + ")"
