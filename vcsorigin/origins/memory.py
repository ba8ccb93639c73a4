"""
In-memory origin for vcsorigin.

MemoryRepository is a small content-addressed commit graph (branches,
tags, merges) held in memory. MemoryOrigin exposes it through the Origin
contract and is the reference backend for the generic history semantics:
it shares every interval and traversal rule with the git backend.

Example:
    repo = MemoryRepository()
    a = repo.commit("main", {"README.md": "hello"}, "Initial", "Jane <jane@example.com>")
    b = repo.commit("main", {"src/app.py": "print(1)"}, "Add app", "Jane <jane@example.com>")
    origin = MemoryOrigin(repo)
    reader = origin.new_reader(Glob.all_files(), authoring)
    reader.changes(origin.resolve(a), origin.resolve("main"))  # [change b]
"""

import hashlib
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..domain import Revision
from ..errors import MalformedReferenceError, RevisionNotFoundError
from ..history import check_cancelled
from ..infra.workdir import staged_checkout, write_file
from ..origin import GraphReader, Origin, RawChange

logger = logging.getLogger(__name__)

MEMORY_LABEL_NAME = "MemoryOrigin-RevId"

_EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)

ID_RE = re.compile(r'^[0-9a-f]{40}$')
NAME_RE = re.compile(r'^(?!.*\.\.)[A-Za-z0-9_][\w./-]*(?<![./])$')
EXTENDED_RE = re.compile(r'^(?P<base>[\w./-]+?)(?P<ops>(?:[~^]\d*)+)$|^(?P<short>[0-9a-f]{4,39})$')
_OP_RE = re.compile(r'([~^])(\d*)')

FileContent = Union[str, bytes, None]


@dataclass(frozen=True)
class MemoryCommit:
    """One immutable commit of a MemoryRepository."""
    id: str
    parents: Tuple[str, ...]
    author: str
    timestamp: datetime
    message: str
    tree: Mapping[str, bytes] = field(default_factory=dict)


class MemoryRepository:
    """
    Mutable in-memory commit graph.

    Commits are immutable once created; branches and tags are mutable
    pointers to them, like in git.
    """

    def __init__(self, name: str = "memory"):
        self.name = name
        self.commits: Dict[str, MemoryCommit] = {}
        self.branches: Dict[str, str] = {}
        self.tags: Dict[str, str] = {}
        self._clock = 0

    def _next_timestamp(self) -> datetime:
        self._clock += 1
        return _EPOCH + timedelta(minutes=self._clock)

    @staticmethod
    def _encode(content: FileContent) -> Optional[bytes]:
        if content is None or isinstance(content, bytes):
            return content
        return content.encode('utf-8')

    def add_commit(
        self,
        parents: Sequence[str],
        tree: Mapping[str, bytes],
        message: str,
        author: str,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Store a commit with an explicit full tree and return its id."""
        for parent in parents:
            if parent not in self.commits:
                raise KeyError(f"Unknown parent commit {parent}")
        timestamp = timestamp or self._next_timestamp()
        digest = hashlib.sha1()
        for part in (' '.join(parents), author, timestamp.isoformat(), message):
            digest.update(part.encode('utf-8') + b'\0')
        for path in sorted(tree):
            digest.update(path.encode('utf-8') + b'\0' + hashlib.sha1(tree[path]).digest())
        commit_id = digest.hexdigest()
        self.commits[commit_id] = MemoryCommit(
            id=commit_id,
            parents=tuple(parents),
            author=author,
            timestamp=timestamp,
            message=message,
            tree=MappingProxyType(dict(tree)),
        )
        return commit_id

    def commit(
        self,
        branch: str,
        files: Mapping[str, FileContent],
        message: str,
        author: str,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """
        Commit file edits on top of a branch and advance it.

        Args:
            branch: Branch to commit on (created if missing)
            files: path -> new content, or None to delete the path
            message: Commit message
            author: Raw author identity ("Name <email>")

        Returns:
            The new commit id
        """
        head = self.branches.get(branch)
        tree = dict(self.commits[head].tree) if head else {}
        self._apply(tree, files)
        commit_id = self.add_commit([head] if head else [], tree, message, author, timestamp)
        self.branches[branch] = commit_id
        return commit_id

    def merge(
        self,
        branch: str,
        other: str,
        message: str,
        author: str,
        files: Optional[Mapping[str, FileContent]] = None,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """
        Merge branch 'other' into 'branch'.

        The merged tree is the union of both trees; on conflicts 'branch'
        wins unless 'files' says otherwise.
        """
        head = self.branches[branch]
        other_head = self.branches.get(other, other)
        tree = dict(self.commits[other_head].tree)
        tree.update(self.commits[head].tree)
        self._apply(tree, files or {})
        commit_id = self.add_commit([head, other_head], tree, message, author, timestamp)
        self.branches[branch] = commit_id
        return commit_id

    def _apply(self, tree: Dict[str, bytes], files: Mapping[str, FileContent]) -> None:
        for path, content in files.items():
            data = self._encode(content)
            if data is None:
                tree.pop(path, None)
            else:
                tree[path] = data

    def create_branch(self, name: str, at: str) -> None:
        self.branches[name] = self._commit_id(at)

    def tag(self, name: str, at: str) -> None:
        self.tags[name] = self._commit_id(at)

    def _commit_id(self, ref: str) -> str:
        if ref in self.commits:
            return ref
        if ref in self.branches:
            return self.branches[ref]
        raise KeyError(f"Unknown commit or branch {ref}")


@dataclass(frozen=True, eq=False)
class MemoryRevision(Revision):
    """Revision of a MemoryRepository: the commit id."""
    id: str
    commit_time: Optional[datetime] = None

    def as_string(self) -> str:
        return self.id

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.commit_time


def changed_paths(commit: MemoryCommit, parent: Optional[MemoryCommit]) -> Tuple[str, ...]:
    """Paths added, modified or deleted relative to the parent."""
    before = parent.tree if parent else {}
    after = commit.tree
    paths = {p for p in after if before.get(p) != after[p]}
    paths.update(p for p in before if p not in after)
    return tuple(sorted(paths))


class MemoryReader(GraphReader[MemoryRevision]):
    """Reader over a MemoryRepository."""

    def __init__(self, origin: 'MemoryOrigin', glob, authoring, cancel_event=None):
        super().__init__(glob, authoring, cancel_event)
        self.origin = origin

    def _load_raw_change(self, revision: MemoryRevision) -> RawChange:
        commit = self.origin.commit_for(revision)
        first_parent = self.origin.repository.commits[commit.parents[0]] if commit.parents else None
        return RawChange(
            author=commit.author,
            timestamp=commit.timestamp,
            message=commit.message,
            parents=tuple(self.origin.revision(p) for p in commit.parents),
            changed_paths=changed_paths(commit, first_parent),
        )

    def checkout(self, revision: MemoryRevision, workdir) -> None:
        commit = self.origin.commit_for(revision)
        with staged_checkout(workdir) as staging:
            count = 0
            for path in sorted(commit.tree):
                check_cancelled(self.cancel_event)
                if self.glob.matches(path):
                    write_file(staging, path, commit.tree[path])
                    count += 1
        logger.info(f"Checked out {revision.id[:12]} into {workdir} ({count} files)")


class MemoryOrigin(Origin[MemoryRevision]):
    """
    Origin over a MemoryRepository.

    Reference resolution order:
        1. a full 40-character commit id
        2. a branch, then a tag name
        3. extended syntax: 'name~N' (N-th first-parent ancestor),
           'name^N' (N-th parent) and unique id prefixes
    """

    def __init__(self, repository: MemoryRepository):
        self.repository = repository

    def revision(self, commit_id: str) -> MemoryRevision:
        commit = self.repository.commits.get(commit_id)
        if commit is None:
            raise RevisionNotFoundError(commit_id)
        return MemoryRevision(id=commit_id, commit_time=commit.timestamp)

    def commit_for(self, revision: MemoryRevision) -> MemoryCommit:
        commit = self.repository.commits.get(revision.as_string())
        if commit is None:
            raise RevisionNotFoundError(revision.as_string())
        return commit

    def _by_name(self, name: str) -> Optional[str]:
        if name in self.repository.branches:
            return self.repository.branches[name]
        return self.repository.tags.get(name)

    def _by_prefix(self, prefix: str) -> Optional[str]:
        matches = [c for c in self.repository.commits if c.startswith(prefix)]
        if len(matches) > 1:
            raise RevisionNotFoundError(prefix, "ambiguous commit id prefix")
        return matches[0] if matches else None

    def _walk_ops(self, commit_id: str, ops: str, reference: str) -> str:
        for op, count in _OP_RE.findall(ops):
            n = int(count) if count else 1
            commit = self.repository.commits[commit_id]
            if op == '~':
                for _ in range(n):
                    if not commit.parents:
                        raise RevisionNotFoundError(reference, "history is too short")
                    commit_id = commit.parents[0]
                    commit = self.repository.commits[commit_id]
            elif n == 0:
                continue
            else:
                if n > len(commit.parents):
                    raise RevisionNotFoundError(reference, f"commit has no parent #{n}")
                commit_id = commit.parents[n - 1]
        return commit_id

    def resolve(self, reference: str) -> MemoryRevision:
        text = (reference or '').strip()

        if ID_RE.match(text):
            logger.debug(f"Resolving {text} as commit id")
            return self.revision(text)

        name_ok = bool(NAME_RE.match(text))
        if name_ok:
            commit_id = self._by_name(text)
            if commit_id:
                logger.debug(f"Resolved name {text} to {commit_id}")
                return self.revision(commit_id)

        extended = EXTENDED_RE.match(text)
        if extended:
            if extended.group('short'):
                commit_id = self._by_prefix(extended.group('short'))
                if commit_id:
                    return self.revision(commit_id)
            else:
                base = extended.group('base')
                base_id = self._by_name(base) or (base if base in self.repository.commits else None)
                if base_id:
                    return self.revision(self._walk_ops(base_id, extended.group('ops'), text))
        elif not name_ok:
            raise MalformedReferenceError(reference)

        raise RevisionNotFoundError(text)

    def reference_labels(self, reference: str, revision: MemoryRevision):
        return {'Memory-Repository': self.repository.name}

    def _create_reader(self, glob, authoring, cancel_event) -> MemoryReader:
        return MemoryReader(self, glob, authoring, cancel_event)

    def get_label_name(self) -> str:
        return MEMORY_LABEL_NAME
