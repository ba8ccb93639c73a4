"""
Origin and Reader contracts for vcsorigin.

An Origin is a factory over one version-control backend: it resolves
reference text into immutable revisions and creates Readers. A Reader is a
single-threaded session bound to a path filter and an authoring policy; it
checks revisions out and answers history queries.

Driving workflow, per run:

    reader = origin.new_reader(glob, authoring)
    target = origin.resolve("main")
    for change in reader.changes(last_migrated, target):
        reader.checkout(change.revision, workdir)
        ...  # transform and write to the destination

The destination stores target.as_string() under origin.get_label_name()
and feeds it back as 'last_migrated' on the next run.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import (
    Callable, Dict, Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar, Union,
)

from . import history
from .domain import Author, Change, Glob, Reference, Revision
from .errors import UnsupportedFilterError
from .labels import parse_labels

logger = logging.getLogger(__name__)

R = TypeVar('R', bound=Revision)


class AuthoringPolicy(Protocol):
    """Anything able to canonicalize a raw author identity."""

    def canonicalize(self, raw: str) -> Author:
        ...


class VisitResult(Enum):
    """Returned by change visitors to continue or stop a traversal."""
    CONTINUE = "continue"
    TERMINATE = "terminate"


ChangeVisitor = Callable[[Change], Optional[VisitResult]]


class Reader(ABC, Generic[R]):
    """
    Checks out revisions and enumerates history for one origin.

    Readers are owned sessions: not safe for concurrent calls on the same
    instance, and not meant to be reused across unrelated migrations.
    """

    def __init__(
        self,
        glob: Glob,
        authoring: AuthoringPolicy,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.glob = glob
        self.authoring = authoring
        self.cancel_event = cancel_event

    @abstractmethod
    def checkout(self, revision: R, workdir: Union[str, Path]) -> None:
        """
        Materialize 'revision' into 'workdir', restricted to the glob.

        On success, workdir holds exactly the matching files of the
        revision. On failure or cancellation the previous content of
        workdir is left untouched.

        Raises:
            CheckoutError / RevisionNotFoundError: if it cannot be exported
            OperationCancelledError: if cancelled
        """

    @abstractmethod
    def changes(self, from_rev: Optional[R], to_rev: R) -> List[Change[R]]:
        """
        Changes in the interval (from_rev, to_rev], oldest first.

        If from_rev is None, the full history up to to_rev, both ends
        included.

        Raises:
            InvalidIntervalError: if from_rev is not an ancestor of to_rev
            HistoryNotSupportedError: if supports_history() is False
        """

    @abstractmethod
    def change(self, revision: R) -> Change[R]:
        """
        The change for a single revision.

        Raises:
            RevisionNotFoundError: if the revision does not exist
        """

    @abstractmethod
    def visit_changes(self, start: R, visitor: ChangeVisitor) -> None:
        """
        Visit changes from 'start' backwards, newest first, until the
        visitor returns VisitResult.TERMINATE or history runs out.
        """

    def supports_history(self) -> bool:
        """Whether this reader can answer history queries."""
        return True

    def find_change(self, start: R, predicate: Callable[[Change[R]], bool]) -> Optional[Change[R]]:
        """Most recent change reachable from 'start' satisfying 'predicate'."""
        found: List[Change[R]] = []

        def visitor(change: Change[R]) -> VisitResult:
            if predicate(change):
                found.append(change)
                return VisitResult.TERMINATE
            return VisitResult.CONTINUE

        self.visit_changes(start, visitor)
        return found[0] if found else None


class Origin(ABC, Generic[R]):
    """
    A source repository from which code is migrated.

    Origins hold configuration only; per-run state lives in Readers.
    """

    @abstractmethod
    def resolve(self, reference: str) -> R:
        """
        Resolve reference text into an immutable revision.

        Interpretation order: exact revision id, then named pointer
        (branch, tag), then backend extended syntax.

        Raises:
            MalformedReferenceError: if the text is valid under none of them
            RevisionNotFoundError: if it is valid but matches nothing
        """

    def resolve_reference(self, reference: str) -> Reference[R]:
        """Resolve reference text into a fully labelled Reference."""
        revision = self.resolve(reference)
        return Reference(name=reference, revision=revision,
                         labels=self.reference_labels(reference, revision))

    def reference_labels(self, reference: str, revision: R) -> Dict[str, str]:
        """Backend metadata attached to resolved references."""
        return {}

    def new_reader(
        self,
        glob: Glob,
        authoring: AuthoringPolicy,
        cancel_event: Optional[threading.Event] = None,
    ) -> Reader[R]:
        """
        Create a Reader bound to 'glob' and 'authoring'.

        Raises:
            UnsupportedFilterError: if the backend cannot honor the glob
        """
        self.validate_glob(glob)
        return self._create_reader(glob, authoring, cancel_event)

    @abstractmethod
    def _create_reader(
        self,
        glob: Glob,
        authoring: AuthoringPolicy,
        cancel_event: Optional[threading.Event],
    ) -> Reader[R]:
        ...

    def validate_glob(self, glob: Glob) -> None:
        """Reject globs the backend cannot honor. Accepts everything by default."""

    @abstractmethod
    def get_label_name(self) -> str:
        """
        Label under which destinations persist the last migrated revision.

        This is a storage-format key: it must never change.
        """


def reject_metadata_roots(glob: Glob, metadata_dir: str) -> None:
    """Raise UnsupportedFilterError if the glob targets a VCS metadata dir."""
    for root in glob.roots():
        if root == metadata_dir or root.startswith(metadata_dir + '/'):
            raise UnsupportedFilterError(
                f"Path filter {glob} reaches into '{metadata_dir}', which cannot be checked out")


@dataclass(frozen=True)
class RawChange:
    """Backend change data before the authoring policy runs."""
    author: str
    timestamp: datetime
    message: str
    parents: Tuple
    changed_paths: Optional[Tuple[str, ...]] = None


class GraphReader(Reader[R]):
    """
    Reader for backends whose history is a parent graph.

    Subclasses provide _raw_change(); the interval, lookup and traversal
    semantics come from vcsorigin.history and are identical for all of
    them. Authors are canonicalized here, once per change.
    """

    def __init__(self, glob, authoring, cancel_event=None):
        super().__init__(glob, authoring, cancel_event)
        self._raw_cache: Dict[R, RawChange] = {}

    @abstractmethod
    def _load_raw_change(self, revision: R) -> RawChange:
        """
        Read one change from the backend.

        Raises:
            RevisionNotFoundError: if the revision does not exist
        """

    def _raw_change(self, revision: R) -> RawChange:
        raw = self._raw_cache.get(revision)
        if raw is None:
            raw = self._load_raw_change(revision)
            self._raw_cache[revision] = raw
        return raw

    def _parents(self, revision: R) -> Sequence[R]:
        return self._raw_change(revision).parents

    def _sort_key(self, revision: R):
        return self._raw_change(revision).timestamp

    def _to_change(self, revision: R) -> Change[R]:
        raw = self._raw_change(revision)
        changed = None
        if raw.changed_paths is not None:
            changed = tuple(sorted(self.glob.filter(raw.changed_paths)))
        return Change(
            revision=revision,
            author=self.authoring.canonicalize(raw.author),
            timestamp=raw.timestamp,
            message=raw.message,
            changed_paths=changed,
            labels=parse_labels(raw.message),
        )

    def changes(self, from_rev: Optional[R], to_rev: R) -> List[Change[R]]:
        revisions = history.interval(
            from_rev, to_rev, self._parents, self._sort_key, self.cancel_event)
        return [self._to_change(rev) for rev in revisions]

    def change(self, revision: R) -> Change[R]:
        return self._to_change(revision)

    def visit_changes(self, start: R, visitor: ChangeVisitor) -> None:
        walk = history.walk_newest_first(
            start, self._parents, self._sort_key, self.cancel_event)
        for revision in walk:
            if visitor(self._to_change(revision)) == VisitResult.TERMINATE:
                return
