"""
Backend-agnostic history algorithms for vcsorigin.

These functions only need two callables from a backend:

    parents(rev)  -> sequence of parent revisions (empty for roots)
    sort_key(rev) -> value used to break ties between unrelated revisions
                     (usually the change timestamp)

and implement the interval semantics shared by every graph backend:

- interval(None, to) is the full ancestry of 'to', oldest first.
- interval(from, to) is (from, to]: every ancestor of 'to' that is not an
  ancestor of 'from'. 'from' must itself be an ancestor of 'to'.
- A revision reachable through several merge paths appears once.
- An ancestor never appears after one of its descendants.
"""

import heapq
import itertools
import logging
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Set, TypeVar

from .errors import InvalidIntervalError, OperationCancelledError

logger = logging.getLogger(__name__)

R = TypeVar('R')

ParentsFn = Callable[[R], Sequence[R]]
SortKeyFn = Callable[[R], Any]


def check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    """Raise OperationCancelledError if the event has been set."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError("Operation cancelled")


def ancestors(
    start: R,
    parents: ParentsFn,
    stop: Optional[Set[R]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Set[R]:
    """
    Collect 'start' and every revision reachable from it through parents.

    Args:
        start: Revision to start from (included)
        parents: Parent lookup
        stop: Revisions at which traversal does not descend further
            (they are not included)
        cancel_event: Optional cancellation signal

    Returns:
        Set of reachable revisions
    """
    stop = stop or set()
    seen: Set[R] = set()
    if start in stop:
        return seen
    stack = [start]
    while stack:
        check_cancelled(cancel_event)
        rev = stack.pop()
        if rev in seen:
            continue
        seen.add(rev)
        for parent in parents(rev):
            if parent not in seen and parent not in stop:
                stack.append(parent)
    return seen


def topological_order(
    revisions: Set[R],
    parents: ParentsFn,
    sort_key: SortKeyFn,
) -> List[R]:
    """
    Order revisions so that every parent comes before its children.

    Among revisions whose parents (within the set) are all emitted, the
    one with the smallest (sort_key, canonical string) goes first, which
    makes the order deterministic.
    """
    children: Dict[R, List[R]] = {rev: [] for rev in revisions}
    pending: Dict[R, int] = {}
    for rev in revisions:
        in_set = [p for p in dict.fromkeys(parents(rev)) if p in revisions]
        pending[rev] = len(in_set)
        for parent in in_set:
            children[parent].append(rev)

    counter = itertools.count()
    ready = [(sort_key(rev), str(rev), next(counter), rev)
             for rev, count in pending.items() if count == 0]
    heapq.heapify(ready)

    ordered: List[R] = []
    while ready:
        *_, rev = heapq.heappop(ready)
        ordered.append(rev)
        for child in children[rev]:
            pending[child] -= 1
            if pending[child] == 0:
                heapq.heappush(ready, (sort_key(child), str(child), next(counter), child))

    if len(ordered) != len(revisions):
        raise ValueError("History graph contains a cycle")
    return ordered


def interval(
    from_rev: Optional[R],
    to_rev: R,
    parents: ParentsFn,
    sort_key: SortKeyFn,
    cancel_event: Optional[threading.Event] = None,
) -> List[R]:
    """
    Revisions in the interval (from_rev, to_rev], oldest first.

    With from_rev None the interval is the whole ancestry of to_rev,
    roots included.

    Raises:
        InvalidIntervalError: if from_rev is not an ancestor of to_rev
    """
    reachable = ancestors(to_rev, parents, cancel_event=cancel_event)
    if from_rev is None:
        logger.debug(f"Full history of {to_rev}: {len(reachable)} revisions")
        return topological_order(reachable, parents, sort_key)

    if from_rev not in reachable:
        raise InvalidIntervalError(str(from_rev), str(to_rev))

    excluded = ancestors(from_rev, parents, cancel_event=cancel_event)
    selected = reachable - excluded
    logger.debug(f"Interval ({from_rev}, {to_rev}]: {len(selected)} revisions")
    return topological_order(selected, parents, sort_key)


def walk_newest_first(
    start: R,
    parents: ParentsFn,
    sort_key: SortKeyFn,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[R]:
    """
    Yield 'start' and its ancestors, newest first.

    Revisions come out in descending sort_key order, and never before the
    descendant through which they were first reached. Each revision is
    yielded once.
    The generator holds no state beyond its own frontier, so independent
    walks never interfere.
    """
    counter = itertools.count()
    frontier = [(_negate(sort_key(start)), next(counter), start)]
    queued = {start}
    while frontier:
        check_cancelled(cancel_event)
        _, _, rev = heapq.heappop(frontier)
        yield rev
        for parent in parents(rev):
            if parent not in queued:
                queued.add(parent)
                heapq.heappush(frontier, (_negate(sort_key(parent)), next(counter), parent))


class _Reversed:
    """Inverts the ordering of any comparable value."""

    __slots__ = ('value',)

    def __init__(self, value):
        self.value = value

    def __lt__(self, other: '_Reversed') -> bool:
        return other.value < self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Reversed) and other.value == self.value


def _negate(key: Any) -> Any:
    if isinstance(key, (int, float)):
        return -key
    return _Reversed(key)
