"""
Tests for vcsorigin.history.

Exercises the generic algorithms on plain string graphs:
- ancestor closure
- interval computation, validation and merge deduplication
- oldest-first topological order
- newest-first walks
"""

import threading

import pytest

from vcsorigin.errors import InvalidIntervalError, OperationCancelledError, RepoError
from vcsorigin.history import ancestors, interval, topological_order, walk_newest_first


def graph(edges):
    """Build parents() and sort_key() from {rev: (timestamp, [parents])}."""
    def parents(rev):
        return edges[rev][1]

    def sort_key(rev):
        return edges[rev][0]

    return parents, sort_key


# A - B - C - E - F
#      \     /
#       D --
MERGE = {
    'A': (1, []),
    'B': (2, ['A']),
    'C': (3, ['B']),
    'D': (4, ['B']),
    'E': (5, ['C', 'D']),
    'F': (6, ['E']),
}

LINEAR = {
    'A': (1, []),
    'B': (2, ['A']),
    'C': (3, ['B']),
}


class TestAncestors:
    """Tests for ancestors()."""

    def test_includes_start(self):
        parents, _ = graph(LINEAR)
        assert ancestors('A', parents) == {'A'}

    def test_follows_all_parents(self):
        parents, _ = graph(MERGE)
        assert ancestors('E', parents) == {'A', 'B', 'C', 'D', 'E'}

    def test_stop_set(self):
        parents, _ = graph(MERGE)
        assert ancestors('F', parents, stop={'B'}) == {'C', 'D', 'E', 'F'}

    def test_cancelled(self):
        parents, _ = graph(MERGE)
        event = threading.Event()
        event.set()
        with pytest.raises(OperationCancelledError):
            ancestors('F', parents, cancel_event=event)


class TestInterval:
    """Tests for interval()."""

    def test_linear_scenario(self):
        parents, key = graph(LINEAR)
        assert interval('A', 'C', parents, key) == ['B', 'C']

    def test_full_history(self):
        parents, key = graph(LINEAR)
        assert interval(None, 'C', parents, key) == ['A', 'B', 'C']

    def test_full_history_equals_from_root_plus_root(self):
        parents, key = graph(MERGE)
        full = interval(None, 'F', parents, key)
        assert full[0] == 'A'
        assert full[1:] == interval('A', 'F', parents, key)

    def test_same_revision_is_empty(self):
        parents, key = graph(LINEAR)
        assert interval('C', 'C', parents, key) == []

    def test_not_ancestor_fails(self):
        parents, key = graph(MERGE)
        with pytest.raises(InvalidIntervalError):
            interval('D', 'C', parents, key)

    def test_descendant_as_from_fails(self):
        parents, key = graph(LINEAR)
        with pytest.raises(RepoError):
            interval('C', 'A', parents, key)

    def test_merge_deduplicated(self):
        parents, key = graph(MERGE)
        result = interval(None, 'F', parents, key)
        assert sorted(result) == ['A', 'B', 'C', 'D', 'E', 'F']
        assert len(result) == len(set(result))

    def test_merge_interval_excludes_from_ancestry(self):
        parents, key = graph(MERGE)
        assert interval('C', 'F', parents, key) == ['D', 'E', 'F']

    def test_ancestors_before_descendants(self):
        parents, key = graph(MERGE)
        result = interval(None, 'F', parents, key)
        position = {rev: i for i, rev in enumerate(result)}
        for rev, (_, rev_parents) in MERGE.items():
            for parent in rev_parents:
                assert position[parent] < position[rev]

    def test_topology_beats_timestamps(self):
        # Child committed "before" its parent (clock skew)
        skewed = {'A': (10, []), 'B': (1, ['A']), 'C': (5, ['B'])}
        parents, key = graph(skewed)
        assert interval(None, 'C', parents, key) == ['A', 'B', 'C']

    def test_concatenation_law(self):
        chain = {chr(ord('A') + i): (i, [chr(ord('A') + i - 1)] if i else []) for i in range(8)}
        parents, key = graph(chain)
        r0, r1, r2 = 'B', 'E', 'H'
        whole = interval(r0, r2, parents, key)
        first = interval(r0, r1, parents, key)
        second = interval(r1, r2, parents, key)
        assert whole == first + second
        assert (first + second).count(r1) == 1
        assert r1 in first


class TestTopologicalOrder:
    """Tests for topological_order()."""

    def test_ties_broken_by_key_then_name(self):
        edges = {'root': (0, []), 'x': (1, ['root']), 'y': (1, ['root']), 'z': (0, ['root'])}
        parents, key = graph(edges)
        assert topological_order(set(edges), parents, key) == ['root', 'z', 'x', 'y']

    def test_cycle_detected(self):
        edges = {'a': (0, ['b']), 'b': (0, ['a'])}
        parents, key = graph(edges)
        with pytest.raises(ValueError):
            topological_order(set(edges), parents, key)


class TestWalkNewestFirst:
    """Tests for walk_newest_first()."""

    def test_order(self):
        parents, key = graph(MERGE)
        assert list(walk_newest_first('F', parents, key)) == ['F', 'E', 'D', 'C', 'B', 'A']

    def test_each_revision_once(self):
        parents, key = graph(MERGE)
        walked = list(walk_newest_first('E', parents, key))
        assert len(walked) == len(set(walked)) == 5

    def test_lazy(self):
        calls = []
        parents, key = graph(MERGE)

        def counting_parents(rev):
            calls.append(rev)
            return parents(rev)

        walk = walk_newest_first('F', counting_parents, key)
        assert next(walk) == 'F'
        assert calls == []

    def test_independent_walks(self):
        parents, key = graph(MERGE)
        first = walk_newest_first('F', parents, key)
        second = walk_newest_first('F', parents, key)
        assert next(first) == 'F'
        assert next(first) == 'E'
        assert next(second) == 'F'

    def test_non_numeric_keys(self):
        edges = {'A': ('2024-01-01', []), 'B': ('2024-02-01', ['A'])}
        parents, key = graph(edges)
        assert list(walk_newest_first('B', parents, key)) == ['B', 'A']
