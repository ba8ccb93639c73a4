"""Tests for message label parsing."""

import pytest

from vcsorigin.labels import (
    find_label,
    format_label,
    iter_labels,
    last_label_value,
    parse_labels,
)

MESSAGE = """Fix the parser

Handles empty input.

Bug: 123
Reviewed-by= alice
See https://example.com/issue
GitOrigin-RevId: abc123
"""


class TestParse:

    def test_parse_labels(self):
        assert parse_labels(MESSAGE) == {
            "Bug": "123",
            "Reviewed-by": "alice",
            "GitOrigin-RevId": "abc123",
        }

    def test_urls_are_not_labels(self):
        assert "https" not in parse_labels("https://example.com")

    def test_last_occurrence_wins(self):
        assert parse_labels("Bug: 1\nBug: 2") == {"Bug": "2"}
        assert find_label("Bug: 1\nBug: 2", "Bug") == "2"

    def test_order(self):
        assert [n for n, _ in iter_labels(MESSAGE)] == ["Bug", "Reviewed-by", "GitOrigin-RevId"]

    def test_empty(self):
        assert parse_labels("") == {}
        assert parse_labels(None) == {}
        assert find_label("no labels here", "Bug") is None


class TestFormat:

    def test_format(self):
        assert format_label("GitOrigin-RevId", "abc") == "GitOrigin-RevId: abc"
        assert find_label(format_label("Bug", "7"), "Bug") == "7"

    @pytest.mark.parametrize("name", ["", "1abc", "with space"])
    def test_invalid_name(self, name):
        with pytest.raises(ValueError):
            format_label(name, "x")


class TestLastLabelValue:

    def test_newest_first(self):
        messages = ["Unrelated", "Import\n\nGitOrigin-RevId: new", "GitOrigin-RevId: old"]
        assert last_label_value(messages, "GitOrigin-RevId") == "new"

    def test_missing(self):
        assert last_label_value(["a", "b"], "GitOrigin-RevId") is None
