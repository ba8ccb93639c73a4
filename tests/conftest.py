"""Shared fixtures for vcsorigin tests."""

import pytest

from vcsorigin.domain import Author, Authoring, AuthoringMode, Glob
from vcsorigin.origins import MemoryOrigin, MemoryRepository

JANE = "Jane Doe <jane@example.com>"
BOB = "Bob <bob@example.com>"
EVE = "Eve <eve@evil.test>"
BOT = Author("Bot", "bot@example.com")


@pytest.fixture
def authoring():
    """Permissive pass-through authoring policy."""
    return Authoring(default_author=BOT)


@pytest.fixture
def strict_authoring():
    """Strict policy allowing only example.com authors."""
    return Authoring(
        default_author=BOT,
        mode=AuthoringMode.ALLOWED,
        allowed=frozenset({"*@example.com"}),
        strict=True,
    )


@pytest.fixture
def linear_repo():
    """Repository with linear history A -> B -> C on 'main'."""
    repo = MemoryRepository(name="linear")
    ids = {}
    ids['A'] = repo.commit("main", {"README.md": "hello\n"}, "Initial commit", JANE)
    ids['B'] = repo.commit("main", {"src/app.py": "print(1)\n"}, "Add app\n\nBug: 12", BOB)
    ids['C'] = repo.commit("main", {"src/app.py": "print(2)\n", "README.md": None}, "Update app", JANE)
    repo.tag("v1.0", ids['B'])
    return repo, ids


@pytest.fixture
def merge_repo():
    """
    Repository with a merge:

        A - B - C - M
             \\    /
              D --
    """
    repo = MemoryRepository(name="merge")
    ids = {}
    ids['A'] = repo.commit("main", {"README.md": "hello\n"}, "A", JANE)
    ids['B'] = repo.commit("main", {"a.txt": "a\n"}, "B", JANE)
    repo.create_branch("feature", ids['B'])
    ids['C'] = repo.commit("main", {"c.txt": "c\n"}, "C", BOB)
    ids['D'] = repo.commit("feature", {"d.txt": "d\n"}, "D", BOB)
    ids['M'] = repo.merge("main", "feature", "Merge feature", JANE)
    return repo, ids


@pytest.fixture
def linear_origin(linear_repo):
    repo, ids = linear_repo
    return MemoryOrigin(repo), ids


@pytest.fixture
def all_files():
    return Glob.all_files()
