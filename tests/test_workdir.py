"""Tests for staged checkouts and working directory helpers."""

import os

import pytest

from vcsorigin.errors import CheckoutError
from vcsorigin.infra.workdir import (
    list_files,
    safe_target,
    staged_checkout,
    write_file,
    write_symlink,
)


class TestSafeTarget:

    def test_nested(self, tmp_path):
        assert safe_target(tmp_path, "a/b/c.txt") == tmp_path / "a" / "b" / "c.txt"

    @pytest.mark.parametrize("path", ["/etc/passwd", "../escape", "a/../../b", ""])
    def test_unsafe(self, tmp_path, path):
        with pytest.raises(CheckoutError):
            safe_target(tmp_path, path)


class TestWriteFile:

    def test_modes(self, tmp_path):
        plain = write_file(tmp_path, "src/a.txt", b"a")
        script = write_file(tmp_path, "bin/run", b"#!/bin/sh\n", executable=True)
        assert plain.read_bytes() == b"a"
        assert not os.access(plain, os.X_OK)
        assert os.access(script, os.X_OK)

    def test_symlink_listed(self, tmp_path):
        write_file(tmp_path, "target.txt", b"x")
        write_symlink(tmp_path, "link.txt", "target.txt")
        assert list_files(tmp_path) == ["link.txt", "target.txt"]
        assert os.readlink(tmp_path / "link.txt") == "target.txt"


class TestStagedCheckout:

    def test_creates_workdir(self, tmp_path):
        workdir = tmp_path / "work"
        with staged_checkout(workdir) as staging:
            write_file(staging, "a.txt", b"a")
        assert list_files(workdir) == ["a.txt"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["work"]

    def test_replaces_content(self, tmp_path):
        workdir = tmp_path / "work"
        workdir.mkdir()
        (workdir / "stale.txt").write_text("old")
        with staged_checkout(workdir) as staging:
            write_file(staging, "new.txt", b"new")
        assert list_files(workdir) == ["new.txt"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["work"]

    def test_rollback_on_error(self, tmp_path):
        workdir = tmp_path / "work"
        workdir.mkdir()
        (workdir / "keep.txt").write_text("keep")
        with pytest.raises(RuntimeError):
            with staged_checkout(workdir) as staging:
                write_file(staging, "half.txt", b"half")
                raise RuntimeError("boom")
        assert list_files(workdir) == ["keep.txt"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["work"]

    def test_rollback_on_interrupt(self, tmp_path):
        workdir = tmp_path / "work"
        with pytest.raises(KeyboardInterrupt):
            with staged_checkout(workdir):
                raise KeyboardInterrupt
        assert not workdir.exists()

    def test_target_is_a_file(self, tmp_path):
        target = tmp_path / "work"
        target.write_text("not a dir")
        with pytest.raises(CheckoutError):
            with staged_checkout(target) as staging:
                write_file(staging, "a.txt", b"a")
        assert target.read_text() == "not a dir"

    def test_workdir_permissions(self, tmp_path):
        workdir = tmp_path / "work"
        with staged_checkout(workdir):
            pass
        assert workdir.stat().st_mode & 0o777 == 0o755
