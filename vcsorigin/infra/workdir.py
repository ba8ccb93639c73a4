"""
Working directory helpers for vcsorigin checkouts.

Checkouts are staged: files are written into a sibling staging directory,
and only a complete staging directory is swapped into place. If the
checkout fails or is cancelled, the staging directory is removed and the
previous workdir content is left untouched.
"""

import logging
import os
import shutil
import stat
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Union

from ..errors import CheckoutError

logger = logging.getLogger(__name__)


def safe_target(root: Path, rel_path: str) -> Path:
    """Map a repository-relative path under root, refusing escapes."""
    pure = PurePosixPath(rel_path)
    if not pure.parts or pure.is_absolute() or any(part in ('', '.', '..') for part in pure.parts):
        raise CheckoutError(f"Refusing to write unsafe path {rel_path!r}")
    return root.joinpath(*pure.parts)


def write_file(root: Path, rel_path: str, data: bytes, executable: bool = False) -> Path:
    """Write one file below root, creating parent directories."""
    target = safe_target(root, rel_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    mode = 0o755 if executable else 0o644
    os.chmod(target, mode)
    return target


def write_symlink(root: Path, rel_path: str, link_target: str) -> Path:
    """Create one symbolic link below root."""
    target = safe_target(root, rel_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(link_target, target)
    return target


def list_files(root: Union[str, Path]) -> List[str]:
    """Sorted POSIX paths of every file and symlink below root."""
    root = Path(root)
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        for name in filenames:
            found.append((base / name).relative_to(root).as_posix())
        for name in dirnames:
            if (base / name).is_symlink():
                found.append((base / name).relative_to(root).as_posix())
    return sorted(found)


def _swap_into_place(staging: Path, workdir: Path) -> None:
    if workdir.is_symlink() or (workdir.exists() and not workdir.is_dir()):
        raise CheckoutError(f"Checkout target {workdir} exists and is not a directory")

    if not workdir.exists():
        os.rename(staging, workdir)
        return

    old = workdir.with_name(f".{workdir.name}.{uuid.uuid4().hex}.old")
    os.rename(workdir, old)
    try:
        os.rename(staging, workdir)
    except OSError:
        os.rename(old, workdir)
        raise
    shutil.rmtree(old, ignore_errors=True)


@contextmanager
def staged_checkout(workdir: Union[str, Path]) -> Iterator[Path]:
    """
    Yield a staging directory that replaces workdir on clean exit.

    Example:
        with staged_checkout("/tmp/work") as staging:
            write_file(staging, "README.md", b"hello")
        # /tmp/work now contains exactly README.md
    """
    workdir = Path(workdir).expanduser().absolute()
    try:
        workdir.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(
            dir=workdir.parent,
            prefix=f".{workdir.name}.",
            suffix=".staging"
        ))
    except OSError as e:
        raise CheckoutError(f"Cannot prepare checkout of {workdir}: {e}") from e

    try:
        yield staging
        # mkdtemp creates 0700 directories
        os.chmod(staging, stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH)
        _swap_into_place(staging, workdir)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        logger.debug(f"Checkout into {workdir} rolled back")
        raise
