"""
Folder origin for vcsorigin.

Treats a plain directory as a one-revision repository: resolving a path
yields a snapshot revision, checkout copies the matching files, and there
is no history (supports_history() is False and changes() raises
HistoryNotSupportedError).
"""

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from ..domain import Change, Revision
from ..errors import (
    CheckoutError,
    HistoryNotSupportedError,
    MalformedReferenceError,
    RevisionNotFoundError,
)
from ..history import check_cancelled
from ..infra.workdir import safe_target, staged_checkout
from ..labels import parse_labels
from ..origin import ChangeVisitor, Origin, Reader, reject_metadata_roots

logger = logging.getLogger(__name__)

FOLDER_LABEL_NAME = "FolderOrigin-RevId"

DEFAULT_AUTHOR = "Folder Origin <noreply@vcsorigin.invalid>"
DEFAULT_MESSAGE = "Import of folder snapshot"


@dataclass(frozen=True, eq=False)
class FolderRevision(Revision):
    """Snapshot of a directory, identified by its absolute path."""
    path: str
    snapshot_time: Optional[datetime] = None

    def as_string(self) -> str:
        return self.path

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.snapshot_time


class FolderReader(Reader[FolderRevision]):
    """Reader over a directory snapshot."""

    def __init__(self, origin: 'FolderOrigin', glob, authoring, cancel_event=None):
        super().__init__(glob, authoring, cancel_event)
        self.origin = origin

    def supports_history(self) -> bool:
        return False

    def checkout(self, revision: FolderRevision, workdir: Union[str, Path]) -> None:
        source = Path(revision.path)
        if not source.is_dir():
            raise RevisionNotFoundError(revision.path, "folder no longer exists")
        target = Path(workdir).expanduser().absolute()
        if target == source or source in target.parents:
            raise CheckoutError(f"Cannot check out {source} into itself ({target})")

        with staged_checkout(target) as staging:
            count = 0
            for dirpath, dirnames, filenames in os.walk(source):
                dirnames.sort()
                base = Path(dirpath)
                entries = sorted(filenames) + [d for d in dirnames if (base / d).is_symlink()]
                for name in entries:
                    check_cancelled(self.cancel_event)
                    entry = base / name
                    rel = entry.relative_to(source).as_posix()
                    if not self.glob.matches(rel):
                        continue
                    dest = safe_target(staging, rel)
                    dest.parent.mkdir(parents=True, exist_ok=True)
                    try:
                        shutil.copy2(entry, dest, follow_symlinks=False)
                    except OSError as e:
                        raise CheckoutError(f"Cannot copy {entry}: {e}") from e
                    count += 1
        logger.info(f"Checked out folder {source} into {target} ({count} files)")

    def changes(self, from_rev: Optional[FolderRevision], to_rev: FolderRevision) -> List[Change]:
        raise HistoryNotSupportedError("Folder origin does not support history")

    def change(self, revision: FolderRevision) -> Change[FolderRevision]:
        if not Path(revision.path).is_dir():
            raise RevisionNotFoundError(revision.path)
        return Change(
            revision=revision,
            author=self.authoring.canonicalize(self.origin.author),
            timestamp=revision.timestamp or datetime.now(timezone.utc),
            message=self.origin.message,
            changed_paths=None,
            labels=parse_labels(self.origin.message),
        )

    def visit_changes(self, start: FolderRevision, visitor: ChangeVisitor) -> None:
        visitor(self.change(start))


class FolderOrigin(Origin[FolderRevision]):
    """
    Origin over a local directory.

    Reference text is a directory path, absolute or relative to base_dir
    (default: the current directory).
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        author: str = DEFAULT_AUTHOR,
        message: str = DEFAULT_MESSAGE,
    ):
        self.base_dir = Path(base_dir).expanduser() if base_dir else None
        self.author = author
        self.message = message

    def resolve(self, reference: str) -> FolderRevision:
        text = (reference or '').strip()
        if not text or '\0' in text:
            raise MalformedReferenceError(reference, "expected a directory path")

        path = Path(text).expanduser()
        if not path.is_absolute():
            path = (self.base_dir or Path.cwd()) / path
        path = path.resolve()
        if not path.is_dir():
            raise RevisionNotFoundError(text, f"{path} is not a directory")

        logger.debug(f"Resolved folder {text} to {path}")
        return FolderRevision(path=str(path), snapshot_time=datetime.now(timezone.utc))

    def reference_labels(self, reference: str, revision: FolderRevision):
        return {'Folder-Path': revision.path}

    def validate_glob(self, glob) -> None:
        reject_metadata_roots(glob, '.git')

    def _create_reader(self, glob, authoring, cancel_event) -> FolderReader:
        return FolderReader(self, glob, authoring, cancel_event)

    def get_label_name(self) -> str:
        return FOLDER_LABEL_NAME
