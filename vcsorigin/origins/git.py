"""
Git origin for vcsorigin.

Reads a git repository (any URL or local path git can clone) through a
bare mirror kept in the clone pool. The mirror is fetched before each
resolve, and every fetch and export holds the pool lease for that
repository location, so concurrent readers of one repository never
touch the mirror at the same time.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..domain import Glob, Revision
from ..errors import CheckoutError, MalformedReferenceError, RepoError, RevisionNotFoundError
from ..history import check_cancelled
from ..infra.clone_pool import ClonePool
from ..infra.git_client import GitClient, TreeEntry, decode_path
from ..infra.workdir import staged_checkout, write_file, write_symlink
from ..origin import GraphReader, Origin, RawChange, reject_metadata_roots

logger = logging.getLogger(__name__)

GIT_LABEL_NAME = "GitOrigin-RevId"

SHA_RE = re.compile(r'^(?:[0-9a-f]{40}|[0-9a-f]{64})$')
# Characters git accepts in revision expressions (names, ~N, ^N, @{...}, short SHAs)
EXTENDED_RE = re.compile(r'^[\w./@{}~^:+-]+$')


@dataclass(frozen=True, eq=False)
class GitRevision(Revision):
    """A git commit, identified by its full SHA."""
    sha: str
    commit_time: Optional[datetime] = None
    reference: Optional[str] = None

    def as_string(self) -> str:
        return self.sha

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.commit_time


class GitReader(GraphReader[GitRevision]):
    """Reader over a git mirror."""

    def __init__(self, origin: 'GitOrigin', glob, authoring, cancel_event=None):
        super().__init__(glob, authoring, cancel_event)
        self.origin = origin

    def _load_raw_change(self, revision: GitRevision) -> RawChange:
        # One `git log` call fills the cache for the whole ancestry.
        commits = self.origin.log(revision.sha)
        for commit in commits:
            rev = GitRevision(sha=commit.hash, commit_time=commit.date)
            if rev in self._raw_cache:
                continue
            self._raw_cache[rev] = RawChange(
                author=commit.author,
                timestamp=commit.date,
                message=commit.message,
                parents=tuple(GitRevision(sha=p) for p in commit.parents),
                changed_paths=commit.files,
            )
        raw = self._raw_cache.get(revision)
        if raw is None:
            raise RevisionNotFoundError(revision.sha)
        return raw

    def checkout(self, revision: GitRevision, workdir: Union[str, Path]) -> None:
        entries, blobs = self.origin.export(revision.sha, self.glob)
        with staged_checkout(workdir) as staging:
            for entry in entries:
                check_cancelled(self.cancel_event)
                content = blobs[entry.object]
                if entry.is_symlink:
                    write_symlink(staging, entry.path, decode_path(content))
                else:
                    write_file(staging, entry.path, content, executable=entry.is_executable)
        logger.info(f"Checked out {revision.sha[:12]} into {workdir} ({len(entries)} files)")


class GitOrigin(Origin[GitRevision]):
    """
    Origin over a git repository.

    Reference resolution order:
        1. a full SHA-1 (or SHA-256) commit id
        2. a branch, then a tag name (or a full 'refs/...' name)
        3. any other git revision expression: 'main~2', 'v1.0^2',
           'HEAD', abbreviated SHAs
    """

    def __init__(
        self,
        url: str,
        cache_dir: Union[str, Path] = "~/.cache/vcsorigin",
        git_client: Optional[GitClient] = None,
        fetch: bool = True,
    ):
        """
        Initialize GitOrigin.

        Args:
            url: Repository URL or local path
            cache_dir: Where mirrors are kept
            git_client: GitClient instance (creates new if None)
            fetch: Fetch the mirror before resolving references
        """
        self.url = url
        self.git = git_client or GitClient()
        self.pool = ClonePool(cache_dir)
        self.fetch = fetch

    def _prepare(self, mirror: Path, update: bool) -> Path:
        if not mirror.exists():
            if not self.git.is_available():
                raise RepoError(f"Cannot run git executable {self.git.executable!r}")
            mirror.parent.mkdir(parents=True, exist_ok=True)
            self.git.clone_mirror(self.url, mirror)
        elif update:
            self.git.fetch(mirror)
        return mirror

    def log(self, sha: str):
        with self.pool.lease(self.url) as mirror:
            self._prepare(mirror, update=False)
            if not self.git.commit_exists(mirror, sha):
                raise RevisionNotFoundError(sha)
            return self.git.log(mirror, sha)

    def export(self, sha: str, glob: Glob) -> Tuple[List[TreeEntry], Dict[str, bytes]]:
        """
        Blobs of a commit tree matching 'glob', with their raw content.

        Content is read straight from the object store, so export
        attributes (export-ignore, export-subst) never alter a checkout.
        """
        with self.pool.lease(self.url) as mirror:
            self._prepare(mirror, update=False)
            if not self.git.commit_exists(mirror, sha):
                raise RevisionNotFoundError(sha)
            try:
                entries = [e for e in self.git.ls_tree(mirror, sha) if glob.matches(e.path)]
                blobs = self.git.read_blobs(mirror, (e.object for e in entries))
            except RepoError as e:
                raise CheckoutError(f"Cannot export {sha}: {e}") from e
        return entries, blobs

    def resolve(self, reference: str) -> GitRevision:
        text = (reference or '').strip()
        name_ok = self.git.check_ref_format(text)
        extended_ok = bool(text) and not text.startswith('-') and bool(EXTENDED_RE.match(text))
        if not SHA_RE.match(text) and not name_ok and not extended_ok:
            raise MalformedReferenceError(reference)

        with self.pool.lease(self.url) as mirror:
            self._prepare(mirror, update=self.fetch)

            if SHA_RE.match(text):
                logger.debug(f"Resolving {text} as commit id")
                if self.git.commit_exists(mirror, text):
                    return GitRevision(sha=text, reference=reference)
                raise RevisionNotFoundError(text)

            if name_ok:
                candidates = [text] if text.startswith('refs/') else [f'refs/heads/{text}', f'refs/tags/{text}']
                for candidate in candidates:
                    sha = self.git.rev_parse(mirror, candidate)
                    if sha:
                        logger.debug(f"Resolved {candidate} to {sha}")
                        return GitRevision(sha=sha, reference=reference)

            if extended_ok:
                sha = self.git.rev_parse(mirror, text)
                if sha:
                    logger.debug(f"Resolved expression {text} to {sha}")
                    return GitRevision(sha=sha, reference=reference)

        raise RevisionNotFoundError(text, f"not found in {self.url}")

    def reference_labels(self, reference: str, revision: GitRevision) -> Dict[str, str]:
        return {'Git-Url': self.url, 'Git-Ref': reference}

    def validate_glob(self, glob: Glob) -> None:
        reject_metadata_roots(glob, '.git')

    def _create_reader(self, glob, authoring, cancel_event) -> GitReader:
        return GitReader(self, glob, authoring, cancel_event)

    def get_label_name(self) -> str:
        return GIT_LABEL_NAME
