"""
Git client infrastructure for vcsorigin.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from origin logic

History and tree output is read as bytes. Paths are decoded with
surrogateescape (os.fsdecode semantics) so non-UTF-8 names survive a
round trip to the filesystem; messages and authors use 'replace'.
"""

import subprocess
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, List, Sequence, Tuple, Union
from pathlib import Path
from datetime import datetime, timezone
import logging

from ..errors import OperationCancelledError, RepoError

logger = logging.getLogger(__name__)

# Record and field separators for `git log` output
_RS = b'\x1e'
_FS = b'\x1f'
_LOG_FORMAT = '%x1e%H%x1f%P%x1f%an <%ae>%x1f%aI%x1f%B%x1f'

MODE_EXECUTABLE = '100755'
MODE_SYMLINK = '120000'


def decode_path(raw: bytes) -> str:
    """Decode a path from git output, keeping undecodable bytes."""
    return raw.decode('utf-8', 'surrogateescape')


def _decode_text(raw: bytes) -> str:
    return raw.decode('utf-8', 'replace')


@dataclass
class GitCommit:
    """A git commit with the metadata origins need."""
    hash: str
    parents: Tuple[str, ...]
    author: str
    date: datetime
    message: str
    files: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TreeEntry:
    """One blob of a commit tree, as listed by `git ls-tree -r`."""
    mode: str
    object: str
    path: str

    @property
    def is_symlink(self) -> bool:
        return self.mode == MODE_SYMLINK

    @property
    def is_executable(self) -> bool:
        return self.mode == MODE_EXECUTABLE


class GitClient:
    """
    Abstraction over git commands.

    Commands have no timeout unless one is given; an expired timeout is
    reported as OperationCancelledError.

    Example:
        client = GitClient()
        sha = client.rev_parse("/cache/repo.git", "main")
    """

    def __init__(self, timeout: Optional[float] = None, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: none)
            executable: git binary to run
        """
        self.timeout = timeout
        self.executable = executable

    def _run(
        self,
        args: Sequence[str],
        git_dir: Optional[Union[str, Path]] = None,
        cwd: Optional[Union[str, Path]] = None,
        binary: bool = False,
        input: Optional[bytes] = None,
    ) -> Tuple[Optional[Union[str, bytes]], int]:
        """
        Run a git command.

        Args:
            args: Arguments after 'git'
            git_dir: Repository to run against (--git-dir)
            cwd: Working directory
            binary: Return stdout as bytes instead of text
            input: Bytes fed to stdin

        Returns:
            Tuple of (stdout, returncode); stdout is None if the command
            could not be started
        """
        cmd = [self.executable, '-c', 'core.quotePath=false']
        if git_dir is not None:
            cmd.append(f'--git-dir={git_dir}')
        cmd.extend(args)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                input=input,
                capture_output=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            raise OperationCancelledError(f"git {args[0]} timed out after {self.timeout}s")
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

        if result.returncode != 0 and result.stderr:
            logger.debug(f"git {args[0]} exited {result.returncode}: "
                         f"{_decode_text(result.stderr).strip()}")

        if binary:
            return result.stdout, result.returncode
        return _decode_text(result.stdout), result.returncode

    def _check(self, args: Sequence[str], what: str, **kwargs) -> Union[str, bytes]:
        output, code = self._run(args, **kwargs)
        if code != 0 or output is None:
            raise RepoError(f"Cannot {what} (git exited with {code})")
        return output

    def is_available(self) -> bool:
        """Check that the git executable can be run."""
        _, code = self._run(['--version'])
        return code == 0

    def check_ref_format(self, name: str) -> bool:
        """Check whether name is a syntactically valid branch or tag name."""
        if not name or name.startswith('-'):
            return False
        _, code = self._run(['check-ref-format', '--allow-onelevel', name])
        return code == 0

    def rev_parse(self, git_dir: Union[str, Path], expression: str) -> Optional[str]:
        """
        Resolve an expression to a commit SHA.

        Returns:
            Full SHA, or None if nothing matches
        """
        output, code = self._run(
            ['rev-parse', '--verify', '--quiet', '--end-of-options', f'{expression}^{{commit}}'],
            git_dir=git_dir
        )
        if code == 0 and output:
            return output.strip()
        return None

    def commit_exists(self, git_dir: Union[str, Path], sha: str) -> bool:
        """Check whether a full SHA names a commit in the repository."""
        _, code = self._run(['cat-file', '-e', f'{sha}^{{commit}}'], git_dir=git_dir)
        return code == 0

    def clone_mirror(self, url: str, dest: Union[str, Path]) -> None:
        """Create a bare mirror clone of url at dest."""
        logger.info(f"Cloning {url} into {dest}")
        self._check(['clone', '--mirror', '--quiet', url, str(dest)], f"clone {url}")

    def fetch(self, git_dir: Union[str, Path]) -> None:
        """Update every ref of a mirror clone."""
        logger.info(f"Fetching into {git_dir}")
        self._check(['fetch', '--prune', '--quiet', 'origin'], f"fetch into {git_dir}", git_dir=git_dir)

    def log(self, git_dir: Union[str, Path], revision: str) -> List[GitCommit]:
        """
        Commits reachable from revision, with parents and touched files.

        Files are listed against the first parent (all files for roots),
        without rename detection.

        Returns:
            List of GitCommit objects
        """
        output = self._check(
            ['log', f'--format={_LOG_FORMAT}', '--name-only', '--no-renames',
             '--diff-merges=first-parent', revision, '--'],
            f"read history of {revision}",
            git_dir=git_dir,
            binary=True
        )
        return self.parse_log(output)

    @staticmethod
    def parse_log(output: bytes) -> List[GitCommit]:
        """Parse output produced with the client's log format."""
        commits = []
        for record in output.split(_RS):
            if not record.strip():
                continue
            parts = record.split(_FS, 5)
            if len(parts) < 6:
                continue

            commit_hash, parents, author, date_raw, message, files = parts
            commit_hash = commit_hash.decode('ascii').strip()
            date_str = date_raw.decode('ascii', 'replace').strip()
            try:
                date = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
            except ValueError:
                logger.warning(f"Unparseable date {date_str!r} on {commit_hash}")
                date = datetime.fromtimestamp(0, tz=timezone.utc)

            commits.append(GitCommit(
                hash=commit_hash,
                parents=tuple(parents.decode('ascii').split()),
                author=_decode_text(author).strip(),
                date=date,
                message=_decode_text(message).rstrip('\n'),
                files=tuple(decode_path(line) for line in files.split(b'\n') if line.strip()),
            ))
        return commits

    def ls_tree(self, git_dir: Union[str, Path], sha: str) -> List[TreeEntry]:
        """
        Every blob of a commit tree, recursively.

        Submodule entries (gitlinks) are skipped: they have no content in
        this repository.
        """
        output = self._check(['ls-tree', '-r', '-z', '--full-tree', sha],
                             f"list tree of {sha}", git_dir=git_dir, binary=True)
        entries = []
        for record in output.split(b'\0'):
            if not record:
                continue
            meta, _, raw_path = record.partition(b'\t')
            mode, kind, obj = meta.decode('ascii').split()
            if kind != 'blob':
                continue
            entries.append(TreeEntry(mode=mode, object=obj, path=decode_path(raw_path)))
        return entries

    def read_blobs(self, git_dir: Union[str, Path], objects: Iterable[str]) -> Dict[str, bytes]:
        """
        Raw content of blobs, read in one `git cat-file --batch` call.

        Content is returned exactly as stored: no attributes, filters or
        keyword substitution apply.
        """
        wanted = list(dict.fromkeys(objects))
        if not wanted:
            return {}
        request = ''.join(f'{obj}\n' for obj in wanted).encode('ascii')
        output = self._check(['cat-file', '--batch'], "read blobs",
                             git_dir=git_dir, binary=True, input=request)

        blobs: Dict[str, bytes] = {}
        pos = 0
        for obj in wanted:
            end = output.index(b'\n', pos)
            header = output[pos:end].decode('ascii').split()
            if len(header) != 3:
                raise RepoError(f"Cannot read object {obj}: {' '.join(header[1:]) or 'bad header'}")
            size = int(header[2])
            start = end + 1
            blobs[obj] = output[start:start + size]
            pos = start + size + 1
        return blobs
