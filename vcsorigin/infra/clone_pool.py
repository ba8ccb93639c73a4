"""
Local clone pool for vcsorigin.

Backends that keep a local clone per repository location use the pool to
find its path and to serialize work on it: at most one lease per location
is active at a time, across every Origin and Reader in the process.
"""

import hashlib
import logging
import re
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Union

logger = logging.getLogger(__name__)

_LOCKS: Dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def location_key(location: str) -> str:
    """Normalize a repository location so equivalent spellings share a lock."""
    location = location.strip()
    if '://' not in location and not re.match(r'^[\w.-]+@[\w.-]+:', location):
        location = str(Path(location).expanduser().absolute())
    return location.rstrip('/')


def _lock_for(key: str) -> threading.Lock:
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCKS[key] = lock
        return lock


class ClonePool:
    """
    Maps repository locations to cached clone directories.

    Example:
        pool = ClonePool("~/.cache/vcsorigin")
        with pool.lease("https://github.com/user/repo.git") as clone_dir:
            ...  # exclusive access to clone_dir
    """

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir).expanduser()

    def path_for(self, location: str) -> Path:
        """Cache directory for a location (not created)."""
        key = location_key(location)
        digest = hashlib.sha1(key.encode('utf-8')).hexdigest()[:16]
        slug = re.sub(r'[^\w.-]+', '_', key.rsplit('/', 1)[-1])[:40] or 'repo'
        return self.cache_dir / f"{slug}-{digest}"

    @contextmanager
    def lease(self, location: str) -> Iterator[Path]:
        """Exclusive access to the clone directory of a location."""
        key = location_key(location)
        lock = _lock_for(key)
        if not lock.acquire(blocking=False):
            logger.debug(f"Waiting for clone of {key}")
            lock.acquire()
        try:
            yield self.path_for(location)
        finally:
            lock.release()
