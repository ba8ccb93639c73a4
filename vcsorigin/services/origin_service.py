"""
Origin service for vcsorigin.

Builds origins from textual specs or configuration, and runs the
read-side half of a migration: resolve the target, find where the last
run stopped, and list the changes to replay.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from ..config import load_config
from ..domain import Authoring, Change, Glob, Reference, Revision
from ..errors import ValidationError
from ..infra.git_client import GitClient
from ..labels import last_label_value
from ..origin import AuthoringPolicy, Origin, Reader
from ..origins import FolderOrigin, GitOrigin
from ..origins.folder import DEFAULT_AUTHOR, DEFAULT_MESSAGE

logger = logging.getLogger(__name__)

ORIGIN_TYPES = ('git', 'folder')


@dataclass(frozen=True)
class MigrationPlan:
    """
    What a migration run has to replay.

    Attributes:
        reference: Resolved target reference
        changes: Changes to replay, oldest first
        label_name: Label the destination must store the last revision under
        last_migrated: Revision the previous run stopped at, if any
        reader: Reader to check the changes out with
    """
    reference: Reference
    changes: Tuple[Change, ...]
    label_name: str
    last_migrated: Optional[Revision] = None
    reader: Optional[Reader] = field(default=None, compare=False, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reference': self.reference.to_dict(),
            'label_name': self.label_name,
            'last_migrated': self.last_migrated.as_string() if self.last_migrated else None,
            'changes': [c.to_dict() for c in self.changes],
        }


def _timeout_seconds(value: Any) -> Optional[float]:
    """Git command timeout from config; 0 or empty means no timeout."""
    if value in (None, ''):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"git_timeout_seconds must be a number, got {value!r}") from None
    if seconds < 0:
        raise ValidationError(f"git_timeout_seconds must not be negative, got {value!r}")
    return seconds or None


def _origin_from_settings(settings: Dict[str, Any], config: Dict[str, Any]) -> Origin:
    origin_type = settings.get('type')
    general = config.get('general', {})
    if origin_type == 'git':
        url = settings.get('url')
        if not url:
            raise ValidationError("git origin requires a 'url'")
        timeout = _timeout_seconds(general.get('git_timeout_seconds'))
        return GitOrigin(
            url,
            cache_dir=settings.get('cache_dir', general.get('cache_dir', '~/.cache/vcsorigin')),
            git_client=GitClient(timeout=timeout),
            fetch=settings.get('fetch', True),
        )
    if origin_type == 'folder':
        folder = config.get('folder', {})
        return FolderOrigin(
            base_dir=settings.get('path') or None,
            author=settings.get('author') or folder.get('author') or DEFAULT_AUTHOR,
            message=settings.get('message') or folder.get('message') or DEFAULT_MESSAGE,
        )
    raise ValidationError(
        f"Unknown origin type {origin_type!r} (expected one of: {', '.join(ORIGIN_TYPES)})")


def create_origin(spec: str, config: Optional[Dict[str, Any]] = None) -> Origin:
    """
    Create an origin from a spec.

    Accepted specs:
        git:<url or path>     GitOrigin
        folder:[<base dir>]   FolderOrigin
        <name>                origin configured under config['origins']

    Raises:
        ValidationError: if the spec is unknown or incomplete
    """
    config = config or load_config()
    spec = (spec or '').strip()

    named = config.get('origins', {}).get(spec)
    if named is not None:
        logger.debug(f"Using configured origin {spec!r}")
        return _origin_from_settings(named, config)

    origin_type, sep, location = spec.partition(':')
    if not sep or origin_type not in ORIGIN_TYPES:
        raise ValidationError(f"Unknown origin {spec!r}: use git:<url>, folder:<dir> or a configured name")
    key = 'url' if origin_type == 'git' else 'path'
    return _origin_from_settings({'type': origin_type, key: location}, config)


def authoring_from_config(config: Optional[Dict[str, Any]] = None) -> Authoring:
    """Authoring policy from the 'authoring' config section."""
    config = config or load_config()
    return Authoring.from_config(config.get('authoring', {}))


def last_migrated_revision(messages: Iterable[str], label_name: str) -> Optional[str]:
    """
    Revision string recorded by the destination, if any.

    Args:
        messages: Destination change messages, newest first
        label_name: Origin.get_label_name() of the origin being migrated
    """
    return last_label_value(messages, label_name)


def plan_migration(
    origin: Origin,
    reference: str,
    glob: Glob,
    authoring: AuthoringPolicy,
    last_migrated: Optional[str] = None,
) -> MigrationPlan:
    """
    Resolve 'reference' and list the changes since 'last_migrated'.

    Origins without history yield a single-change plan for the snapshot.

    Raises:
        ValidationError: on malformed references, globs or disallowed authors
        RepoError: on missing revisions, invalid intervals or backend failures
    """
    reader = origin.new_reader(glob, authoring)
    target = origin.resolve_reference(reference)
    from_rev = origin.resolve(last_migrated) if last_migrated else None

    if reader.supports_history():
        changes = reader.changes(from_rev, target.revision)
    else:
        changes = [reader.change(target.revision)]

    logger.info(f"{len(changes)} change(s) to migrate from {reference}")
    return MigrationPlan(
        reference=target,
        changes=tuple(changes),
        label_name=origin.get_label_name(),
        last_migrated=from_rev,
        reader=reader,
    )
