"""
Error hierarchy for vcsorigin.

Every failure raised by an origin falls in one of two classes:

- ValidationError: a user/configuration fault (malformed reference,
  disallowed author under a strict policy, unusable path filter).
  Never worth retrying; surface it verbatim.
- RepoError: an environment/backend fault (missing revision, I/O or
  network failure, invalid interval, unsupported history, cancellation).
  The caller may retry with its own backoff; vcsorigin itself makes
  exactly one attempt per call.

An empty result is never an error.
"""

from .exit_codes import CONFIG_ERROR, REPO_ERROR


class OriginError(Exception):
    """Base class for all vcsorigin errors."""
    exit_code = REPO_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OriginError):
    """User error: configuration or usage fault. Not retryable."""
    exit_code = CONFIG_ERROR


class RepoError(OriginError):
    """Operational error: environment or backend fault. Retryable by callers."""
    exit_code = REPO_ERROR


class MalformedReferenceError(ValidationError):
    """Reference text is not a revision id, a name, or valid extended syntax."""

    def __init__(self, reference: str, reason: str = "not a valid reference"):
        super().__init__(f"Malformed reference {reference!r}: {reason}")
        self.reference = reference


class DisallowedAuthorError(ValidationError):
    """Author rejected by a strict authoring policy."""

    def __init__(self, raw_author: str):
        super().__init__(f"Author {raw_author!r} is not allowed by the authoring policy")
        self.raw_author = raw_author


class InvalidGlobError(ValidationError):
    """Path filter pattern is malformed."""


class UnsupportedFilterError(ValidationError):
    """Path filter is valid but the backend cannot honor it."""


class RevisionNotFoundError(RepoError):
    """Reference or revision does not exist in the repository."""

    def __init__(self, reference: str, detail: str = ""):
        message = f"Cannot find revision {reference!r}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.reference = reference


class InvalidIntervalError(RepoError):
    """The 'from' revision is not an ancestor of the 'to' revision."""

    def __init__(self, from_rev: str, to_rev: str):
        super().__init__(f"{from_rev} is not an ancestor of {to_rev}")
        self.from_rev = from_rev
        self.to_rev = to_rev


class HistoryNotSupportedError(RepoError):
    """The backend has no notion of history."""


class OperationCancelledError(RepoError):
    """The operation was cancelled or its deadline expired."""


class CheckoutError(RepoError):
    """The revision could not be exported into the working directory."""
