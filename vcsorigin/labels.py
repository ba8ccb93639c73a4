"""
Message labels for vcsorigin.

A label is a "Name: value" (or "Name=value") line in a change message.
Origins expose labels parsed from their messages, and destinations record
the last migrated revision as a label named by Origin.get_label_name(),
e.g. "GitOrigin-RevId: 4f1c...". Label names are letters, digits, '_' and
'-'.
"""

import re
from typing import Dict, Iterable, Iterator, Optional, Tuple

LABEL_RE = re.compile(r'^(?P<name>[A-Za-z][\w-]*)\s*[:=]\s?(?P<value>.*?)\s*$')

# URL schemes look like labels ("https://...") but never are.
_NOT_LABEL_VALUE = re.compile(r'^//')


def iter_labels(message: str) -> Iterator[Tuple[str, str]]:
    """Yield (name, value) for every label line, in message order."""
    for line in (message or '').splitlines():
        match = LABEL_RE.match(line)
        if not match:
            continue
        value = match.group('value')
        if _NOT_LABEL_VALUE.match(value):
            continue
        yield match.group('name'), value


def parse_labels(message: str) -> Dict[str, str]:
    """
    Parse all labels of a message.

    When a name appears more than once, the last occurrence wins.
    """
    labels: Dict[str, str] = {}
    for name, value in iter_labels(message):
        labels[name] = value
    return labels


def find_label(message: str, name: str) -> Optional[str]:
    """Value of the last 'name' label in the message, or None."""
    found = None
    for label, value in iter_labels(message):
        if label == name:
            found = value
    return found


def format_label(name: str, value: str) -> str:
    """Render a label line."""
    if not LABEL_RE.match(f"{name}: x"):
        raise ValueError(f"Invalid label name: {name!r}")
    return f"{name}: {value}"


def last_label_value(messages: Iterable[str], name: str) -> Optional[str]:
    """
    First value of label 'name' found walking messages in the given order.

    Callers pass destination messages newest first.
    """
    for message in messages:
        value = find_label(message, name)
        if value:
            return value
    return None
