"""
Output format utilities for vcsorigin CLI commands.

Provides functions to format data as JSON, JSONL and YAML.
"""

import json
from typing import Dict, Any, Iterator
import yaml

FORMATS = ('jsonl', 'json', 'yaml')


def format_output(data: Iterator[Dict[str, Any]], format: str) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterator of dictionaries to format
        format: Output format (json, jsonl, yaml)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "yaml":
        yield from format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    # Collect all data (needed for JSON array)
    all_data = list(data)
    yield json.dumps(all_data, ensure_ascii=False, indent=2)


def format_yaml(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    # Collect all data (needed for YAML document)
    all_data = list(data)
    yield yaml.dump(all_data, default_flow_style=False, allow_unicode=True, sort_keys=False)
