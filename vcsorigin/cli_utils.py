"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import click
from functools import wraps
from typing import Tuple

from .config import load_config, setup_logging
from .domain import Glob
from .errors import OriginError
from .exit_codes import SUCCESS, INTERRUPTED, get_exit_code_for_exception
from .format_utils import FORMATS, format_output

logger = logging.getLogger(__name__)


def _emit_error(e: Exception, quiet: bool) -> None:
    if quiet:
        return
    error_obj = {
        "error": str(e),
        "type": type(e).__name__,
        "exit_code": get_exit_code_for_exception(e),
    }
    print(json.dumps(error_obj, ensure_ascii=False), flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Configuration loading and logging setup (injected as 'config')
    - Clean JSONL/JSON/YAML output on stdout
    - Logs on stderr (-v for info, -vv for debug)
    - Consistent error handling and exit codes
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.pop('verbose', 0)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.pop('format', None) or 'jsonl'

        config = load_config()
        if verbose:
            config['logging']['level'] = 'DEBUG' if verbose > 1 else 'INFO'
        setup_logging(config)
        kwargs['config'] = config

        try:
            result = func(*args, **kwargs)

            if result is None or quiet:
                # Command handled its own output
                pass
            elif isinstance(result, dict):
                for line in format_output(iter([result]), output_format):
                    print(line, flush=True)
            else:
                for line in format_output(iter(result), output_format):
                    print(line, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except OriginError as e:
            logger.error(str(e))
            _emit_error(e, quiet)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            _emit_error(e, quiet)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', count=True,
                            help='Log progress on stderr (-vv for debug)'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output'),
    'format': click.option('-f', '--format', type=click.Choice(FORMATS),
                           help='Output format (default: jsonl)'),
    'table': click.option('--table', is_flag=True,
                          help='Display as formatted table'),
    'include': click.option('-i', '--include', 'include', multiple=True,
                            help='Include glob (repeatable, default: **)'),
    'exclude': click.option('-x', '--exclude', 'exclude', multiple=True,
                            help='Exclude glob (repeatable)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'include', 'exclude')
        def my_command(verbose, include, exclude):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def glob_from_options(include: Tuple[str, ...], exclude: Tuple[str, ...]) -> Glob:
    """Build the path filter from -i/-x options."""
    return Glob.from_patterns(include, exclude)
