"""
Handles the 'resolve' command: reference text to revision.
"""

import click

from ..cli_utils import standard_command, add_common_options
from ..render import render_reference
from ..services import create_origin


@click.command(name='resolve')
@click.argument('origin')
@click.argument('reference')
@add_common_options('format', 'table', 'verbose', 'quiet')
@standard_command
def resolve_handler(origin, reference, table, quiet, config, **kwargs):
    """Resolve REFERENCE in ORIGIN to an immutable revision.

    ORIGIN is git:<url>, folder:<dir> or a configured origin name.

    Examples:

    \b
        vcsorigin resolve git:https://github.com/user/repo.git main
        vcsorigin resolve git:~/src/repo v1.2~3 --table
        vcsorigin resolve folder: ./snapshot
    """
    origin_obj = create_origin(origin, config)
    ref = origin_obj.resolve_reference(reference)
    result = ref.to_dict()
    result['label_name'] = origin_obj.get_label_name()

    if table and not quiet:
        render_reference(ref)
        return None
    return result
