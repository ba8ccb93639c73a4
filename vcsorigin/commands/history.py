"""
History commands: 'changes' lists an interval, 'show' a single change.
"""

import click

from ..cli_utils import standard_command, add_common_options, glob_from_options
from ..render import render_changes_table
from ..services import authoring_from_config, create_origin, plan_migration


@click.command(name='changes')
@click.argument('origin')
@click.argument('reference')
@click.option('--from', 'from_ref', default=None,
              help='Last migrated revision (excluded); default: full history')
@add_common_options('include', 'exclude', 'format', 'table', 'verbose', 'quiet')
@standard_command
def changes_handler(origin, reference, from_ref, include, exclude, table, quiet, config, **kwargs):
    """List changes in (FROM, REFERENCE], oldest first.

    Without --from, lists the whole history of REFERENCE.
    Origins without history list a single snapshot change.

    Examples:

    \b
        vcsorigin changes git:~/src/repo main
        vcsorigin changes git:~/src/repo main --from 4f1c2e...
        vcsorigin changes git:~/src/repo main -i 'src/**' --table
    """
    origin_obj = create_origin(origin, config)
    plan = plan_migration(
        origin_obj,
        reference,
        glob_from_options(include, exclude),
        authoring_from_config(config),
        last_migrated=from_ref,
    )

    if table and not quiet:
        render_changes_table(plan.changes, title=f"{reference} ({len(plan.changes)} changes)")
        return None
    return (change.to_dict() for change in plan.changes)


@click.command(name='show')
@click.argument('origin')
@click.argument('reference')
@add_common_options('include', 'exclude', 'format', 'table', 'verbose', 'quiet')
@standard_command
def show_handler(origin, reference, include, exclude, table, quiet, config, **kwargs):
    """Show the change for a single revision.

    Examples:

    \b
        vcsorigin show git:~/src/repo HEAD~1
    """
    origin_obj = create_origin(origin, config)
    reader = origin_obj.new_reader(glob_from_options(include, exclude), authoring_from_config(config))
    change = reader.change(origin_obj.resolve(reference))

    if table and not quiet:
        render_changes_table([change])
        return None
    return change.to_dict()
