"""
Handles the 'checkout' command: materialize a revision into a directory.
"""

import click

from ..cli_utils import standard_command, add_common_options, glob_from_options
from ..infra.workdir import list_files
from ..services import authoring_from_config, create_origin


@click.command(name='checkout')
@click.argument('origin')
@click.argument('reference')
@click.argument('workdir', type=click.Path(file_okay=False))
@add_common_options('include', 'exclude', 'format', 'verbose', 'quiet')
@standard_command
def checkout_handler(origin, reference, workdir, include, exclude, quiet, config, **kwargs):
    """Check out REFERENCE into WORKDIR, keeping only files matching the filter.

    WORKDIR is replaced as a whole: files from earlier checkouts are
    removed. If the checkout fails, WORKDIR is left as it was.

    Examples:

    \b
        vcsorigin checkout git:~/src/repo main /tmp/work -i 'src/**' -x '**/*_test.py'
    """
    origin_obj = create_origin(origin, config)
    reader = origin_obj.new_reader(glob_from_options(include, exclude), authoring_from_config(config))
    revision = origin_obj.resolve(reference)
    reader.checkout(revision, workdir)

    files = list_files(workdir)
    return {
        'revision': revision.as_string(),
        'workdir': str(workdir),
        'files': len(files),
    }
