#!/usr/bin/env python3

import click

from vcsorigin.commands.resolve import resolve_handler
from vcsorigin.commands.history import changes_handler, show_handler
from vcsorigin.commands.checkout import checkout_handler


@click.group()
@click.version_option(package_name='vcsorigin')
def cli():
    """vcsorigin - Read source history from any version-control backend.

    Resolves references, lists the changes between two revisions and
    checks revisions out under a path filter, for git repositories and
    plain folders alike.
    """
    pass


cli.add_command(resolve_handler, name='resolve')
cli.add_command(changes_handler, name='changes')
cli.add_command(show_handler, name='show')
cli.add_command(checkout_handler, name='checkout')


def main():
    cli()

if __name__ == "__main__":
    main()
