#!/usr/bin/env python3

import click

from gitpins.commands.pin import branch_handler, release_handler
from gitpins.commands.remote import tags_handler, default_branch_handler


@click.group()
@click.version_option(package_name='gitpins')
def cli():
    """gitpins - Pin git repositories to branches or releases.

    Resolves the newest commit of a branch or the newest matching release
    tag, and computes the hash a reproducible fetch needs.
    """
    pass


cli.add_command(branch_handler, name='branch')
cli.add_command(release_handler, name='release')
cli.add_command(tags_handler, name='tags')
cli.add_command(default_branch_handler, name='default-branch')


def main():
    cli()

if __name__ == "__main__":
    main()
