"""
Handles the 'tags' and 'default-branch' commands.

Thin wrappers around `git ls-remote` for inspecting a repository before
pinning it.
"""

import click

from ..cli_utils import standard_command, repository_options, run_async
from ..infra.git_client import GitRemoteClient
from ..render import render_tags, console


@click.command('tags')
@click.option('--pretty', is_flag=True, help='Show a table instead of JSON')
@repository_options
@standard_command
def tags_handler(repository, pretty: bool):
    """
    List the tags of a repository.

    Annotated tags are listed as they come from the remote, without
    deduplication.
    """
    tags = run_async(GitRemoteClient().list_tags(repository.clone_url()))

    if pretty:
        render_tags([(info.ref, info.revision) for info in tags])
        return None
    return ({'ref': info.ref, 'revision': info.revision} for info in tags)


@click.command('default-branch')
@click.option('--pretty', is_flag=True, help='Print only the branch name')
@repository_options
@standard_command
def default_branch_handler(repository, pretty: bool):
    """Show the branch the remote HEAD points to."""
    branch = run_async(GitRemoteClient().default_branch(repository.clone_url()))

    if pretty:
        console.print(branch)
        return None
    return {'repository': repository.display_url(), 'default_branch': branch}
