"""
Handles the 'branch' and 'release' commands.

Both run a pin through its lifecycle: `update` to find the newest
version, then `fetch` to hash it. Nothing is written to disk; the output
is what a lockfile would record.

- Default output is JSONL
- --pretty flag for human-readable tables
"""

from typing import Any, Dict, Optional, Tuple

import click

from ..cli_utils import standard_command, repository_options, run_async
from ..diff import diff, properties_of
from ..domain.version import GenericVersion
from ..pins import GitPin, GitReleasePin, Updatable
from ..render import render_diff, render_properties


async def update_pin(pin: Updatable, old=None, fetch: bool = True) -> Tuple[Any, Optional[Any]]:
    """Run `update` and, unless disabled, `fetch` on a pin."""
    version = await pin.update(old)
    hashes = await pin.fetch(version) if fetch else None
    return version, hashes


def pin_result(pin: Updatable, version, hashes) -> Dict[str, Any]:
    """Plain dict of a resolved pin, without credentials."""
    return {
        'pin': dict(pin.properties()),
        'version': version.to_dict(),
        'hashes': hashes.to_dict() if hashes is not None else None,
    }


def render_pin(pin: Updatable, version, hashes, old=None) -> None:
    render_properties(pin.properties(), title="Pin")
    if old is not None:
        render_diff(diff(properties_of(old), properties_of(version)), title="Changes")
    else:
        render_properties(version.properties(), title="Version")
    if hashes is not None:
        render_properties(hashes.properties(), title="Hashes")


@click.command('branch')
@click.argument('branch')
@click.option('--submodules', is_flag=True, help='Also fetch submodules (forces a full clone hash)')
@click.option('--no-fetch', is_flag=True, help='Only resolve the revision, do not compute a hash')
@click.option('--pretty', is_flag=True, help='Show tables instead of JSON')
@repository_options
@standard_command
def branch_handler(repository, branch: str, submodules: bool, no_fetch: bool, pretty: bool):
    """
    Track the latest commit of BRANCH.

    \b
    Examples:
        gitpins branch main --github NixOS/nixpkgs
        gitpins branch master --gitlab maxigaz/gitlab-dark --no-fetch
    """
    pin = GitPin(repository=repository, branch=branch, submodules=submodules)
    version, hashes = run_async(update_pin(pin, fetch=not no_fetch))

    if pretty:
        render_pin(pin, version, hashes)
        return None
    return pin_result(pin, version, hashes)


@click.command('release')
@click.option('--pre-releases', is_flag=True, help='Also consider pre-releases')
@click.option('--upper-bound', 'version_upper_bound', metavar='VERSION',
              help='Only consider releases strictly lower than VERSION')
@click.option('--release-prefix', metavar='PREFIX',
              help='Only consider tags starting with PREFIX (stripped before comparing)')
@click.option('--submodules', is_flag=True, help='Also fetch submodules (forces a full clone hash)')
@click.option('--old', 'old_version', metavar='VERSION',
              help='Currently pinned version; the new one must not be older')
@click.option('--no-fetch', is_flag=True, help='Only resolve the version, do not compute a hash')
@click.option('--pretty', is_flag=True, help='Show tables instead of JSON')
@repository_options
@standard_command
def release_handler(
    repository,
    pre_releases: bool,
    version_upper_bound: Optional[str],
    release_prefix: Optional[str],
    submodules: bool,
    old_version: Optional[str],
    no_fetch: bool,
    pretty: bool,
):
    """
    Track the latest release tag.

    \b
    Examples:
        gitpins release --github jstutters/MidiOSC
        gitpins release --forgejo https://git.lix.systems lix-project/lix --upper-bound 2.91
        gitpins release --git https://example.org/repo.git --release-prefix release/ --old 1.2
    """
    pin = GitReleasePin(
        repository=repository,
        pre_releases=pre_releases,
        version_upper_bound=version_upper_bound,
        release_prefix=release_prefix,
        submodules=submodules,
    )
    old = GenericVersion(version=old_version) if old_version is not None else None
    version, hashes = run_async(update_pin(pin, old, fetch=not no_fetch))

    if pretty:
        render_pin(pin, version, hashes, old=old)
        return None
    return pin_result(pin, version, hashes)
