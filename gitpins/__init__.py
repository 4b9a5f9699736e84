"""
gitpins - Pin git repositories to branches or releases.

gitpins resolves what a pinned git dependency should point to and how the
result hashes, so it can be fetched reproducibly later.

Quick Start:
    import asyncio
    from gitpins import GitHubRepository, GitPin, GitReleasePin

    repo = GitHubRepository(owner="NixOS", repo="nixpkgs")

    # Latest commit of a branch
    pin = GitPin(repository=repo, branch="nixos-unstable")
    revision = asyncio.run(pin.update())

    # Latest release, restricted to 1.x
    pin = GitReleasePin(repository=repo, version_upper_bound="2.0")
    version = asyncio.run(pin.update())
    hashes = asyncio.run(pin.fetch(version))

Domain Objects:
    Repository - Where a pinned project lives (Git, GitHub, GitLab, Forgejo)
    GitRevision, GenericVersion - Resolved versions
    OptionalUrlHashes, ReleasePinHashes - Hashes of resolved versions
    LenientVersion - Loosely SemVer-shaped release versions

Pins:
    GitPin - Track the latest commit of a branch
    GitReleasePin - Track the latest release tag
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    Repository,
    GitRepository,
    GitHubRepository,
    GitLabRepository,
    ForgejoRepository,
    GitRevision,
    GenericVersion,
    OptionalUrlHashes,
    ReleasePinHashes,
    LenientVersion,
)

# Pins
from .pins import Updatable, GitPin, GitReleasePin

# Release selection and change presentation
from .services import latest_release, LatestRelease
from .diff import diff, PropertyChange

__all__ = [
    '__version__',
    'Repository',
    'GitRepository',
    'GitHubRepository',
    'GitLabRepository',
    'ForgejoRepository',
    'GitRevision',
    'GenericVersion',
    'OptionalUrlHashes',
    'ReleasePinHashes',
    'LenientVersion',
    'Updatable',
    'GitPin',
    'GitReleasePin',
    'latest_release',
    'LatestRelease',
    'diff',
    'PropertyChange',
]
