"""
Infrastructure layer for gitpins.

Contains abstractions for external systems:
- GitRemoteClient: `git ls-remote` execution and parsing
- GitHubClient: GitHub API access (commit timestamps)
- Prefetcher / NixPrefetcher: content hashing of tarballs and checkouts

These provide clean interfaces that can be replaced with fakes for testing.
"""

from .git_client import GitRemoteClient, RemoteInfo, parse_ls_remote_output
from .github_client import GitHubClient
from .prefetch import Prefetcher, NixPrefetcher

__all__ = [
    'GitRemoteClient',
    'RemoteInfo',
    'parse_ls_remote_output',
    'GitHubClient',
    'Prefetcher',
    'NixPrefetcher',
]
