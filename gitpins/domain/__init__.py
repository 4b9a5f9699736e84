"""
Domain layer for gitpins.

Contains value objects with no subprocess or network access of their own:
- Repository variants: where a pinned project lives and its URL templates
- GitRevision / GenericVersion: what `update` resolves
- OptionalUrlHashes / ReleasePinHashes: what `fetch` produces
- LenientVersion: loosely SemVer-shaped release versions

These objects are immutable and provide serialization methods for the
lockfile layer.
"""

from .repository import (
    Repository,
    GitRepository,
    GitHubRepository,
    GitLabRepository,
    ForgejoRepository,
    redact_url,
)
from .version import (
    GitRevision,
    GenericVersion,
    OptionalUrlHashes,
    ReleasePinHashes,
    validate_revision,
)
from .semver import LenientVersion, InvalidVersionError, parse_version, try_parse_version

__all__ = [
    'Repository',
    'GitRepository',
    'GitHubRepository',
    'GitLabRepository',
    'ForgejoRepository',
    'redact_url',
    'GitRevision',
    'GenericVersion',
    'OptionalUrlHashes',
    'ReleasePinHashes',
    'validate_revision',
    'LenientVersion',
    'InvalidVersionError',
    'parse_version',
    'try_parse_version',
]
